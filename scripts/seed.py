"""
Run: python -m scripts.seed
Seeds the companies that may receive imports during development.
"""
import asyncio
from uuid import uuid4
from sqlalchemy import func, insert, select
from painel.database import async_session
from painel.models.base import Company

COMPANIES = [
    ("Ótica Central", "12.345.678/0001-90", True),
    ("Ótica Boa Vista", "98.765.432/0001-10", True),
    ("Ótica Antiga", "11.222.333/0001-44", False),
]

async def seed():
    async with async_session() as session:
        # Check if already seeded
        result = await session.execute(select(func.count()).select_from(Company))
        if result.scalar() > 0:
            print("Database already has companies, nothing to seed.")
            return

        for name, cnpj, active in COMPANIES:
            await session.execute(insert(Company).values(
                id=uuid4(), name=name, cnpj=cnpj, active=active,
            ))

        await session.commit()

        print("=" * 50)
        print("SEED COMPLETE")
        print("=" * 50)
        for name, cnpj, active in COMPANIES:
            print(f"  {name:<20} {cnpj}  {'active' if active else 'inactive'}")
        print("=" * 50)

if __name__ == "__main__":
    asyncio.run(seed())
