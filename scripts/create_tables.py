"""
Run: python -m scripts.create_tables
Creates every table declared in painel.models (existing tables are left alone).
"""
import asyncio
from painel.database import engine
from painel.models.base import Base

async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    print("=" * 50)
    for table in Base.metadata.sorted_tables:
        print(f"  ✓ {table.name}")
    print("=" * 50)
    print("Tables ready. Next: python -m scripts.seed")

    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(create_tables())
