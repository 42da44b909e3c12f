"""
Run: python -m scripts.drop
Drops all imported data from the database (companies are kept).
"""
import asyncio
from sqlalchemy import text
from painel.database import async_session

async def drop_all():
    async with async_session() as session:
        print("Dropping imported data...")
        print("=" * 50)

        # Children first to respect foreign key constraints
        tables = [
            "sales_lines",
            "service_order_lines",
            "upload_history",
        ]

        for table in tables:
            print(f"Truncating {table}...")
            await session.execute(text(f"TRUNCATE TABLE {table} CASCADE"))

        await session.commit()

        print("=" * 50)
        print("Imported data dropped successfully!")
        print()
        print("Companies were kept. Re-run imports with POST /api/v1/imports")

if __name__ == "__main__":
    asyncio.run(drop_all())
