from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from painel.config import settings

engine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,
    connect_args={"ssl": "require"} if settings.database_ssl else {},
)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

async def get_db():
    async with async_session() as session:
        yield session
