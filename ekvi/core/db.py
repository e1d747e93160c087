from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from .config import settings
from .base import Base

engine = create_async_engine(settings.POSTGRES_DSN, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

async def get_session():
    async with SessionLocal() as session:
        yield session

async def init_models():
    # In "migrations" mode the schema is owned by the migration tool
    if settings.DB_MANAGE == "create_all":
        # register every mapped table on Base.metadata
        from ekvi.modules.profiles import models as _profiles  # noqa: F401
        from ekvi.modules.videos import models as _videos  # noqa: F401
        from ekvi.modules.events import outbox as _outbox  # noqa: F401
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
