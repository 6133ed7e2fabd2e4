import logging
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from portfolio_api.core.config import Settings
from portfolio_api.core.exceptions import NotConfiguredError

logger = logging.getLogger(__name__)

# Базовый класс для моделей
Base = declarative_base()


class Database:
    """Движок и фабрика сессий; создаётся при старте процесса и закрывается при остановке"""

    def __init__(self, settings: Settings):
        if not settings.database_url:
            raise NotConfiguredError("Database not configured")

        self.url = settings.database_url
        self.engine: AsyncEngine = create_async_engine(self.url, **self._engine_options(settings))
        self.session_factory = async_sessionmaker(bind=self.engine, class_=AsyncSession, expire_on_commit=False)

    def _engine_options(self, settings: Settings) -> dict:
        # SQLite (локально и в тестах) не принимает параметры пула
        if self.url.startswith("sqlite"):
            return {}
        return {
            "pool_size": settings.db_pool_size,
            "max_overflow": 0,
            "pool_timeout": settings.db_pool_timeout,
            "pool_pre_ping": True,
            "connect_args": {"timeout": settings.db_connect_timeout},
        }

    async def create_all(self) -> None:
        """Создание таблиц (без миграций)"""
        # Регистрация моделей в метаданных
        import portfolio_api.db.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")


def get_database(request: Request) -> Database:
    database: Optional[Database] = getattr(request.app.state, "db", None)
    if database is None:
        raise NotConfiguredError("Database not configured")
    return database


# Функция для dependency injection в FastAPI
async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    database = get_database(request)
    async with database.session_factory() as session:
        yield session


async def get_optional_db(request: Request) -> AsyncIterator[Optional[AsyncSession]]:
    """Как get_db, но без хранилища отдаёт None вместо ошибки"""
    database: Optional[Database] = getattr(request.app.state, "db", None)
    if database is None:
        yield None
        return
    async with database.session_factory() as session:
        yield session
