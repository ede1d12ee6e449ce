import asyncio
import functools
from typing import Awaitable, TypeVar

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from food_storefront.config import settings
from food_storefront.exceptions import StorageTimeout

T = TypeVar("T")

# Асинхронный движок
engine = create_async_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO, future=True)

# Фабрика сессий
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def bounded(awaitable: Awaitable[T], timeout: float | None = None) -> T:
    """
    Ограничивает время обращения к базе.
    По истечении таймаута поднимает StorageTimeout, вызов можно повторить.
    """
    limit = settings.DB_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        return await asyncio.wait_for(awaitable, timeout=limit)
    except asyncio.TimeoutError as exc:
        raise StorageTimeout(f"Storage call exceeded {limit}s") from exc


def with_timeout(func):
    """Декоратор для crud-функций: вся операция укладывается в DB_TIMEOUT_SECONDS."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        return await bounded(func(*args, **kwargs))

    return wrapper
