from functools import wraps
from typing import Callable, AsyncGenerator
import asyncio
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import DBAPIError
from fastapi import HTTPException, status


def with_db_retry(max_retries: int = 3, delay: int = 1):
    """
    Retry opening a database session when the connection itself fails.

    Only failures before the session is handed out are retried. Errors raised
    by the request handler roll the session back and propagate unchanged.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> AsyncGenerator[AsyncSession, None]:
            last_error = None
            for attempt in range(max_retries):
                handed_out = False
                try:
                    async for session in func(*args, **kwargs):
                        handed_out = True
                        try:
                            yield session
                        except Exception:
                            await session.rollback()
                            raise
                        finally:
                            await session.close()
                    return
                except DBAPIError as e:
                    if handed_out:
                        raise
                    last_error = e
                    if attempt < max_retries - 1:
                        await asyncio.sleep(delay * (2**attempt))
                    continue

            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Database connection failed after {max_retries} attempts",
            ) from last_error

        return wrapper

    return decorator
