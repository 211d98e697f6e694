import asyncio
import time
import uuid
from typing import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scorehub.config import settings
from scorehub.db.models.user import User
from scorehub.db.session import AsyncSessionLocal, get_db_session
from scorehub.utils.exceptions import TooManyRequestsException, UnauthorizedException
from scorehub.utils.security import decode_token

reusable_oauth2 = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


_rate_limit_lock = asyncio.Lock()
_rate_limit_counters: dict[tuple[int, str], int] = {}


async def rate_limit(request: Request) -> None:
    if not settings.RATE_LIMIT_ENABLED:
        return

    client_host = (request.client.host if request.client else None) or "unknown"
    window_seconds = max(1, int(settings.RATE_LIMIT_WINDOW_SECONDS))
    limit = max(1, int(settings.RATE_LIMIT_REQUESTS_PER_WINDOW))
    bucket = int(time.monotonic() // window_seconds)
    key = (bucket, client_host)

    async with _rate_limit_lock:
        current = _rate_limit_counters.get(key, 0) + 1
        _rate_limit_counters[key] = current

        # Only the current and previous windows are ever read.
        for stale in [k for k in _rate_limit_counters if k[0] < bucket - 1]:
            del _rate_limit_counters[stale]

    if current > limit:
        raise TooManyRequestsException(
            details={
                "window_seconds": window_seconds,
                "limit": limit,
            }
        )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db_session():
        yield session


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Factory for reads that fan out over several sessions at once."""
    return AsyncSessionLocal


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str | None = Depends(reusable_oauth2),
) -> User:
    if not token:
        raise UnauthorizedException("Could not validate credentials")

    payload = decode_token(token)
    if not payload:
        raise UnauthorizedException("Could not validate credentials")

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedException("Could not validate credentials")

    user = await db.get(User, user_id)
    if user is None:
        raise UnauthorizedException("User not found")
    return user
