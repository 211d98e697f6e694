"""
ScoreHub: pytest fixtures.

Provides:
- A fresh file-backed SQLite database per test
- Session factory / session fixtures wired to that database
- An HTTP client over the ASGI app with DB dependencies overridden
- Helpers to register users and obtain bearer headers
"""
import os

os.environ.setdefault("ENV", "test")

from pathlib import Path
from typing import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scorehub.api import deps
from scorehub.config import settings
from scorehub.db.models import Base, User
from scorehub.db.session import create_engine_for_url, make_session_factory
from scorehub.core.users.service import UserService


@pytest_asyncio.fixture
async def engine(tmp_path: Path):
    eng = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'scorehub-test.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    await eng.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory, monkeypatch) -> AsyncIterator[httpx.AsyncClient]:
    from scorehub.main import app

    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[deps.get_db] = _get_db
    app.dependency_overrides[deps.get_session_factory] = lambda: session_factory

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


async def create_user(session: AsyncSession, display_name: str = "Coach") -> User:
    return await UserService(session).register_user(display_name)


async def register_and_login(client: httpx.AsyncClient, display_name: str = "Coach") -> tuple[dict, dict]:
    """Register through the API; return (user payload, bearer headers)."""
    r = await client.post("/api/v1/users", json={"display_name": display_name})
    assert r.status_code == 201, r.text
    user = r.json()

    r = await client.post("/api/v1/auth/login", json={"access_code": user["access_code"]})
    assert r.status_code == 200, r.text
    token = r.json()["access_token"]
    return user, {"Authorization": f"Bearer {token}"}
