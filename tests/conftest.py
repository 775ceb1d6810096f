"""Pytest fixtures: a throwaway SQLite database and an HTTP client bound to the app."""
import os
import tempfile

# Settings are read at import time, so they must be in place before mdfury loads
_db_dir = tempfile.mkdtemp(prefix="mdfury-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["INVITE_KEY"] = "test-invite-key"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("REDIS_URL", None)

import httpx  # noqa: E402
import pytest  # noqa: E402

from mdfury.core.config import config  # noqa: E402
from mdfury.core.security import create_access_token, get_password_hash  # noqa: E402
from mdfury.database import models  # noqa: E402,F401
from mdfury.database.database_factory import (async_session_maker, create_tables,  # noqa: E402
                                              drop_tables, engine)
from mdfury.database.repositories.user_repository import UserRepository  # noqa: E402
from mdfury.main import app  # noqa: E402


@pytest.fixture
async def database():
    await drop_tables()
    await create_tables()
    yield
    await engine.dispose()


@pytest.fixture
async def db(database):
    async with async_session_maker() as session:
        yield session


@pytest.fixture
async def client(database):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def registration_settings(monkeypatch):
    """Reset the registration switches for each test that touches them"""
    monkeypatch.setattr(config, "DISABLE_REGISTRATION", False)
    monkeypatch.setattr(config, "REQUIRE_INVITE_CODE", False)
    return config


@pytest.fixture
def make_user(db):
    """Create a user directly in the database and return ``(user, auth_headers)``"""

    async def _make_user(username: str, password: str = "secret123"):
        user = await UserRepository(db).insert_user({
            "username": username,
            "email": f"{username}@example.com",
            "hashed_password": get_password_hash(password),
            "display_name": username.title(),
            "is_active": True
        })
        token = create_access_token(data={"sub": user.email, "fp": user.fp})
        return user, {"Authorization": f"Bearer {token}"}

    return _make_user
