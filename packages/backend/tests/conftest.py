"""Test fixtures — one isolated app + SQLite database per test.

Learn: Testing pattern for the app factory + async SQLAlchemy:

1. Each test builds its own Settings pointing at a throwaway SQLite file
   (aiosqlite driver) and a tmp upload directory.
2. create_app(settings) wires the token codec, storage and engine from
   those settings, so nothing global needs patching or overriding.
3. Tables are created with Base.metadata.create_all before the test and
   the engine is disposed after it; the tmp directory goes away with it.

HTTP tests drive the ASGI app in-process with httpx's ASGITransport.
The gate is never overridden: authenticated requests carry a real token
issued by the app's own TokenCodec.
"""

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from kitchenhand.config import Settings
from kitchenhand.db.models import Base
from kitchenhand.main import create_app
from kitchenhand.services.user_service import UserService

TEST_SECRET = "test-secret-key-for-jwt-signing-32chars"
TEST_PASSWORD = "sharp-knives-42"


@pytest.fixture()
def settings(tmp_path):
    """Settings for one test — no env vars, no .env file."""
    static_dir = tmp_path / "static"
    return Settings(
        _env_file=None,
        jwt_secret=TEST_SECRET,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'kitchen.db'}",
        static_dir=str(static_dir),
        upload_dir=str(static_dir / "uploads"),
        bcrypt_rounds=4,
        max_upload_bytes=64 * 1024,
    )


@pytest_asyncio.fixture()
async def app(settings):
    app = create_app(settings)
    async with app.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield app
    finally:
        await app.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def db_session(app):
    """A session on the same database the app uses."""
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture()
def tokens(app):
    return app.state.tokens


@pytest_asyncio.fixture()
async def staff_user(db_session):
    return await UserService(db_session).create_user(
        "chef", "chef@kitchen.test", TEST_PASSWORD, rounds=4
    )


@pytest.fixture()
def auth_headers(tokens, staff_user):
    """Bearer header for the staff user, issued by the app's own codec."""
    token = tokens.issue(staff_user.id, staff_user.username)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def upload_dir(settings):
    return Path(settings.upload_dir)
