"""Access-control gate tests.

Learn: These build a tiny app with one gated router so the gate can be
checked in isolation: the handler echoes the identity it received.
"""

import uuid

import pytest
import pytest_asyncio
from fastapi import APIRouter, Depends, FastAPI
from httpx import ASGITransport, AsyncClient

from kitchenhand.api.errors import register_exception_handlers
from kitchenhand.auth.dependencies import (
    OptionalIdentity,
    RequiredIdentity,
    extract_token,
    require_login,
)
from kitchenhand.auth.jwt import TokenCodec

SECRET = "gate-test-secret-that-is-long-enough"


def _gate_app(tokens: TokenCodec) -> FastAPI:
    app = FastAPI()
    app.state.tokens = tokens
    register_exception_handlers(app)

    gated = APIRouter()

    @gated.get("/whoami")
    async def whoami(user: RequiredIdentity):
        return {"user_id": str(user.user_id), "username": user.username}

    @app.get("/ungated")
    async def ungated(user: RequiredIdentity):
        return {"username": user.username}

    @app.get("/maybe")
    async def maybe(user: OptionalIdentity):
        return {"username": user.username if user else None}

    app.include_router(gated, dependencies=[Depends(require_login)])
    return app


@pytest.fixture()
def codec():
    return TokenCodec(SECRET)


@pytest_asyncio.fixture()
async def gate_client(codec):
    transport = ASGITransport(app=_gate_app(codec))
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ═══════════════════════════════════════════════════════════
# Required identity
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_no_token_is_401(gate_client):
    r = await gate_client.get("/whoami")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_malformed_token_is_401(gate_client):
    r = await gate_client.get("/whoami", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_expired_token_is_401(gate_client, codec):
    token = codec.issue(uuid.uuid4(), "chef", ttl_hours=-1)
    r = await gate_client.get("/whoami", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_bearer_identity_matches_claims(gate_client, codec):
    """The handler sees exactly the sub/username the token was issued for."""
    user_id = uuid.uuid4()
    token = codec.issue(user_id, "chef")
    r = await gate_client.get("/whoami", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json() == {"user_id": str(user_id), "username": "chef"}


@pytest.mark.asyncio
async def test_cookie_identity(gate_client, codec):
    user_id = uuid.uuid4()
    token = codec.issue(user_id, "sous")
    r = await gate_client.get("/whoami", headers={"Cookie": f"auth_token={token}"})
    assert r.status_code == 200
    assert r.json()["username"] == "sous"


@pytest.mark.asyncio
async def test_bearer_prefix_is_case_sensitive(gate_client, codec):
    token = codec.issue(uuid.uuid4(), "chef")
    r = await gate_client.get("/whoami", headers={"Authorization": f"bearer {token}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_bearer_wins_over_cookie(gate_client, codec):
    token = codec.issue(uuid.uuid4(), "chef")
    r = await gate_client.get(
        "/whoami",
        headers={"Authorization": f"Bearer {token}", "Cookie": "auth_token=garbage"},
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_non_uuid_subject_is_401(gate_client, codec):
    token = codec.issue("not-a-uuid", "chef")
    r = await gate_client.get("/whoami", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_required_identity_needs_the_gate(gate_client, codec):
    """Without require_login nothing is attached, so RequiredIdentity → 401."""
    token = codec.issue(uuid.uuid4(), "chef")
    r = await gate_client.get("/ungated", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# Optional identity
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_optional_identity_from_cookie(gate_client, codec):
    token = codec.issue(uuid.uuid4(), "chef")
    r = await gate_client.get("/maybe", headers={"Cookie": f"auth_token={token}"})
    assert r.json() == {"username": "chef"}


@pytest.mark.asyncio
async def test_optional_identity_ignores_garbage_cookie(gate_client):
    r = await gate_client.get("/maybe", headers={"Cookie": "auth_token=garbage"})
    assert r.status_code == 200
    assert r.json() == {"username": None}


@pytest.mark.asyncio
async def test_optional_identity_ignores_expired_cookie(gate_client, codec):
    token = codec.issue(uuid.uuid4(), "chef", ttl_hours=-1)
    r = await gate_client.get("/maybe", headers={"Cookie": f"auth_token={token}"})
    assert r.json() == {"username": None}


@pytest.mark.asyncio
async def test_optional_identity_anonymous(gate_client):
    r = await gate_client.get("/maybe")
    assert r.json() == {"username": None}


# ═══════════════════════════════════════════════════════════
# Token extraction
# ═══════════════════════════════════════════════════════════


class _FakeRequest:
    def __init__(self, headers=None, cookies=None):
        self.headers = headers or {}
        self.cookies = cookies or {}


def test_extract_prefers_header():
    req = _FakeRequest({"Authorization": "Bearer abc"}, {"auth_token": "xyz"})
    assert extract_token(req) == "abc"


def test_extract_falls_back_to_cookie():
    req = _FakeRequest({"Authorization": "Basic abc"}, {"auth_token": "xyz"})
    assert extract_token(req) == "xyz"


def test_extract_none():
    assert extract_token(_FakeRequest()) is None
