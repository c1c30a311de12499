"""Authentication gate tests — every transition of the per-request state machine.

Learn: authenticate() is exercised directly with a fake credential store,
so each outcome (Verified / Rejected / Error) can be forced without HTTP.
"""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from smarttodo.auth.dependencies import GateState, authenticate
from smarttodo.auth.jwt import TokenCodec
from smarttodo.db.store import StoreError

CODEC = TokenCodec(secret="gate-test-secret-0123456789abcdef", ttl=timedelta(minutes=5))


class FakeUsers:
    def __init__(self, users=(), fail: bool = False):
        self.users = {u.id: u for u in users}
        self.fail = fail
        self.lookups = 0

    async def get_by_id(self, user_id):
        self.lookups += 1
        if self.fail:
            raise StoreError("connection refused")
        return self.users.get(user_id)


def _user():
    return SimpleNamespace(
        id=uuid.uuid4(),
        username="ann",
        password_hash="$2b$04$secret",
        created_at=datetime.now(timezone.utc),
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, "", "Basic dXNlcjpwdw==", "bearer abc", "Token abc"])
async def test_missing_or_wrong_scheme_rejected(header):
    users = FakeUsers()
    result = await authenticate(header, CODEC, users)
    assert result.state is GateState.REJECTED
    assert result.reason == "Access denied. No token provided or invalid format."
    assert users.lookups == 0


@pytest.mark.asyncio
async def test_empty_bearer_rejected():
    result = await authenticate("Bearer    ", CODEC, FakeUsers())
    assert result.state is GateState.REJECTED
    assert result.reason == "Access denied. No token provided."


@pytest.mark.asyncio
async def test_invalid_token_rejected_without_lookup():
    users = FakeUsers()
    result = await authenticate("Bearer not-a-jwt", CODEC, users)
    assert result.state is GateState.REJECTED
    assert result.reason == "Invalid or expired token."
    assert users.lookups == 0


@pytest.mark.asyncio
async def test_expired_token_rejected():
    user = _user()
    token = CODEC.mint(str(user.id), issued_at=datetime.now(timezone.utc) - timedelta(hours=1))
    result = await authenticate(f"Bearer {token}", CODEC, FakeUsers([user]))
    assert result.state is GateState.REJECTED
    assert result.reason == "Invalid or expired token."


@pytest.mark.asyncio
async def test_non_uuid_subject_rejected():
    token = CODEC.mint("not-a-uuid")
    result = await authenticate(f"Bearer {token}", CODEC, FakeUsers())
    assert result.state is GateState.REJECTED
    assert result.reason == "Invalid or expired token."


@pytest.mark.asyncio
async def test_unknown_user_rejected():
    token = CODEC.mint(str(uuid.uuid4()))
    users = FakeUsers([_user()])
    result = await authenticate(f"Bearer {token}", CODEC, users)
    assert result.state is GateState.REJECTED
    assert result.reason == "Invalid token. User not found."
    assert users.lookups == 1


@pytest.mark.asyncio
async def test_store_failure_is_error_not_rejection():
    token = CODEC.mint(str(uuid.uuid4()))
    result = await authenticate(f"Bearer {token}", CODEC, FakeUsers(fail=True))
    assert result.state is GateState.ERROR
    assert result.identity is None


@pytest.mark.asyncio
async def test_verified_identity_excludes_credential_hash():
    user = _user()
    token = CODEC.mint(str(user.id))
    result = await authenticate(f"Bearer {token}", CODEC, FakeUsers([user]))

    assert result.state is GateState.VERIFIED
    assert result.identity.user_id == user.id
    assert result.identity.username == "ann"
    assert not hasattr(result.identity, "password_hash")
