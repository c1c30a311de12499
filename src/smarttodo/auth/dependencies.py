"""FastAPI auth dependencies — the authentication gate.

Learn: Every protected request walks the same state machine:

    NoToken → TokenPresented → Verified | Rejected
                             ↘ Error (store unavailable)

authenticate() runs it and returns a GateResult instead of raising, so the
three outcomes are explicit values. get_current_user() is the Depends()
wrapper: it turns Rejected into a 401 and Error into a 500, and hands the
verified identity back to FastAPI, which threads it into each handler as
an ordinary argument. Nothing is stashed on the request object.

The user lookup after verification is the only revocation mechanism a
stateless token has: a token whose user no longer exists is rejected.
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from smarttodo.auth.jwt import InvalidToken, TokenCodec
from smarttodo.db.engine import get_db
from smarttodo.db.store import StoreError, UserStore
from smarttodo.errors import InternalError, Unauthorized

logger = structlog.get_logger()

_SCHEME = "Bearer "


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated user making the request (no credential hash)."""

    user_id: uuid.UUID
    username: str
    created_at: datetime


class GateState(enum.Enum):
    VERIFIED = "verified"
    REJECTED = "rejected"
    ERROR = "error"


@dataclass(frozen=True)
class GateResult:
    state: GateState
    identity: Optional[CurrentIdentity] = None
    reason: str = ""

    @classmethod
    def rejected(cls, reason: str) -> "GateResult":
        return cls(GateState.REJECTED, reason=reason)


def get_token_codec(request: Request) -> TokenCodec:
    """The process-wide codec, fixed at app creation."""
    return request.app.state.token_codec


async def authenticate(
    authorization: Optional[str],
    codec: TokenCodec,
    users: UserStore,
) -> GateResult:
    """Resolve an Authorization header to an identity."""
    if not authorization or not authorization.startswith(_SCHEME):
        return GateResult.rejected("Access denied. No token provided or invalid format.")

    token = authorization[len(_SCHEME):].strip()
    if not token:
        return GateResult.rejected("Access denied. No token provided.")

    try:
        subject = codec.verify(token)
        user_id = uuid.UUID(subject)
    except (InvalidToken, ValueError):
        return GateResult.rejected("Invalid or expired token.")

    try:
        user = await users.get_by_id(user_id)
    except StoreError as e:
        logger.error("auth.store_error", user_id=str(user_id), error=str(e))
        return GateResult(GateState.ERROR, reason=str(e))

    if user is None:
        logger.info("auth.unknown_subject", user_id=str(user_id))
        return GateResult.rejected("Invalid token. User not found.")

    return GateResult(
        GateState.VERIFIED,
        identity=CurrentIdentity(
            user_id=user.id,
            username=user.username,
            created_at=user.created_at,
        ),
    )


async def get_current_user(
    authorization: Optional[str] = Header(None),
    codec: TokenCodec = Depends(get_token_codec),
    db: AsyncSession = Depends(get_db),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no valid auth)."""
    result = await authenticate(authorization, codec, UserStore(db))

    if result.state is GateState.VERIFIED:
        return result.identity
    if result.state is GateState.REJECTED:
        logger.info("auth.rejected", reason=result.reason)
        raise Unauthorized(result.reason)
    raise InternalError("Server error during authentication.", detail=result.reason)
