"""Auth API — registration, login, current user.

Learn: Routes for the account lifecycle:
- POST /auth/register → create a new user account
- POST /auth/login → username/password → JWT access token
- GET /auth/me → current user info (auth required)

There is no refresh endpoint: a token lives until it expires, then the
client logs in again.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from smarttodo.auth.dependencies import CurrentIdentity, get_current_user, get_token_codec
from smarttodo.auth.jwt import TokenCodec
from smarttodo.db.engine import get_db
from smarttodo.db.store import UserStore
from smarttodo.schemas.envelope import Envelope
from smarttodo.schemas.user import (
    LoginData,
    LoginRequest,
    RegisterRequest,
    UserData,
    UserRead,
)
from smarttodo.services.auth_service import AuthService

router = APIRouter(prefix="/auth")


def _auth_svc(
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
) -> AuthService:
    return AuthService(UserStore(db), codec)


@router.post(
    "/register",
    response_model=Envelope[UserData],
    response_model_exclude_none=True,
    status_code=201,
)
async def register(body: RegisterRequest, svc: AuthService = Depends(_auth_svc)):
    """Create a new user account."""
    user = await svc.register(body.username, body.password)
    return Envelope(
        message="User registered successfully.",
        data=UserData(user=UserRead.model_validate(user)),
    )


@router.post("/login", response_model=Envelope[LoginData], response_model_exclude_none=True)
async def login(body: LoginRequest, svc: AuthService = Depends(_auth_svc)):
    """Login with username and password → JWT access token."""
    token, user = await svc.login(body.username, body.password)
    return Envelope(
        message="Login successful.",
        data=LoginData(
            token=token,
            expires_in=svc.codec.ttl_seconds,
            user=UserRead.model_validate(user),
        ),
    )


@router.get("/me", response_model=Envelope[UserData], response_model_exclude_none=True)
async def get_me(identity: CurrentIdentity = Depends(get_current_user)):
    """Get the current authenticated user's info."""
    return Envelope(
        message="Current user retrieved successfully.",
        data=UserData(
            user=UserRead(
                id=identity.user_id,
                username=identity.username,
                created_at=identity.created_at,
            )
        ),
    )
