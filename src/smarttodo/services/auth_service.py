"""Account service — registration and login.

Learn: Login answers "Invalid credentials." for both an unknown username
and a wrong password, and spends one bcrypt verification in either case,
so neither the message nor the response time tells an attacker which
usernames exist.
"""

import structlog

from smarttodo.auth.jwt import TokenCodec
from smarttodo.auth.password import DUMMY_HASH, hash_password, verify_password
from smarttodo.db.models import User
from smarttodo.db.store import DuplicateKeyError, UserStore
from smarttodo.errors import Unauthorized, ValidationFailed, store_failures

logger = structlog.get_logger()


class AuthService:
    def __init__(self, users: UserStore, codec: TokenCodec):
        self.users = users
        self.codec = codec

    async def register(self, username: str, password: str) -> User:
        with store_failures("Server error during registration."):
            if await self.users.get_by_username(username) is not None:
                raise ValidationFailed("Username is already registered.")
            try:
                user = await self.users.create(username, hash_password(password))
            except DuplicateKeyError:
                raise ValidationFailed("Username is already registered.")
        logger.info("user.registered", user_id=str(user.id))
        return user

    async def login(self, username: str, password: str) -> tuple[str, User]:
        """Check credentials and mint a token. Returns (token, user)."""
        with store_failures("Server error during login."):
            user = await self.users.get_by_username(username.strip())

        if user is None:
            verify_password(password, DUMMY_HASH)
            logger.info("user.login_failed", reason="unknown_user")
            raise Unauthorized("Invalid credentials.")
        if not verify_password(password, user.password_hash):
            logger.info("user.login_failed", reason="bad_password", user_id=str(user.id))
            raise Unauthorized("Invalid credentials.")

        token = self.codec.mint(str(user.id))
        logger.info("user.logged_in", user_id=str(user.id))
        return token, user
