"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
carries the user id (`sub`), issue time (`iat`) and expiry (`exp`), signed
with HMAC-SHA256 over header+payload. Any process holding the same secret
can verify tokens minted elsewhere; nothing is stored server-side, so a
token stays valid until it expires.

The codec is an immutable value built once from settings when the app is
created. Callers never read the secret from a global.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog

from smarttodo.config import Settings

logger = structlog.get_logger()


class InvalidToken(Exception):
    """Raised when a token is forged, malformed or expired.

    Learn: Expired and forged tokens deliberately look the same to the
    caller. The difference is only visible in the logs.
    """


@dataclass(frozen=True)
class TokenCodec:
    secret: str
    ttl: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(
            secret=settings.jwt_secret,
            ttl=timedelta(minutes=settings.access_token_expire_minutes),
            algorithm=settings.jwt_algorithm,
        )

    @property
    def ttl_seconds(self) -> int:
        return int(self.ttl.total_seconds())

    def mint(self, subject_id: str, issued_at: Optional[datetime] = None) -> str:
        """Create a signed access token for subject_id."""
        issued = issued_at or datetime.now(timezone.utc)
        payload = {
            "sub": subject_id,
            "iat": issued,
            "exp": issued + self.ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Verify a token and return its subject id.

        Raises InvalidToken on failure.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("token.expired")
            raise InvalidToken("Invalid or expired token.")
        except jwt.InvalidTokenError as e:
            logger.info("token.invalid", reason=str(e))
            raise InvalidToken("Invalid or expired token.")
        return payload["sub"]
