"""Security features for the API: bearer token authentication."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from jose import ExpiredSignatureError, JWTError, jwt

from synapse.models import Identity

logger = logging.getLogger(__name__)

# Constants
DEFAULT_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(days=30)
BEARER = "Bearer"


class Unauthenticated(Exception):
    """Missing, invalid or expired bearer credential."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)
        self.message = message


class IdentityStore(Protocol):
    async def get_identity(self, user_id: int) -> Identity | None:
        ...


def parse_authorization_header(header: str | None) -> str | None:
    """Return the token from an `Authorization: Bearer <token>` header."""
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != BEARER.lower() or not token.strip():
        return None
    return token.strip()


class AuthGate:
    """Resolves bearer tokens to identities."""

    def __init__(
        self,
        store: IdentityStore,
        secret_key: str,
        algorithm: str = DEFAULT_ALGORITHM,
    ):
        """
        Initialize auth gate.

        Args:
            store: Identity lookup by user id
            secret_key: HMAC secret shared with the token issuer
            algorithm: JWT signing algorithm
        """
        self.store = store
        self.secret_key = secret_key
        self.algorithm = algorithm

    def create_access_token(
        self,
        user_id: int,
        email: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Encode a JWT with `sub` (user id), `email` and expiry."""
        expire = datetime.now(timezone.utc) + (expires_delta or DEFAULT_TOKEN_TTL)
        claims: dict[str, Any] = {"sub": str(user_id), "exp": expire}
        if email:
            claims["email"] = email
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def _decode(self, token: str) -> int:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            logger.debug("Token expired")
            raise Unauthenticated() from e
        except JWTError as e:
            logger.debug("Token rejected: %s", e)
            raise Unauthenticated() from e

        # Older tokens carry the id in `userId`
        subject = payload.get("sub") or payload.get("userId")
        if subject is None:
            logger.debug("Token missing 'sub' claim")
            raise Unauthenticated()
        try:
            return int(subject)
        except (TypeError, ValueError) as e:
            logger.debug("Token subject is not a user id: %r", subject)
            raise Unauthenticated() from e

    async def authenticate(self, token: str | None) -> Identity:
        """
        Verify a bearer token and resolve the caller.

        Raises:
            Unauthenticated: token missing, malformed, expired, or user unknown
        """
        if not token:
            raise Unauthenticated("No token")

        user_id = self._decode(token)
        identity = await self.store.get_identity(user_id)
        if identity is None:
            logger.warning(f"Token for unknown user_id={user_id}")
            raise Unauthenticated()
        return identity
