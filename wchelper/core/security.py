"""Password digests and bearer-token creation/verification for authentication."""

import hashlib
import hmac
from datetime import UTC, datetime
from typing import Any

import jwt

from wchelper.core.config import settings

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 1
PASSWORD_MAX_LEN = 128


def hash_password(plain_password: str) -> str:
    """
    Return the lowercase hex SHA-256 digest of a plain-text password.

    Unsalted: digests already stored in the local credential store were produced
    this way, and changing it would lock those users out.
    """
    return hashlib.sha256(plain_password.encode("utf-8")).hexdigest()


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hex digest."""
    if not isinstance(hashed, str) or not hashed:
        return False
    return hmac.compare_digest(hash_password(plain_password), hashed.lower())


def create_access_token(sub: str, role: str, auth_mode: str, issued_at: datetime | None = None) -> str:
    """Create a bearer token for an issued session. No exp: sessions end on logout."""
    now = issued_at or datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": sub,
        "role": role,
        "auth_mode": auth_mode,
        "iat": now,
        # Sub-second issue time; ties the token to one session.
        "session_iat": now.timestamp(),
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a bearer token; return payload (sub, role, auth_mode, iat, session_iat).
    Raises jwt.PyJWTError on an invalid token.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
    )
