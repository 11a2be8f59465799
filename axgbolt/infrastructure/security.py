"""Password hashing and access tokens.

Passwords are hashed with passlib; access tokens are signed JWTs
carrying the user id and role.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from axgbolt.domain.exceptions import AuthenticationError
from axgbolt.infrastructure.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plain-text password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain-text password against a stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    user_id: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token.

    Args:
        user_id: Subject of the token.
        role: User role, copied into the claims.
        expires_delta: Token lifetime. Defaults to the configured expiry.

    Returns:
        Encoded JWT.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": user_id, "role": role, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify an access token.

    Raises:
        AuthenticationError: If the token is malformed, expired or unsigned.
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise AuthenticationError("Invalid or expired token") from e

    if not claims.get("sub"):
        raise AuthenticationError("Invalid token payload")
    return claims
