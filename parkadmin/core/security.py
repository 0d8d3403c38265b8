"""
Session token utilities.

Google proves who the user is once, at sign-in. After that the admin panel
talks to us with our own short-lived JWT, so every request does not have to
round-trip to Google's certificate endpoint.

This module provides:
- JWT creation (python-jose, HS256)
- JWT decoding/verification

References:
-----------
- FastAPI Security: https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/
- JWT Standard: https://jwt.io/introduction
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from parkadmin.core.config import settings


# ================================
# JWT Token Management
# ================================

def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT access token.

    What's in the token?
    --------------------
    - sub (subject): the user's id
    - email: convenience claim for logs
    - iat (issued at) / exp (expiration)

    Args:
        data: Claims to include. Should include "sub".
        expires_delta: Lifetime of the token. Defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES from settings.

    Returns:
        Encoded JWT string

    Example:
        >>> token = create_access_token({"sub": user.id}, timedelta(minutes=30))

    Security Notes:
    ---------------
    - The token is signed, not encrypted. Never put secrets in it.
    - A negative expires_delta produces an already-expired token (used in tests).
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta is not None:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire, "iat": now})

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """
    Decode and verify a JWT access token.

    Returns:
        Dictionary of claims if the token is valid, None otherwise
        (bad signature, wrong algorithm, expired, malformed).
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        return None
