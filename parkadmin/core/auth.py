"""
Authentication dependencies for FastAPI.

This module provides:
- HTTP bearer scheme
- AdminSession, the explicit per-request session object
- Dependency injection for protected routes

There is no ambient "current user" global: handlers that need the session
declare it as a dependency and receive it as an argument.

Access levels:
--------------
- get_current_session: valid token for an existing user (may be not allowed)
- get_current_active_session: user.is_allowed must be True (else 403)
- require_admin: user.is_admin must be True (else 403)

References:
-----------
- FastAPI Security Tutorial: https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parkadmin.core.errors import PermissionDeniedError
from parkadmin.core.security import decode_access_token
from parkadmin.db.deps import get_db
from parkadmin.models.user import User

# ================================
# Bearer Configuration
# ================================

# auto_error=False so a missing header becomes our own 401 (with
# WWW-Authenticate) instead of FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AdminSession:
    """
    The signed-in user for the duration of one request.

    Created by get_current_session after the bearer token is verified and
    the user loaded, then handed to route handlers explicitly.
    """

    user: User
    token: str

    @property
    def email(self) -> str:
        return self.user.email

    @property
    def is_admin(self) -> bool:
        return bool(self.user.is_admin)

    @property
    def is_allowed(self) -> bool:
        return bool(self.user.is_allowed)


# ================================
# Session Dependencies
# ================================

async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AdminSession:
    """
    Build the AdminSession from the Authorization header.

    How it works:
    -------------
    1. HTTPBearer extracts the token from "Authorization: Bearer <token>"
    2. Decode and verify our JWT
    3. Load the user whose id is in the "sub" claim
    4. Return AdminSession(user, token)

    Raises:
        HTTPException 401: missing/invalid/expired token or unknown user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None or not credentials.credentials:
        raise credentials_exception

    token = credentials.credentials
    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    user_id: Optional[str] = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise credentials_exception

    return AdminSession(user=user, token=token)


async def get_current_active_session(
    session: AdminSession = Depends(get_current_session),
) -> AdminSession:
    """
    Get the current session and verify the user may use the admin panel.

    Raises:
        PermissionDeniedError: user signed in but not (or no longer) allowed
    """
    if not session.is_allowed:
        raise PermissionDeniedError("Your account is not allowed to access the admin panel")
    return session


async def require_admin(
    session: AdminSession = Depends(get_current_active_session),
) -> AdminSession:
    """Require the signed-in user to be an admin."""
    if not session.is_admin:
        raise PermissionDeniedError("Admin access required")
    return session
