"""
Authentication endpoints.

This module provides:
- Google sign-in (ID token → our JWT)
- Current user profile

Sign-in Flow:
-------------
1. The admin frontend shows "Sign in with Google"
2. Google returns an ID token ("credential") to the browser
3. Frontend posts it to POST /auth/google
4. We verify it with google-auth, create or update the user
5. Users listed in ADMIN_EMAILS are allowed admins automatically;
   everybody else waits until an admin sets ``is_allowed``
6. Allowed users receive our JWT; the rest get 403

References:
-----------
- FastAPI Security: https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import or_, select

from parkadmin.core.auth import AdminSession, get_current_session
from parkadmin.core.config import settings
from parkadmin.core.errors import PermissionDeniedError
from parkadmin.core.google_oauth import verify_google_token
from parkadmin.core.logging import get_logger
from parkadmin.core.security import create_access_token
from parkadmin.db.deps import DBSession
from parkadmin.models.user import User
from parkadmin.schemas.auth import GoogleAuthRequest, UserResponse, UserWithToken
from parkadmin.schemas.common import ErrorResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


# ================================
# Google Sign-In
# ================================

@router.post(
    "/google",
    response_model=UserWithToken,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid Google token"},
        403: {"model": ErrorResponse, "description": "Account not allowed yet"},
    },
)
async def google_sign_in(request: GoogleAuthRequest, db: DBSession):
    """
    Sign in with a Google ID token.

    Request Body:
    -------------
    {"credential": "eyJhbGciOiJSUzI1NiIsImtpZCI6..."}

    Response:
    ---------
    {
        "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
        "token_type": "bearer",
        "user": {"id": "...", "email": "...", "is_allowed": true, "is_admin": false, ...}
    }

    Raises:
        HTTPException 401: Google rejected the token
        PermissionDeniedError: the account exists but is not allowed
    """
    google_user = await verify_google_token(request.credential)
    email = google_user["email"].lower()

    result = await db.execute(
        select(User).where(or_(User.google_sub == google_user["sub"], User.email == email))
    )
    user = result.scalars().first()

    is_bootstrap_admin = email in settings.admin_email_list

    if user is None:
        user = User(
            email=email,
            name=google_user["name"] or email.split("@")[0],
            avatar=google_user["picture"] or None,
            google_sub=google_user["sub"],
            is_allowed=is_bootstrap_admin,
            is_admin=is_bootstrap_admin,
        )
        db.add(user)
        logger.info("user_created", email=email, admin=is_bootstrap_admin)
    else:
        user.google_sub = google_user["sub"]
        if google_user["name"]:
            user.name = google_user["name"]
        if google_user["picture"]:
            user.avatar = google_user["picture"]
        if is_bootstrap_admin:
            user.is_allowed = True
            user.is_admin = True

    user.last_login = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)

    if not user.is_allowed:
        logger.warning("sign_in_not_allowed", email=email)
        raise PermissionDeniedError("Your account is waiting for an administrator to grant access")

    access_token = create_access_token(data={"sub": user.id, "email": user.email})
    logger.info("sign_in_succeeded", email=email)

    return UserWithToken(
        user=UserResponse.model_validate(user),
        access_token=access_token,
        token_type="bearer",
    )


# ================================
# Profile
# ================================

@router.get("/me", response_model=UserResponse)
async def read_current_user(session: AdminSession = Depends(get_current_session)):
    """
    Get the signed-in user's profile, including the access flags the
    frontend uses to decide which pages to show.
    """
    return UserResponse.model_validate(session.user)
