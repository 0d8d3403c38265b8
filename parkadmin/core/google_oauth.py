"""
Google Identity utilities.

The admin panel signs users in with Google ("Sign in with Google" button).
The browser receives a Google ID token (the "credential") and posts it to
``POST /auth/google``. We verify it here, then issue our own session token.

References:
-----------
- Google Identity: https://developers.google.com/identity/gsi/web/guides/verify-google-id-token
- google-auth library: https://google-auth.readthedocs.io/
"""

from typing import Dict

from fastapi import HTTPException, status
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests
from google.oauth2 import id_token

from parkadmin.core.config import settings
from parkadmin.core.logging import get_logger

logger = get_logger(__name__)

VALID_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


async def verify_google_token(token: str) -> Dict[str, str]:
    """
    Verify a Google ID token and extract the user's identity.

    How it works:
    -------------
    1. google-auth fetches Google's public certificates (cached)
    2. Checks signature, expiry and that the audience is our client id
    3. We additionally check the issuer and that the email is verified

    Args:
        token: Google ID token from the frontend

    Returns:
        {"email", "name", "picture", "sub"}

    Raises:
        HTTPException 401: token invalid, unverified email, or
                           Google OAuth not configured
    """
    if not check_google_oauth_configured():
        logger.error("google_oauth_not_configured")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Google sign-in is not configured",
        )

    try:
        idinfo = id_token.verify_oauth2_token(
            token,
            requests.Request(),
            settings.GOOGLE_CLIENT_ID,
        )

        if idinfo.get("iss") not in VALID_ISSUERS:
            raise ValueError(f"Invalid issuer {idinfo.get('iss')}")

        if not idinfo.get("email_verified", False):
            raise ValueError("Email not verified")

    except (ValueError, google_exceptions.GoogleAuthError) as e:
        logger.warning("google_token_rejected", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid Google token: {e}",
        )

    logger.info("google_token_verified", email=idinfo.get("email"))

    return {
        "email": idinfo["email"],
        "name": idinfo.get("name", ""),
        "picture": idinfo.get("picture", ""),
        "sub": idinfo["sub"],
    }


def check_google_oauth_configured() -> bool:
    """Return True when a Google client id is configured."""
    return bool(settings.GOOGLE_CLIENT_ID)
