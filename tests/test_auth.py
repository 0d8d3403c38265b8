"""
Authentication tests.

Tests for:
- Google sign-in endpoint (token verification is mocked)
- Get current user endpoint
- Token validation
- Authentication dependencies

References:
-----------
- FastAPI Testing: https://fastapi.tiangolo.com/tutorial/testing/
- Pytest Async: https://pytest-asyncio.readthedocs.io/
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parkadmin.core.security import create_access_token, decode_access_token
from parkadmin.models.user import User

VERIFY = "parkadmin.core.google_oauth.id_token.verify_oauth2_token"


def google_claims(email: str, sub: str = "google-sub-1", **extra) -> dict:
    claims = {
        "iss": "https://accounts.google.com",
        "sub": sub,
        "email": email,
        "email_verified": True,
        "name": "Jamie Doe",
        "picture": "https://lh3.googleusercontent.com/a/photo",
    }
    claims.update(extra)
    return claims


# ================================
# Google Sign-In Tests
# ================================

@pytest.mark.asyncio
class TestGoogleSignIn:
    """Test POST /auth/google."""

    async def test_first_sign_in_waits_for_approval(self, client: AsyncClient, db_session: AsyncSession):
        with patch(VERIFY, return_value=google_claims("newcomer@example.com")):
            response = await client.post("/api/v1/auth/google", json={"credential": "token"})

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"

        result = await db_session.execute(select(User).where(User.email == "newcomer@example.com"))
        user = result.scalar_one()
        assert user.is_allowed is False
        assert user.google_sub == "google-sub-1"
        assert user.last_login is not None

    async def test_bootstrap_admin(self, client: AsyncClient):
        with patch(VERIFY, return_value=google_claims("Boss@Example.com")):
            response = await client.post("/api/v1/auth/google", json={"credential": "token"})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "boss@example.com"
        assert data["user"]["is_admin"] is True
        assert data["user"]["is_allowed"] is True

        payload = decode_access_token(data["access_token"])
        assert payload["sub"] == data["user"]["id"]

    async def test_allowed_user_gets_token(self, client: AsyncClient, editor: User):
        with patch(VERIFY, return_value=google_claims(editor.email, sub="editor-sub")):
            response = await client.post("/api/v1/auth/google", json={"credential": "token"})

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == editor.id
        assert data["user"]["name"] == "Jamie Doe"
        assert data["user"]["avatar"].startswith("https://")

        me = await client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {data['access_token']}"},
        )
        assert me.status_code == 200
        assert me.json()["email"] == editor.email

    async def test_invalid_google_token(self, client: AsyncClient):
        with patch(VERIFY, side_effect=ValueError("Token expired")):
            response = await client.post("/api/v1/auth/google", json={"credential": "token"})

        assert response.status_code == 401
        assert "Token expired" in response.json()["detail"]

    async def test_unverified_email_is_rejected(self, client: AsyncClient):
        claims = google_claims("someone@example.com", email_verified=False)
        with patch(VERIFY, return_value=claims):
            response = await client.post("/api/v1/auth/google", json={"credential": "token"})

        assert response.status_code == 401

    async def test_wrong_issuer_is_rejected(self, client: AsyncClient):
        claims = google_claims("someone@example.com", iss="https://evil.example.com")
        with patch(VERIFY, return_value=claims):
            response = await client.post("/api/v1/auth/google", json={"credential": "token"})

        assert response.status_code == 401

    async def test_missing_credential(self, client: AsyncClient):
        response = await client.post("/api/v1/auth/google", json={})
        assert response.status_code == 400


# ================================
# Current User Tests
# ================================

@pytest.mark.asyncio
class TestCurrentUser:
    """Test GET /auth/me."""

    async def test_pending_user_can_read_profile(self, client: AsyncClient, pending_user: User, headers_for):
        response = await client.get("/api/v1/auth/me", headers=headers_for(pending_user))

        assert response.status_code == 200
        assert response.json()["is_allowed"] is False

    async def test_no_token(self, client: AsyncClient):
        response = await client.get("/api/v1/auth/me")
        assert response.status_code == 401

    async def test_expired_token(self, client: AsyncClient, editor: User):
        token = create_access_token({"sub": editor.id}, expires_delta=timedelta(minutes=-5))

        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_token_for_deleted_user(self, client: AsyncClient):
        token = create_access_token({"sub": "0" * 32})

        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_token_without_subject(self, client: AsyncClient):
        token = create_access_token({"email": "x@example.com"})

        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


# ================================
# Token Utility Tests
# ================================

class TestTokens:

    def test_round_trip(self):
        token = create_access_token({"sub": "abc"})
        payload = decode_access_token(token)

        assert payload["sub"] == "abc"
        assert "exp" in payload and "iat" in payload

    def test_tampered_token(self):
        token = create_access_token({"sub": "abc"})
        assert decode_access_token(token[:-2] + "xx") is None
