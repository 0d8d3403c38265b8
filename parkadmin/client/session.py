"""
Client-side admin session.

Holds the bearer token and user returned by ``POST /auth/google`` for as
long as the operator is signed in. It is created and passed around
explicitly; there is no module-level "current session".

Usage:
------
    session = AdminSession()
    client = AdminAPIClient(http, session)
    await client.sign_in(google_credential)   # calls session.login(...)
    session.headers()                         # {"Authorization": "Bearer ..."}
    session.logout()
"""

from typing import Any, Dict, Optional


class NotAuthenticated(Exception):
    """Raised when an operation needs a signed-in session and there is none."""


class AdminSession:
    """Explicit sign-in state: token plus the user record."""

    def __init__(self):
        self.token: Optional[str] = None
        self.user: Optional[Dict[str, Any]] = None

    def login(self, access_token: str, user: Dict[str, Any]) -> None:
        if not access_token:
            raise ValueError("access_token is required")
        self.token = access_token
        self.user = dict(user or {})

    def logout(self) -> None:
        self.token = None
        self.user = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    @property
    def is_allowed(self) -> bool:
        return bool(self.user and self.user.get("is_allowed"))

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.get("is_admin"))

    @property
    def email(self) -> Optional[str]:
        return self.user.get("email") if self.user else None

    def require(self) -> "AdminSession":
        if not self.is_authenticated:
            raise NotAuthenticated("Sign in first")
        return self

    def headers(self) -> Dict[str, str]:
        """Authorization header for the current token (empty when signed out)."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
