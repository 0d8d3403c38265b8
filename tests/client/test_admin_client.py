"""
Tests for the Python admin client (session, REST wrapper, next-seq loader)
running against the ASGI app.
"""

from unittest.mock import patch

import httpx
import pytest

from parkadmin.client import NOT_READY, AdminAPIClient, AdminSession, APIError, NextSequence, NotAuthenticated
from parkadmin.core.security import create_access_token
from parkadmin.services.listing import FilterCriteria
from parkadmin.services.sequence import FormMode


@pytest.fixture
def api(client, editor) -> AdminAPIClient:
    session = AdminSession()
    session.login(
        create_access_token({"sub": editor.id}),
        {"id": editor.id, "email": editor.email, "is_allowed": True, "is_admin": False},
    )
    return AdminAPIClient(client, session)


class TestAdminSession:

    def test_login_logout(self):
        session = AdminSession()
        assert not session.is_authenticated
        assert session.headers() == {}
        with pytest.raises(NotAuthenticated):
            session.require()

        session.login("tok", {"email": "a@example.com", "is_allowed": True})
        assert session.require() is session
        assert session.email == "a@example.com"
        assert session.is_allowed and not session.is_admin
        assert session.headers() == {"Authorization": "Bearer tok"}

        session.logout()
        assert session.user is None and session.email is None

    def test_login_requires_token(self):
        with pytest.raises(ValueError):
            AdminSession().login("", {})


@pytest.mark.asyncio
class TestAdminAPIClient:

    async def test_sign_in_stores_session(self, client):
        api = AdminAPIClient(client)
        claims = {
            "iss": "accounts.google.com",
            "sub": "boss-sub",
            "email": "boss@example.com",
            "email_verified": True,
            "name": "Boss",
        }

        with patch("parkadmin.core.google_oauth.id_token.verify_oauth2_token", return_value=claims):
            user = await api.sign_in("credential")

        assert user["email"] == "boss@example.com"
        assert api.session.is_authenticated and api.session.is_admin

        api.sign_out()
        assert not api.session.is_authenticated

    async def test_crud_and_list_page(self, api):
        created = await api.create("highlights", {"title": "Robot fair", "content": "C"})
        await api.create("highlights", {"title": "Solar day", "content": "C"})
        highlight_id = created["highlight"]["id"]

        page = await api.list("highlights", FilterCriteria(search="robot"))
        assert page.total == 1
        assert page.items[0]["id"] == highlight_id

        page = await api.list("highlights", sort="seq", order="asc", start=0, end=1)
        assert page.total == 2
        assert [h["seq"] for h in page.items] == [1]

        updated = await api.update("highlights", highlight_id, {"status": "published"})
        assert updated["highlight"]["status"] == "published"

        fetched = await api.get("highlights", highlight_id)
        assert fetched["status"] == "published"

    async def test_errors_carry_server_detail(self, api):
        with pytest.raises(APIError) as excinfo:
            await api.get("highlights", "f" * 32)

        assert excinfo.value.status_code == 404
        assert excinfo.value.message == "Highlight not found"
        assert str(excinfo.value) == "404: Highlight not found"

    async def test_unknown_resource(self, api):
        with pytest.raises(ValueError):
            await api.list("widgets")

    async def test_export_subscribers(self, api):
        await api.create("subscribers", {"email": "reader@example.com"})

        text = await api.export_subscribers()

        assert text.splitlines()[0] == "seq,email,subscribed_at"
        assert "reader@example.com" in text

    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test") as http:
            with pytest.raises(APIError) as excinfo:
                await AdminAPIClient(http).next_seq("highlights")

        assert excinfo.value.status_code is None


class FailingAPI:
    async def next_seq(self, resource):
        raise APIError(502, "Could not read the current sequence number")


@pytest.mark.asyncio
class TestNextSequence:

    async def test_create_loads_preview(self, api):
        await api.create("highlights", {"title": "T", "content": "C"})

        loader = NextSequence(api, "highlights", FormMode.CREATE)
        assert loader.value is NOT_READY
        assert not loader.submittable

        assert await loader.load() == 2
        assert loader.ready and loader.submittable

    async def test_edit_uses_existing_seq_without_request(self):
        loader = NextSequence(FailingAPI(), "highlights", FormMode.EDIT, existing_seq=12)

        assert loader.value == 12
        assert await loader.load() == 12
        assert loader.submittable

    async def test_edit_requires_existing_seq(self):
        with pytest.raises(ValueError):
            NextSequence(FailingAPI(), "highlights", "edit")

    async def test_failure_is_explicit_and_never_defaults(self):
        loader = NextSequence(FailingAPI(), "press_releases", FormMode.CREATE)

        assert await loader.load() is NOT_READY
        assert loader.error == "Could not read the current sequence number"
        assert not loader.ready
        assert not loader.submittable
        assert not NOT_READY
