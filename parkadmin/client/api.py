"""
Async Python client for the admin REST API.

Mirrors what the admin frontend does: list/get/create/update/delete per
resource, the next-seq preview, and Google sign-in. Built on
httpx.AsyncClient, so tests can point it at the ASGI app directly:

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        client = AdminAPIClient(http, AdminSession())
        page = await client.list("highlights", FilterCriteria(status="draft"))

Every non-2xx answer raises APIError carrying the server's ``detail``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

import httpx

from parkadmin.client.session import AdminSession
from parkadmin.services.listing import ALL, FilterCriteria

# Resource key -> path below the API prefix
RESOURCE_PATHS = {
    "highlights": "/highlights",
    "press_releases": "/press-release",
    "categories": "/categories",
    "subscribers": "/subscribers",
}


class APIError(Exception):
    """Non-2xx response (or transport failure, status_code None)."""

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code}: {self.message}"


@dataclass
class ListPage:
    items: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0


class AdminAPIClient:
    """Thin typed wrapper over the REST surface."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        session: Optional[AdminSession] = None,
        prefix: str = "/api/v1",
    ):
        self.http = http_client
        self.session = session or AdminSession()
        self.prefix = prefix.rstrip("/")

    # ========================================
    # Auth
    # ========================================

    async def sign_in(self, credential: str) -> Dict[str, Any]:
        """Exchange a Google credential for a session; returns the user."""
        payload = await self._request("POST", "/auth/google", json={"credential": credential})
        self.session.login(payload["access_token"], payload["user"])
        return payload["user"]

    def sign_out(self) -> None:
        self.session.logout()

    # ========================================
    # Resources
    # ========================================

    async def list(
        self,
        resource: str,
        criteria: Optional[FilterCriteria] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> ListPage:
        params = self._criteria_params(criteria or FilterCriteria())
        for key, value in (("_sort", sort), ("_order", order), ("_start", start), ("_end", end)):
            if value is not None:
                params[key] = value

        response = await self._send("GET", self._path(resource), params=params)
        items = self._json(response)
        total = response.headers.get("x-total-count")
        return ListPage(items=items, total=int(total) if total is not None else len(items))

    async def get(self, resource: str, record_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"{self._path(resource)}/{record_id}")

    async def create(self, resource: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """POST the record; returns the full envelope ({message, <resource>, warning})."""
        return await self._request("POST", self._path(resource), json=data)

    async def update(self, resource: str, record_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PATCH", f"{self._path(resource)}/{record_id}", json=data)

    async def delete(self, resource: str, ids: Union[str, Iterable[str]]) -> Dict[str, Any]:
        """Delete one or many records with a single request (comma-joined ids)."""
        if isinstance(ids, str):
            ids = [ids]
        joined = ",".join(ids)
        if not joined:
            raise ValueError("No ids to delete")
        return await self._request("DELETE", f"{self._path(resource)}/{joined}")

    async def next_seq(self, resource: str) -> int:
        payload = await self._request("GET", f"{self._path(resource)}/next-seq")
        return int(payload["seq"])

    async def export_subscribers(self, criteria: Optional[FilterCriteria] = None) -> str:
        params = self._criteria_params(criteria or FilterCriteria())
        response = await self._send("GET", f"{self._path('subscribers')}/export", params=params)
        return response.text

    # ========================================
    # Internals
    # ========================================

    def _path(self, resource: str) -> str:
        try:
            return RESOURCE_PATHS[resource]
        except KeyError:
            raise ValueError(f"Unknown resource: {resource}") from None

    @staticmethod
    def _criteria_params(criteria: FilterCriteria) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if criteria.search:
            params["title_like"] = criteria.search
        for key in ("status", "category", "period"):
            value = getattr(criteria, key)
            if value and value != ALL:
                params[key] = str(value)
        for key in ("start_date", "end_date"):
            value = getattr(criteria, key)
            if value:
                params[key] = value.isoformat() if hasattr(value, "isoformat") else str(value)
        return params

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        return self._json(await self._send(method, path, **kwargs))

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self.http.request(
                method,
                f"{self.prefix}{path}",
                headers=self.session.headers(),
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise APIError(None, f"Request failed: {e}") from e

        if response.is_error:
            raise APIError(response.status_code, self._error_message(response))
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise APIError(response.status_code, "Response is not valid JSON") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            detail = body.get("detail") or body.get("message")
            if isinstance(detail, str):
                return detail
            if detail is not None:
                return str(detail)
        return response.reason_phrase
