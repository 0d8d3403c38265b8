"""
Image CDN client (Cloudinary REST API over httpx).

Only the two calls the admin panel needs are implemented:

- upload:  POST {upload_prefix}/v1_1/{cloud}/image/upload   → secure URL
- destroy: POST {upload_prefix}/v1_1/{cloud}/image/destroy  → {"result": "ok"}

Request signing and endpoint URLs come from the Cloudinary SDK
(``cloudinary.utils``); the SDK's uploader is blocking, so the requests
themselves go out on the shared ``httpx.AsyncClient``.

Timeouts and retries are NOT handled here; ImagePipeline owns that
policy. Every failure is raised as UpstreamError.

References:
-----------
- https://cloudinary.com/documentation/image_upload_api_reference
- https://cloudinary.com/documentation/authentication_signatures
"""

import logging
import re
import time
from typing import Any, Dict, Optional

import httpx
from cloudinary.utils import api_sign_request, cloudinary_api_url

from parkadmin.core.config import settings
from parkadmin.core.errors import UpstreamError

logger = logging.getLogger(__name__)

_VERSION_PREFIX = re.compile(r"^v\d+/")
_EXTENSION = re.compile(r"\.[^/.]+$")


class CloudinaryClient:
    """
    Minimal async Cloudinary client.

    Example:
        >>> async with httpx.AsyncClient() as http:
        ...     cdn = CloudinaryClient("demo", "key", "secret", "park-admin", http)
        ...     url = await cdn.upload("data:image/png;base64,iVBOR...")
        ...     await cdn.destroy(cdn.public_id_from_url(url))
    """

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        folder: Optional[str],
        http_client: httpx.AsyncClient,
        upload_prefix: str = "https://api.cloudinary.com",
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.http = http_client
        self.upload_prefix = upload_prefix.rstrip("/")

    @classmethod
    def from_settings(cls, http_client: httpx.AsyncClient) -> "CloudinaryClient":
        return cls(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
            http_client=http_client,
            upload_prefix=settings.CLOUDINARY_UPLOAD_PREFIX,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    # ========================================
    # API calls
    # ========================================

    async def upload(self, data_uri: str) -> str:
        """
        Upload an image given as a data URI (or remote URL).

        Returns:
            The ``secure_url`` of the stored image

        Raises:
            UpstreamError: not configured, transport failure or API error
        """
        params: Dict[str, Any] = {"timestamp": int(time.time())}
        if self.folder:
            params["folder"] = self.folder

        payload = await self._post("upload", params, file=data_uri)

        url = payload.get("secure_url") or payload.get("url")
        if not url:
            raise UpstreamError("Image CDN returned no URL")

        logger.info(f"Uploaded image to CDN: {payload.get('public_id')}")
        return url

    async def destroy(self, public_id: str) -> bool:
        """
        Delete an image by public id.

        Returns:
            True if the CDN deleted it, False if it did not exist
        """
        params = {"public_id": public_id, "timestamp": int(time.time())}
        payload = await self._post("destroy", params)

        result = payload.get("result")
        if result == "ok":
            logger.info(f"Deleted image from CDN: {public_id}")
            return True
        if result == "not found":
            logger.warning(f"Image not found on CDN: {public_id}")
            return False
        raise UpstreamError(f"Image CDN could not delete {public_id}: {result}")

    def public_id_from_url(self, url: Optional[str]) -> Optional[str]:
        """
        Derive the public id from a delivery URL.

        https://res.cloudinary.com/demo/image/upload/v1712/park-admin/abc.jpg
        → "park-admin/abc"

        Returns None for anything that is not a CDN upload URL.
        """
        if not url or not isinstance(url, str) or "/upload/" not in url:
            return None
        path = url.split("/upload/", 1)[1].split("?", 1)[0]
        path = _VERSION_PREFIX.sub("", path)
        path = _EXTENSION.sub("", path)
        return path or None

    # ========================================
    # Internals
    # ========================================

    def sign(self, params: Dict[str, Any]) -> str:
        """Request signature over the non-empty parameters (SDK algorithm)."""
        return api_sign_request(params, self.api_secret)

    def endpoint(self, action: str) -> str:
        return cloudinary_api_url(
            action,
            cloud_name=self.cloud_name,
            resource_type="image",
            upload_prefix=self.upload_prefix,
        )

    async def _post(self, action: str, params: Dict[str, Any], file: Optional[str] = None) -> Dict[str, Any]:
        if not self.configured:
            raise UpstreamError("Image CDN is not configured")

        data = dict(params)
        data["signature"] = self.sign(params)
        data["api_key"] = self.api_key
        if file is not None:
            data["file"] = file

        try:
            response = await self.http.post(self.endpoint(action), data=data)
        except httpx.HTTPError as e:
            logger.error(f"Image CDN {action} request failed: {e}")
            raise UpstreamError(f"Image CDN {action} failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if response.is_error:
            message = (payload.get("error") or {}).get("message") or response.reason_phrase
            logger.error(f"Image CDN {action} returned {response.status_code}: {message}")
            raise UpstreamError(f"Image CDN {action} failed: {message}")

        return payload
