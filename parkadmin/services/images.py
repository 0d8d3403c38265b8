"""
Image pipeline: validate, upload and delete record images.

Policy:
-------
- Existing http(s) URLs are kept as they are.
- ``data:`` URIs are checked (valid base64, not larger than max_bytes)
  and uploaded to the CDN.
- At most ``max_images`` references are processed per record.
- Uploads fan out concurrently, bounded by an asyncio.Semaphore.
- Every CDN call is raced against a timeout (asyncio.wait_for) and retried
  ``retry_attempts`` times (0 by default).
- All uploads are settled (gather with return_exceptions=True). Successes
  are kept in input order; failures become human-readable errors that the
  caller reports as a ``warning``. A failed image never fails the record.
- Deletes are best effort: failures are logged and returned, never raised.

Usage:
------
    result = await pipeline.process(["https://...", "data:image/png;base64,..."])
    record.images = result.urls
    warning = result.warning
"""

import asyncio
import base64
import binascii
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar

import httpx

from parkadmin.core.config import settings
from parkadmin.core.errors import UpstreamError, ValidationError
from parkadmin.core.logging import get_logger
from parkadmin.services.cdn import CloudinaryClient

logger = get_logger(__name__)

T = TypeVar("T")


def is_data_uri(value: str) -> bool:
    return isinstance(value, str) and value.startswith("data:")


def is_remote_url(value: str) -> bool:
    return isinstance(value, str) and value.startswith(("http://", "https://"))


def data_uri_size(data_uri: str) -> int:
    """
    Decoded size in bytes of a base64 data URI.

    Raises:
        ValidationError: not a base64 data URI, or the payload does not decode
    """
    header, sep, encoded = data_uri.partition(",")
    if not sep or not header.startswith("data:") or ";base64" not in header:
        raise ValidationError("Image is not a base64 data URI")
    try:
        decoded = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Image data is corrupt") from None
    if not decoded:
        raise ValidationError("Image data is empty")
    return len(decoded)


@dataclass
class ImageBatchResult:
    """Outcome of processing a record's images."""

    urls: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def warning(self) -> Optional[str]:
        if not self.errors:
            return None
        count = len(self.errors)
        noun = "image" if count == 1 else "images"
        return f"{count} {noun} could not be saved: " + "; ".join(self.errors)


class ImagePipeline:
    """Uploads and deletes record images through the CDN client."""

    def __init__(
        self,
        cdn: CloudinaryClient,
        max_concurrency: int = 5,
        max_images: int = 5,
        max_bytes: int = 15 * 1024 * 1024,
        upload_timeout: float = 120.0,
        delete_timeout: float = 30.0,
        retry_attempts: int = 0,
    ):
        self.cdn = cdn
        self.max_concurrency = max(1, max_concurrency)
        self.max_images = max_images
        self.max_bytes = max_bytes
        self.upload_timeout = upload_timeout
        self.delete_timeout = delete_timeout
        self.retry_attempts = max(0, retry_attempts)

    @classmethod
    def from_settings(cls, cdn: CloudinaryClient) -> "ImagePipeline":
        return cls(
            cdn,
            max_concurrency=settings.CDN_MAX_CONCURRENT_UPLOADS,
            max_images=settings.CDN_MAX_IMAGES_PER_RECORD,
            max_bytes=settings.CDN_MAX_IMAGE_BYTES,
            upload_timeout=settings.CDN_UPLOAD_TIMEOUT_SECONDS,
            delete_timeout=settings.CDN_DELETE_TIMEOUT_SECONDS,
            retry_attempts=settings.CDN_RETRY_ATTEMPTS,
        )

    # ========================================
    # Upload
    # ========================================

    async def process(self, images: Iterable[str]) -> ImageBatchResult:
        """Keep existing URLs, upload data URIs, settle everything."""
        images = [image for image in images if image]
        result = ImageBatchResult()

        if len(images) > self.max_images:
            dropped = len(images) - self.max_images
            result.errors.append(f"only {self.max_images} images are allowed, {dropped} ignored")
            images = images[: self.max_images]

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def handle(position: int, image: str) -> str:
            if is_remote_url(image):
                return image
            if not is_data_uri(image):
                raise ValidationError(f"image {position}: not a URL or data URI")
            size = data_uri_size(image)
            if size > self.max_bytes:
                limit_mb = self.max_bytes / (1024 * 1024)
                raise ValidationError(f"image {position}: larger than {limit_mb:g} MB")
            async with semaphore:
                return await self._with_policy(
                    lambda: self.cdn.upload(image),
                    self.upload_timeout,
                )

        settled = await asyncio.gather(
            *(handle(i, image) for i, image in enumerate(images, start=1)),
            return_exceptions=True,
        )

        for position, outcome in enumerate(settled, start=1):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                message = self._describe(outcome)
                logger.warning("image_upload_failed", position=position, error=message)
                result.errors.append(message if message.startswith("image ") else f"image {position}: {message}")
            else:
                result.urls.append(outcome)

        return result

    async def upload_one(self, image: str) -> ImageBatchResult:
        """Single-image variant used by press releases."""
        return await self.process([image])

    # ========================================
    # Delete
    # ========================================

    async def delete(self, urls: Iterable[Optional[str]]) -> List[str]:
        """
        Best-effort delete of every CDN image in ``urls``.

        Returns:
            Error messages for the images that could not be deleted
        """
        public_ids = []
        for url in urls:
            public_id = self.cdn.public_id_from_url(url)
            if public_id and public_id not in public_ids:
                public_ids.append(public_id)

        if not public_ids:
            return []

        async def destroy(public_id: str) -> bool:
            return await self._with_policy(
                lambda: self.cdn.destroy(public_id),
                self.delete_timeout,
            )

        settled = await asyncio.gather(
            *(destroy(public_id) for public_id in public_ids),
            return_exceptions=True,
        )

        errors = []
        for public_id, outcome in zip(public_ids, settled):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                message = f"{public_id}: {self._describe(outcome)}"
                logger.warning("image_delete_failed", public_id=public_id, error=message)
                errors.append(message)
        return errors

    # ========================================
    # Internals
    # ========================================

    async def _with_policy(self, call: Callable[[], Awaitable[T]], timeout: float) -> T:
        """Run ``call`` with the timeout and retry policy."""
        attempt = 0
        while True:
            try:
                return await asyncio.wait_for(call(), timeout=timeout)
            except (asyncio.TimeoutError, UpstreamError) as e:
                if attempt >= self.retry_attempts:
                    raise
                attempt += 1
                logger.info("image_cdn_retry", attempt=attempt, error=self._describe(e))

    @staticmethod
    def _describe(error: Exception) -> str:
        if isinstance(error, asyncio.TimeoutError):
            return "timed out"
        message = getattr(error, "message", None) or str(error)
        return message or error.__class__.__name__


# ========================================
# FastAPI dependency
# ========================================

async def get_image_pipeline():
    """
    Provide an ImagePipeline backed by a per-request httpx client.

    Tests override this dependency to plug in a fake CDN transport.
    """
    async with httpx.AsyncClient() as http_client:
        yield ImagePipeline.from_settings(CloudinaryClient.from_settings(http_client))
