"""
Tests for the image pipeline (validation, concurrent upload, best-effort delete).
"""

import asyncio

import pytest

from parkadmin.core.errors import UpstreamError, ValidationError
from parkadmin.services.images import (
    ImageBatchResult,
    ImagePipeline,
    data_uri_size,
    is_data_uri,
    is_remote_url,
)


class StubCDN:
    """Records calls; upload behaviour is driven per data URI."""

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.active = 0
        self.peak = 0
        self.uploads = []
        self.destroyed = []
        self.failures = {}

    async def upload(self, data_uri: str) -> str:
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            self.uploads.append(data_uri)
            outcome = self.failures.get(data_uri)
            if isinstance(outcome, list):
                outcome = outcome.pop(0) if outcome else None
            if outcome is not None:
                raise outcome
            return f"https://res.cloudinary.com/demo/image/upload/v1/park-admin/u{len(self.uploads)}.png"
        finally:
            self.active -= 1

    async def destroy(self, public_id: str) -> bool:
        if public_id.endswith("broken"):
            raise UpstreamError("Image CDN destroy failed: boom")
        self.destroyed.append(public_id)
        return True

    def public_id_from_url(self, url):
        if not url or "/upload/" not in url:
            return None
        return url.split("/upload/", 1)[1].split("/", 1)[1].rsplit(".", 1)[0]


class TestHelpers:

    def test_is_data_uri_and_remote_url(self, data_uri):
        assert is_data_uri(data_uri(b"x"))
        assert not is_data_uri("https://example.com/a.png")
        assert is_remote_url("https://example.com/a.png")
        assert is_remote_url("http://example.com/a.png")
        assert not is_remote_url(None)

    def test_data_uri_size(self, data_uri):
        assert data_uri_size(data_uri(b"12345")) == 5

    @pytest.mark.parametrize("value", [
        "data:image/png;base64,@@@not-base64@@@",
        "data:image/png,plain-text-payload",
        "data:image/png;base64,",
    ])
    def test_data_uri_size_rejects_bad_payloads(self, value):
        with pytest.raises(ValidationError):
            data_uri_size(value)

    def test_batch_warning(self):
        assert ImageBatchResult(urls=["a"]).warning is None

        result = ImageBatchResult(errors=["image 2: timed out"])
        assert result.warning == "1 image could not be saved: image 2: timed out"


@pytest.mark.asyncio
class TestProcess:

    async def test_keeps_urls_and_uploads_data_uris_in_order(self, data_uri):
        cdn = StubCDN()
        pipeline = ImagePipeline(cdn)

        result = await pipeline.process([
            "https://cdn.example.com/kept.png",
            data_uri(b"first"),
            data_uri(b"second"),
        ])

        assert result.errors == []
        assert result.urls[0] == "https://cdn.example.com/kept.png"
        assert len(result.urls) == 3
        assert len(cdn.uploads) == 2

    async def test_failed_upload_becomes_warning(self, data_uri):
        cdn = StubCDN()
        bad = data_uri(b"bad")
        cdn.failures[bad] = UpstreamError("Image CDN upload failed: quota exceeded")

        result = await ImagePipeline(cdn).process([data_uri(b"good"), bad])

        assert len(result.urls) == 1
        assert result.errors == ["image 2: Image CDN upload failed: quota exceeded"]
        assert result.warning.startswith("1 image could not be saved")

    async def test_oversized_and_corrupt_images_are_rejected_without_upload(self, data_uri):
        cdn = StubCDN()
        pipeline = ImagePipeline(cdn, max_bytes=4)

        result = await pipeline.process([
            data_uri(b"too large"),
            "data:image/png;base64,%%%",
            "ftp://example.com/a.png",
        ])

        assert result.urls == []
        assert cdn.uploads == []
        assert result.errors[0].startswith("image 1: larger than")
        assert result.errors[1] == "image 2: Image data is corrupt"
        assert result.errors[2] == "image 3: not a URL or data URI"

    async def test_too_many_images_are_dropped(self, data_uri):
        cdn = StubCDN()
        pipeline = ImagePipeline(cdn, max_images=2)

        result = await pipeline.process([data_uri(b"1"), data_uri(b"2"), data_uri(b"3")])

        assert len(result.urls) == 2
        assert result.errors == ["only 2 images are allowed, 1 ignored"]

    async def test_concurrency_is_bounded(self, data_uri):
        cdn = StubCDN(delay=0.01)
        pipeline = ImagePipeline(cdn, max_concurrency=2)

        result = await pipeline.process([data_uri(bytes([i])) for i in range(1, 6)])

        assert len(result.urls) == 5
        assert cdn.peak <= 2

    async def test_timeout_is_reported(self, data_uri):
        cdn = StubCDN(delay=1.0)
        pipeline = ImagePipeline(cdn, upload_timeout=0.01)

        result = await pipeline.process([data_uri(b"slow")])

        assert result.urls == []
        assert result.errors == ["image 1: timed out"]

    async def test_retry_policy(self, data_uri):
        cdn = StubCDN()
        flaky = data_uri(b"flaky")
        cdn.failures[flaky] = [UpstreamError("temporary"), None]

        result = await ImagePipeline(cdn, retry_attempts=1).process([flaky])

        assert len(result.urls) == 1
        assert len(cdn.uploads) == 2

    async def test_empty_entries_are_ignored(self):
        result = await ImagePipeline(StubCDN()).process(["", None])
        assert result.urls == [] and result.errors == []


@pytest.mark.asyncio
class TestDelete:

    async def test_deletes_unique_cdn_images(self):
        cdn = StubCDN()
        url = "https://res.cloudinary.com/demo/image/upload/v1/park-admin/a.png"

        errors = await ImagePipeline(cdn).delete([url, url, "https://elsewhere.example/x.png", None])

        assert errors == []
        assert cdn.destroyed == ["park-admin/a"]

    async def test_failures_are_returned_not_raised(self):
        cdn = StubCDN()

        errors = await ImagePipeline(cdn).delete([
            "https://res.cloudinary.com/demo/image/upload/v1/park-admin/ok.png",
            "https://res.cloudinary.com/demo/image/upload/v1/park-admin/broken.png",
        ])

        assert cdn.destroyed == ["park-admin/ok"]
        assert errors == ["park-admin/broken: Image CDN destroy failed: boom"]
