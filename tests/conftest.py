"""Shared fixtures for media_uploader tests."""
import inspect
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest

from media_uploader.errors import TransportError
from media_uploader.models import UploadSession

MiB = 1024 * 1024


class FakeTransport:
    """Records PUTs and reports progress in quarters, like a slow network."""

    def __init__(self, fail_on_call: Optional[int] = None, status_code: int = 500):
        self.calls: List[dict] = []
        self._fail_on_call = fail_on_call
        self._status_code = status_code

    async def put_bytes(self, url, payload, content_type, on_progress=None):
        self.calls.append({"url": url, "payload": payload, "content_type": content_type})
        if self._fail_on_call is not None and len(self.calls) == self._fail_on_call:
            raise TransportError(f"PUT returned {self._status_code}", status_code=self._status_code)
        if on_progress is not None:
            for fraction in (0.25, 0.5, 0.75, 1.0):
                result = on_progress(fraction)
                if inspect.isawaitable(result):
                    await result
        return f"etag-{len(self.calls)}"


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def backend():
    mock = AsyncMock()
    mock.get_upload_url.return_value = ("https://storage.test/put?sig=1", "https://cdn.test/dish.jpg")
    mock.initiate_multipart.return_value = UploadSession(upload_id="up-1", storage_key="menus/clip.mp4")

    async def part_url(session, part_number):
        return f"https://storage.test/part/{part_number}"

    mock.get_part_url.side_effect = part_url
    mock.complete_multipart.return_value = "https://cdn.test/clip.mp4"
    mock.upload_via_server.return_value = "https://app.test/uploads/dish.jpg"
    return mock


@pytest.fixture
def percents():
    """Collects published percentages."""
    return []
