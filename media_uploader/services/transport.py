"""
Byte-Range Transport - Single Responsibility: one PUT of raw bytes to a presigned URL.

No retries, no cancellation: exactly one attempt per call.
"""
from __future__ import annotations

import inspect
import logging
from typing import AsyncIterator, Optional

import httpx

from ..errors import TransportError
from ..protocols import FractionCallback

logger = logging.getLogger(__name__)

DEFAULT_SLICE_BYTES = 64 * 1024


def parse_etag(value: Optional[str]) -> str:
    """Strip surrounding quote characters from an ETag header value."""
    if not value:
        return ""
    return value.strip().strip('"')


class ByteRangeTransport:
    """
    Transport for direct-to-storage PUTs.

    Implements IByteTransport protocol. Uses its own httpx client so the
    application's credentials are never sent to the storage host.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        slice_bytes: int = DEFAULT_SLICE_BYTES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._timeout = timeout
        self._slice_bytes = slice_bytes
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _stream(
        self,
        payload: bytes,
        on_progress: Optional[FractionCallback],
    ) -> AsyncIterator[bytes]:
        total = len(payload)
        view = memoryview(payload)
        loaded = 0
        while loaded < total:
            piece = bytes(view[loaded:loaded + self._slice_bytes])
            yield piece
            loaded += len(piece)
            if on_progress is not None:
                result = on_progress(loaded / total)
                if inspect.isawaitable(result):
                    await result

    async def put_bytes(
        self,
        url: str,
        payload: bytes,
        content_type: str,
        on_progress: Optional[FractionCallback] = None,
    ) -> str:
        """
        PUT payload to url.

        Args:
            url: Fully-qualified presigned URL
            payload: Bytes to send
            content_type: Value of the Content-Type header
            on_progress: Called with the loaded fraction after each slice is sent

        Returns:
            ETag without quotes, or "" if the header is absent

        Raises:
            TransportError: non-2xx response or network failure
        """
        if not self._client:
            raise RuntimeError("ByteRangeTransport not initialized. Use 'async with' context.")

        headers = {"Content-Type": content_type, "Content-Length": str(len(payload))}
        logger.debug("PUT %d bytes (%s)", len(payload), content_type)
        try:
            response = await self._client.put(
                url,
                content=self._stream(payload, on_progress),
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Storage PUT failed: {exc}") from exc

        if not response.is_success:
            raise TransportError(
                f"Storage PUT returned {response.status_code}",
                status_code=response.status_code,
                details={"body": response.text[:500]},
            )

        return parse_etag(response.headers.get("ETag"))
