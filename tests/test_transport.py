"""Tests for ByteRangeTransport against a mocked storage host."""
import httpx
import pytest

from media_uploader.errors import TransportError
from media_uploader.services.transport import ByteRangeTransport, parse_etag


def test_parse_etag():
    assert parse_etag('"abc123"') == "abc123"
    assert parse_etag("abc123") == "abc123"
    assert parse_etag(' "abc" ') == "abc"
    assert parse_etag(None) == ""
    assert parse_etag("") == ""


class TestByteRangeTransport:
    @pytest.mark.asyncio
    async def test_put_sends_payload_and_returns_etag(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, headers={"ETag": '"d41d8cd9"'})

        async with ByteRangeTransport(transport=httpx.MockTransport(handler)) as transport:
            etag = await transport.put_bytes(
                "https://storage.test/menus/dish.jpg?sig=abc",
                b"0123456789",
                "image/jpeg",
            )

        assert etag == "d41d8cd9"
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "PUT"
        assert str(request.url) == "https://storage.test/menus/dish.jpg?sig=abc"
        assert request.headers["content-type"] == "image/jpeg"
        assert request.headers["content-length"] == "10"
        assert "transfer-encoding" not in request.headers
        assert "authorization" not in request.headers
        assert request.content == b"0123456789"

    @pytest.mark.asyncio
    async def test_progress_fractions_strictly_increase(self):
        fractions = []

        def handler(request):
            return httpx.Response(200, headers={"ETag": "plain"})

        async with ByteRangeTransport(
            slice_bytes=4, transport=httpx.MockTransport(handler)
        ) as transport:
            etag = await transport.put_bytes("https://storage.test/p", b"0123456789", "video/mp4", fractions.append)

        assert etag == "plain"
        assert fractions == [0.4, 0.8, 1.0]

    @pytest.mark.asyncio
    async def test_async_progress_callback(self):
        fractions = []

        async def on_progress(fraction):
            fractions.append(fraction)

        def handler(request):
            return httpx.Response(200)

        async with ByteRangeTransport(
            slice_bytes=5, transport=httpx.MockTransport(handler)
        ) as transport:
            await transport.put_bytes("https://storage.test/p", b"0123456789", "video/mp4", on_progress)

        assert fractions == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_missing_etag_is_empty_string(self):
        def handler(request):
            return httpx.Response(200)

        async with ByteRangeTransport(transport=httpx.MockTransport(handler)) as transport:
            assert await transport.put_bytes("https://storage.test/p", b"abc", "image/png") == ""

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self):
        def handler(request):
            return httpx.Response(403, text="<Error><Code>AccessDenied</Code></Error>")

        async with ByteRangeTransport(transport=httpx.MockTransport(handler)) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.put_bytes("https://storage.test/p", b"abc", "image/png")

        assert exc_info.value.status_code == 403
        assert "AccessDenied" in exc_info.value.details["body"]

    @pytest.mark.asyncio
    async def test_network_error_raises_without_status(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with ByteRangeTransport(transport=httpx.MockTransport(handler)) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.put_bytes("https://storage.test/p", b"abc", "image/png")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_requires_context(self):
        transport = ByteRangeTransport()
        with pytest.raises(RuntimeError):
            await transport.put_bytes("https://storage.test/p", b"abc", "image/png")
