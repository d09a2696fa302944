"""Tests for media_uploader models."""
import io

import pytest

from media_uploader.errors import SourceReadError
from media_uploader.models import (
    ChunkDescriptor,
    CompletedPart,
    TransferStrategy,
    UploadCandidate,
    UploadConfig,
    UploadPath,
    UploadResult,
)


class TestUploadCandidate:
    def test_from_path_guesses_mime(self, tmp_path):
        path = tmp_path / "dish.jpg"
        path.write_bytes(b"x" * 10)

        candidate = UploadCandidate.from_path(path)

        assert candidate.name == "dish.jpg"
        assert candidate.mime_type == "image/jpeg"
        assert candidate.size_bytes == 10
        assert candidate.is_image is True
        assert candidate.is_video is False

    def test_from_path_unknown_extension(self, tmp_path):
        path = tmp_path / "blob.unknownext"
        path.write_bytes(b"abc")

        assert UploadCandidate.from_path(path).mime_type == "application/octet-stream"

    def test_explicit_mime_wins(self):
        candidate = UploadCandidate.from_bytes("clip.bin", b"abc", mime_type="video/mp4")
        assert candidate.mime_type == "video/mp4"
        assert candidate.is_video is True

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            UploadCandidate(name="a", mime_type="image/png", size_bytes=-1, source=b"")

    def test_immutable(self):
        candidate = UploadCandidate.from_bytes("a.png", b"abc")
        with pytest.raises(Exception):
            candidate.name = "b.png"

    @pytest.mark.asyncio
    async def test_read_range_from_bytes(self):
        candidate = UploadCandidate.from_bytes("a.png", b"0123456789")
        assert await candidate.read_range(2, 5) == b"234"
        assert await candidate.read_all() == b"0123456789"

    @pytest.mark.asyncio
    async def test_read_range_from_path(self, tmp_path):
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"abcdefghij")
        candidate = UploadCandidate.from_path(path)

        assert await candidate.read_range(5, 10) == b"fghij"

    @pytest.mark.asyncio
    async def test_read_range_from_fileobj(self):
        fileobj = io.BytesIO(b"abcdefghij")
        candidate = UploadCandidate.from_fileobj("clip.mp4", fileobj)

        assert candidate.size_bytes == 10
        assert await candidate.read_range(0, 4) == b"abcd"
        assert await candidate.read_range(8, 10) == b"ij"

    @pytest.mark.asyncio
    async def test_short_read_raises(self, tmp_path):
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"abc")
        candidate = UploadCandidate(name="clip.mp4", mime_type="video/mp4", size_bytes=10, source=path)

        with pytest.raises(SourceReadError):
            await candidate.read_all()


class TestChunkAndPart:
    def test_chunk_size(self):
        chunk = ChunkDescriptor(part_number=2, start=5, end=12)
        assert chunk.size_bytes == 7
        assert chunk.byte_range == (5, 12)

    def test_completed_part_payload(self):
        assert CompletedPart(3, "abc").to_payload() == {"part_number": 3, "etag": "abc"}


class TestUploadResult:
    def test_to_dict(self):
        result = UploadResult(url="https://cdn/x.jpg", filename="x.jpg", strategy=TransferStrategy.SINGLE_SHOT)
        assert result.to_dict() == {"url": "https://cdn/x.jpg"}
        assert result.used_fallback is False

    def test_fallback_flag(self):
        result = UploadResult(
            url="u",
            filename="x.jpg",
            strategy=TransferStrategy.SINGLE_SHOT,
            path=UploadPath.PROXY_FALLBACK,
        )
        assert result.used_fallback is True


class TestUploadConfig:
    def test_defaults(self):
        config = UploadConfig()
        assert config.chunk_size == 5 * 1024 * 1024
        assert config.multipart_threshold == 5 * 1024 * 1024
        assert config.transfer_timeout is None
        assert config.enable_fallback is True
        assert config.abort_on_failure is True
        assert "image/jpeg" in config.image_types
        assert "video/quicktime" in config.video_types

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            UploadConfig(chunk_size=0)

    def test_invalid_retries(self):
        with pytest.raises(ValueError):
            UploadConfig(api_retries=0)
