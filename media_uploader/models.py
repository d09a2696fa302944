"""
Models for media_uploader.

Immutable dataclasses describing one upload attempt.
"""
from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Tuple, Union

from .errors import SourceReadError

MiB = 1024 * 1024

DEFAULT_MIME_TYPE = "application/octet-stream"

ByteSource = Union[Path, bytes, BinaryIO]


class TransferStrategy(Enum):
    """How a candidate is moved to storage."""
    SINGLE_SHOT = "single_shot"
    MULTIPART = "multipart"


class UploadPath(Enum):
    """Which route produced the public URL."""
    DIRECT = "direct"
    PROXY_FALLBACK = "proxy_fallback"


@dataclass(frozen=True)
class UploadCandidate:
    """The file to transfer. Immutable for the lifetime of one upload attempt."""
    name: str
    mime_type: str
    size_bytes: int
    source: ByteSource = field(repr=False, compare=False)

    def __post_init__(self):
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be >= 0, got {self.size_bytes}")

    @classmethod
    def from_path(cls, path: Union[str, Path], mime_type: Optional[str] = None) -> "UploadCandidate":
        path = Path(path)
        return cls(
            name=path.name,
            mime_type=mime_type or guess_mime_type(path.name),
            size_bytes=path.stat().st_size,
            source=path,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: Optional[str] = None) -> "UploadCandidate":
        return cls(
            name=name,
            mime_type=mime_type or guess_mime_type(name),
            size_bytes=len(data),
            source=bytes(data),
        )

    @classmethod
    def from_fileobj(
        cls,
        name: str,
        fileobj: BinaryIO,
        mime_type: Optional[str] = None,
        size_bytes: Optional[int] = None,
    ) -> "UploadCandidate":
        """Wrap a seekable binary file object read from offset 0. Size is measured when not given."""
        if size_bytes is None:
            position = fileobj.tell()
            size_bytes = fileobj.seek(0, 2)
            fileobj.seek(position)
        return cls(
            name=name,
            mime_type=mime_type or guess_mime_type(name),
            size_bytes=size_bytes,
            source=fileobj,
        )

    @property
    def is_video(self) -> bool:
        return self.mime_type.lower().startswith("video/")

    @property
    def is_image(self) -> bool:
        return self.mime_type.lower().startswith("image/")

    async def read_range(self, start: int, end: int) -> bytes:
        """Read bytes ``[start, end)`` from the source."""
        expected = end - start
        if isinstance(self.source, (bytes, bytearray)):
            data = bytes(self.source[start:end])
        elif isinstance(self.source, Path):
            data = await asyncio.to_thread(_read_file_range, self.source, start, expected)
        else:
            data = await asyncio.to_thread(_read_fileobj_range, self.source, start, expected)

        if len(data) != expected:
            raise SourceReadError(
                f"short read on {self.name}: expected {expected} bytes at offset {start}, got {len(data)}",
                details={"start": start, "end": end, "read": len(data)},
            )
        return data

    async def read_all(self) -> bytes:
        return await self.read_range(0, self.size_bytes)


def _read_file_range(path: Path, start: int, length: int) -> bytes:
    with open(path, "rb") as f:
        f.seek(start)
        return f.read(length)


def _read_fileobj_range(fileobj: BinaryIO, start: int, length: int) -> bytes:
    fileobj.seek(start)
    return fileobj.read(length)


def guess_mime_type(name: str) -> str:
    mime, _ = mimetypes.guess_type(name)
    return mime or DEFAULT_MIME_TYPE


@dataclass(frozen=True)
class UploadSession:
    """Multipart session issued by the backend at initiation."""
    upload_id: str
    storage_key: str


@dataclass(frozen=True)
class ChunkDescriptor:
    """One part of a multipart upload: bytes ``[start, end)``."""
    part_number: int
    start: int
    end: int

    @property
    def size_bytes(self) -> int:
        return self.end - self.start

    @property
    def byte_range(self) -> Tuple[int, int]:
        return self.start, self.end


@dataclass(frozen=True)
class CompletedPart:
    """Part number and storage ETag (quotes stripped)."""
    part_number: int
    etag: str

    def to_payload(self) -> Dict[str, Any]:
        return {"part_number": self.part_number, "etag": self.etag}


@dataclass(frozen=True)
class UploadResult:
    """Immutable result of a successful upload."""
    url: str
    filename: str
    strategy: TransferStrategy
    path: UploadPath = UploadPath.DIRECT
    parts: int = 0

    @property
    def used_fallback(self) -> bool:
        return self.path == UploadPath.PROXY_FALLBACK

    def to_dict(self) -> Dict[str, str]:
        return {"url": self.url}


@dataclass(frozen=True)
class UploadConfig:
    """Immutable configuration for upload operations."""
    chunk_size: int = 5 * MiB
    multipart_threshold: int = 5 * MiB
    progress_slice_bytes: int = 64 * 1024
    api_timeout: float = 60
    transfer_timeout: Optional[float] = None  # None: no timeout on storage PUTs
    api_retries: int = 1
    enable_fallback: bool = True
    abort_on_failure: bool = True
    validate_media: bool = True
    max_image_size: int = 10 * MiB
    max_video_size: int = 50 * MiB
    image_types: Tuple[str, ...] = (
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
        "image/gif",
    )
    video_types: Tuple[str, ...] = ("video/mp4", "video/mov", "video/quicktime")

    def __post_init__(self):
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.progress_slice_bytes <= 0:
            raise ValueError("progress_slice_bytes must be positive")
        if self.api_retries < 1:
            raise ValueError("api_retries must be at least 1")
