"""
media_uploader - Direct-to-storage uploads for menu images and videos.

Small files go up in one presigned PUT (with a server-proxied fallback),
videos and large files in sequential multipart chunks. Progress from every
transfer is merged into one 0-100 percentage.

Usage:
    from media_uploader import UploadOrchestrator

    async with UploadOrchestrator(api_url, token=token) as uploader:
        result = await uploader.upload(path, progress_callback=print)
        print(result.url)
"""
from .errors import (
    EmptyFileError,
    FallbackError,
    FileTooLargeError,
    HandshakeError,
    MultipartUploadError,
    SourceReadError,
    TransportError,
    UnsupportedMediaTypeError,
    UploadError,
    ValidationError,
)
from .models import (
    ChunkDescriptor,
    CompletedPart,
    TransferStrategy,
    UploadCandidate,
    UploadConfig,
    UploadPath,
    UploadResult,
    UploadSession,
)
from .orchestrator import UploadOrchestrator
from .services import ByteRangeTransport, HTTPAPIClient, ProgressAggregator, UploadBackend

__version__ = "0.1.0"
__all__ = [
    # Main
    "UploadOrchestrator",
    # Models
    "ChunkDescriptor",
    "CompletedPart",
    "TransferStrategy",
    "UploadCandidate",
    "UploadConfig",
    "UploadPath",
    "UploadResult",
    "UploadSession",
    # Services
    "ByteRangeTransport",
    "HTTPAPIClient",
    "ProgressAggregator",
    "UploadBackend",
    # Errors
    "UploadError",
    "HandshakeError",
    "TransportError",
    "FallbackError",
    "MultipartUploadError",
    "SourceReadError",
    "ValidationError",
    "UnsupportedMediaTypeError",
    "FileTooLargeError",
    "EmptyFileError",
]
