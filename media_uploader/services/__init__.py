"""Services for media_uploader module."""
from .api_client import HTTPAPIClient
from .backend import UploadBackend
from .progress import ProgressAggregator, ProgressEvent, ProgressState, percent
from .transport import ByteRangeTransport

__all__ = [
    "HTTPAPIClient",
    "UploadBackend",
    "ProgressAggregator",
    "ProgressEvent",
    "ProgressState",
    "percent",
    "ByteRangeTransport",
]
