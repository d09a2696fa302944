"""Exception hierarchy for media uploads."""
from __future__ import annotations

from typing import Any, Dict, Optional


class UploadError(Exception):
    """Base exception for all upload failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class HandshakeError(UploadError):
    """Backend rejected or failed a presign/initiate/part-url/complete request."""

    def __init__(
        self,
        message: str,
        endpoint: str = "",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code


class TransportError(UploadError):
    """Direct PUT to storage failed at the network layer or returned non-2xx."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class FallbackError(UploadError):
    """Server-proxied fallback upload failed."""

    def __init__(
        self,
        message: str,
        direct_error: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.direct_error = direct_error


class MultipartUploadError(UploadError):
    """Multipart precondition failed (e.g. nothing to split into parts)."""
    pass


class SourceReadError(UploadError):
    """Byte source returned fewer bytes than the candidate declared."""
    pass


class ValidationError(UploadError):
    """Base class for candidate validation errors."""
    pass


class UnsupportedMediaTypeError(ValidationError):
    """MIME type is not an accepted image or video type."""
    pass


class FileTooLargeError(ValidationError):
    """File exceeds the size limit for its media kind."""
    pass


class EmptyFileError(ValidationError):
    """File has no content."""
    pass
