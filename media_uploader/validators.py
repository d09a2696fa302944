"""
Candidate validation.

Accepted media types and size limits for menu images and videos.
"""
from __future__ import annotations

from .errors import EmptyFileError, FileTooLargeError, UnsupportedMediaTypeError
from .models import MiB, UploadCandidate, UploadConfig


def _format_limit(size_bytes: int) -> str:
    return f"{size_bytes / MiB:g}MB"


def validate_candidate(candidate: UploadCandidate, config: UploadConfig) -> None:
    """
    Check that a candidate may be uploaded.

    Raises:
        UnsupportedMediaTypeError: not an accepted image or video type
        EmptyFileError: the file has no content
        FileTooLargeError: over the limit for its media kind
    """
    mime = candidate.mime_type.lower()
    if mime in config.image_types:
        kind, limit = "image", config.max_image_size
    elif mime in config.video_types:
        kind, limit = "video", config.max_video_size
    else:
        accepted = ", ".join(config.image_types + config.video_types)
        raise UnsupportedMediaTypeError(
            f"{candidate.name}: unsupported type {candidate.mime_type} (accepted: {accepted})",
            details={"mime_type": candidate.mime_type},
        )

    if candidate.size_bytes == 0:
        raise EmptyFileError(f"{candidate.name}: file is empty")

    if candidate.size_bytes > limit:
        raise FileTooLargeError(
            f"{candidate.name}: max {kind} size is {_format_limit(limit)}",
            details={"size_bytes": candidate.size_bytes, "limit": limit},
        )
