"""Transfer strategy selection."""
from ..models import MiB, TransferStrategy

MULTIPART_THRESHOLD = 5 * MiB


def is_video_type(mime_type: str) -> bool:
    return (mime_type or "").lower().startswith("video/")


def is_image_type(mime_type: str) -> bool:
    return (mime_type or "").lower().startswith("image/")


def select_strategy(
    size_bytes: int,
    mime_type: str,
    threshold: int = MULTIPART_THRESHOLD,
) -> TransferStrategy:
    """
    Videos, and anything at or over the threshold, go multipart.

    Everything else is sent in a single PUT.
    """
    if is_video_type(mime_type) or size_bytes >= threshold:
        return TransferStrategy.MULTIPART
    return TransferStrategy.SINGLE_SHOT
