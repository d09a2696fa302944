"""Orchestrator package - coordinates upload workflows."""
from .core import UploadOrchestrator
from .fallback import FallbackUploader
from .multipart import MultipartOrchestrator, MultipartState, partition
from .single_shot import SingleShotUploader, choose_path
from .strategy import select_strategy

__all__ = [
    "UploadOrchestrator",
    "FallbackUploader",
    "MultipartOrchestrator",
    "MultipartState",
    "SingleShotUploader",
    "choose_path",
    "partition",
    "select_strategy",
]
