"""
Protocols (Interfaces) for Dependency Inversion.

Small, focused interfaces for the collaborators of the upload engine.
"""
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Tuple, Union, runtime_checkable

from .models import CompletedPart, UploadCandidate, UploadSession

FractionCallback = Callable[[float], Union[None, Awaitable[None]]]


@runtime_checkable
class IAPIClient(Protocol):
    """Interface for JSON API operations."""

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET request to API."""
        ...

    async def post(
        self,
        endpoint: str,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """POST request to API."""
        ...


@runtime_checkable
class IByteTransport(Protocol):
    """Interface for a single presigned PUT."""

    async def put_bytes(
        self,
        url: str,
        payload: bytes,
        content_type: str,
        on_progress: Optional[FractionCallback] = None,
    ) -> str:
        """PUT payload to url and return the ETag."""
        ...


@runtime_checkable
class IUploadBackend(Protocol):
    """Interface for the backend that issues presigned URLs."""

    async def get_upload_url(self, filename: str, content_type: str) -> Tuple[str, str]:
        ...

    async def initiate_multipart(self, filename: str, content_type: str) -> UploadSession:
        ...

    async def get_part_url(self, session: UploadSession, part_number: int) -> str:
        ...

    async def complete_multipart(self, session: UploadSession, parts: List[CompletedPart]) -> str:
        ...

    async def abort_multipart(self, session: UploadSession) -> None:
        ...

    async def upload_via_server(self, candidate: UploadCandidate, payload: bytes) -> str:
        ...
