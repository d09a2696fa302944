"""Core orchestrator - single entry point for media uploads."""
import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union

import httpx

from ..models import TransferStrategy, UploadCandidate, UploadConfig, UploadResult
from ..services.api_client import HTTPAPIClient
from ..services.backend import UploadBackend
from ..services.progress import ProgressAggregator
from ..services.transport import ByteRangeTransport
from ..utils.events import PROGRESS, EventEmitter
from ..validators import validate_candidate
from .fallback import FallbackUploader
from .multipart import MultipartOrchestrator
from .single_shot import SingleShotUploader
from .strategy import select_strategy

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8001/api/v1"

ProgressCallback = Callable[[int], Any]
UploadSource = Union[str, Path, UploadCandidate, bytes, Any]


class UploadOrchestrator:
    """
    Orchestrates direct-to-storage uploads.

    Usage:
        async with UploadOrchestrator(api_url, token=token) as uploader:
            result = await uploader.upload(Path("dish.jpg"), progress_callback=print)
            print(result.url)
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        config: Optional[UploadConfig] = None,
        token: Optional[str] = None,
        api_transport: Optional[httpx.AsyncBaseTransport] = None,
        storage_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            api_url: Application API base URL
            config: Upload configuration
            token: Bearer token for the application API (never sent to storage)
            api_transport: Optional httpx transport for API calls (tests, proxies)
            storage_transport: Optional httpx transport for storage PUTs
        """
        self._api_url = api_url
        self._config = config or UploadConfig()
        self._token = token
        self._api_transport = api_transport
        self._storage_transport = storage_transport

        # Initialized in __aenter__
        self._api_client: Optional[HTTPAPIClient] = None
        self._transport: Optional[ByteRangeTransport] = None
        self._backend: Optional[UploadBackend] = None

    @property
    def config(self) -> UploadConfig:
        return self._config

    async def __aenter__(self):
        self._api_client = HTTPAPIClient(
            self._api_url,
            timeout=self._config.api_timeout,
            token=self._token,
            max_retries=self._config.api_retries,
            transport=self._api_transport,
        )
        await self._api_client.__aenter__()

        self._transport = ByteRangeTransport(
            timeout=self._config.transfer_timeout,
            slice_bytes=self._config.progress_slice_bytes,
            transport=self._storage_transport,
        )
        await self._transport.__aenter__()

        self._backend = UploadBackend(self._api_client)
        return self

    async def __aexit__(self, *args):
        if self._transport:
            await self._transport.__aexit__(*args)
        if self._api_client:
            await self._api_client.__aexit__(*args)

    def build_candidate(
        self,
        source: UploadSource,
        filename: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> UploadCandidate:
        if isinstance(source, UploadCandidate):
            return source
        if isinstance(source, (str, Path)):
            return UploadCandidate.from_path(source, mime_type)
        if isinstance(source, (bytes, bytearray)):
            if not filename:
                raise ValueError("filename is required when uploading raw bytes")
            return UploadCandidate.from_bytes(filename, bytes(source), mime_type)
        if hasattr(source, "read") and hasattr(source, "seek"):
            name = filename or Path(getattr(source, "name", "") or "").name
            if not name:
                raise ValueError("filename is required for unnamed file objects")
            return UploadCandidate.from_fileobj(name, source, mime_type)
        raise TypeError(f"Unsupported upload source: {type(source).__name__}")

    async def upload(
        self,
        source: UploadSource,
        progress_callback: Optional[ProgressCallback] = None,
        filename: Optional[str] = None,
        mime_type: Optional[str] = None,
        events: Optional[EventEmitter] = None,
    ) -> UploadResult:
        """
        Upload a file and return its public URL.

        Args:
            source: Path, UploadCandidate, raw bytes or seekable file object
            progress_callback: Called with an integer percentage (0-100), sync or async
            filename: Name for bytes/file-object sources
            mime_type: Overrides the type guessed from the file name
            events: Emitter for progress/part/fallback events

        Raises:
            UploadError: validation, handshake, transport or fallback failure
        """
        if self._backend is None or self._transport is None:
            raise RuntimeError("UploadOrchestrator not initialized. Use 'async with' context.")

        candidate = self.build_candidate(source, filename, mime_type)
        if self._config.validate_media:
            validate_candidate(candidate, self._config)

        events = events or EventEmitter()
        if progress_callback is not None:
            events.on(PROGRESS, progress_callback)
        progress = ProgressAggregator(candidate.size_bytes, events)

        strategy = select_strategy(
            candidate.size_bytes,
            candidate.mime_type,
            threshold=self._config.multipart_threshold,
        )
        logger.debug(
            "Upload started: file=%s type=%s size=%d strategy=%s",
            candidate.name,
            candidate.mime_type,
            candidate.size_bytes,
            strategy.value,
        )

        if strategy is TransferStrategy.MULTIPART:
            uploader = MultipartOrchestrator(
                self._backend,
                self._transport,
                chunk_size=self._config.chunk_size,
                abort_on_failure=self._config.abort_on_failure,
                events=events,
            )
        else:
            fallback = FallbackUploader(self._backend) if self._config.enable_fallback else None
            uploader = SingleShotUploader(self._backend, self._transport, fallback, events=events)

        return await uploader.upload(candidate, progress)
