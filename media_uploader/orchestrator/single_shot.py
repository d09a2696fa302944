"""Single-shot presigned upload with server fallback."""
import logging
from typing import Optional

from ..errors import HandshakeError, TransportError
from ..models import TransferStrategy, UploadCandidate, UploadPath, UploadResult
from ..protocols import IByteTransport, IUploadBackend
from ..services.progress import ProgressAggregator
from ..utils.events import FALLBACK, EventEmitter
from .fallback import FallbackUploader

logger = logging.getLogger(__name__)


def choose_path(error: Optional[BaseException], fallback_enabled: bool = True) -> Optional[UploadPath]:
    """
    Decide how to finish after the direct attempt.

    Returns DIRECT when there was no error, PROXY_FALLBACK for a recoverable
    direct-path failure, and None when the error must propagate.
    """
    if error is None:
        return UploadPath.DIRECT
    if fallback_enabled and isinstance(error, (HandshakeError, TransportError)):
        return UploadPath.PROXY_FALLBACK
    return None


class SingleShotUploader:
    """Uploads a whole file with one presigned PUT."""

    def __init__(
        self,
        backend: IUploadBackend,
        transport: IByteTransport,
        fallback: Optional[FallbackUploader] = None,
        events: Optional[EventEmitter] = None,
    ):
        """
        Args:
            backend: Issues the presigned write URL
            transport: Performs the PUT
            fallback: Server-proxied uploader; None disables fallback
            events: Emitter notified when fallback is used
        """
        self._backend = backend
        self._transport = transport
        self._fallback = fallback
        self._events = events or EventEmitter()

    async def _upload_direct(self, candidate: UploadCandidate, progress: ProgressAggregator) -> str:
        upload_url, public_url = await self._backend.get_upload_url(candidate.name, candidate.mime_type)
        payload = await candidate.read_all()
        await self._transport.put_bytes(
            upload_url,
            payload,
            candidate.mime_type,
            on_progress=progress.update_fraction,
        )
        return public_url

    async def upload(self, candidate: UploadCandidate, progress: ProgressAggregator) -> UploadResult:
        direct_error: Optional[Exception] = None
        public_url = None
        try:
            public_url = await self._upload_direct(candidate, progress)
        except (HandshakeError, TransportError) as exc:
            direct_error = exc

        path = choose_path(direct_error, fallback_enabled=self._fallback is not None)
        if path is UploadPath.DIRECT:
            await progress.complete()
            logger.info("Uploaded %s directly to storage", candidate.name)
            return UploadResult(
                url=public_url,
                filename=candidate.name,
                strategy=TransferStrategy.SINGLE_SHOT,
                path=UploadPath.DIRECT,
            )

        if path is None:
            raise direct_error

        logger.warning(
            "Direct upload failed for %s (%s), falling back to server upload",
            candidate.name,
            direct_error,
        )
        await self._events.emit(FALLBACK, candidate.name, direct_error)
        return await self._fallback.upload(candidate, progress, direct_error=direct_error)
