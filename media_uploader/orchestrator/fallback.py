"""Server-proxied fallback upload."""
import logging
from typing import Optional

from ..errors import FallbackError
from ..models import TransferStrategy, UploadCandidate, UploadPath, UploadResult
from ..protocols import IUploadBackend
from ..services.progress import ProgressAggregator

logger = logging.getLogger(__name__)


class FallbackUploader:
    """Re-submits the original file to the application server as a form upload."""

    def __init__(self, backend: IUploadBackend):
        self._backend = backend

    async def upload(
        self,
        candidate: UploadCandidate,
        progress: ProgressAggregator,
        direct_error: Optional[BaseException] = None,
    ) -> UploadResult:
        try:
            payload = await candidate.read_all()
            url = await self._backend.upload_via_server(candidate, payload)
        except Exception as exc:
            logger.error("Fallback upload failed for %s: %s", candidate.name, exc, exc_info=True)
            raise FallbackError(
                f"Fallback upload failed for {candidate.name}: {exc}",
                direct_error=direct_error,
            ) from exc

        await progress.complete()
        logger.info("Uploaded %s through server fallback", candidate.name)
        return UploadResult(
            url=url,
            filename=candidate.name,
            strategy=TransferStrategy.SINGLE_SHOT,
            path=UploadPath.PROXY_FALLBACK,
        )
