"""Multipart chunked upload orchestration."""
from __future__ import annotations

import logging
import math
from enum import Enum
from typing import List, Optional

from ..errors import MultipartUploadError
from ..models import (
    ChunkDescriptor,
    CompletedPart,
    MiB,
    TransferStrategy,
    UploadCandidate,
    UploadPath,
    UploadResult,
    UploadSession,
)
from ..protocols import IByteTransport, IUploadBackend
from ..services.progress import ProgressAggregator
from ..utils.events import PART_UPLOADED, EventEmitter

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5 * MiB


class MultipartState(Enum):
    """Lifecycle of one multipart attempt."""
    PENDING = "pending"
    INITIATED = "initiated"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"


def partition(size_bytes: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[ChunkDescriptor]:
    """
    Split ``[0, size_bytes)`` into fixed-size parts numbered from 1.

    The last part holds the remainder and is never empty.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    count = math.ceil(size_bytes / chunk_size)
    return [
        ChunkDescriptor(
            part_number=index + 1,
            start=index * chunk_size,
            end=min((index + 1) * chunk_size, size_bytes),
        )
        for index in range(count)
    ]


class MultipartOrchestrator:
    """
    Drives one multipart upload: initiate, upload parts in order, complete.

    Parts are uploaded strictly one after another. The first failure stops
    the loop; completion is only requested once every part has an ETag.
    """

    def __init__(
        self,
        backend: IUploadBackend,
        transport: IByteTransport,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        abort_on_failure: bool = True,
        events: Optional[EventEmitter] = None,
    ):
        self._backend = backend
        self._transport = transport
        self._chunk_size = chunk_size
        self._abort_on_failure = abort_on_failure
        self._events = events or EventEmitter()
        self.state = MultipartState.PENDING

    async def upload(self, candidate: UploadCandidate, progress: ProgressAggregator) -> UploadResult:
        if candidate.size_bytes == 0:
            raise MultipartUploadError(f"{candidate.name}: cannot upload an empty file in parts")

        session = await self._initiate(candidate)
        try:
            chunks = partition(candidate.size_bytes, self._chunk_size)
            logger.debug("%s: %d parts of up to %d bytes", candidate.name, len(chunks), self._chunk_size)

            self.state = MultipartState.UPLOADING
            parts: List[CompletedPart] = []
            for chunk in chunks:
                parts.append(await self._upload_part(candidate, session, chunk, progress, len(chunks)))

            url = await self._backend.complete_multipart(session, parts)
        except Exception as exc:
            self.state = MultipartState.FAILED
            logger.error(
                "Multipart upload failed for %s (upload_id=%s): %s",
                candidate.name,
                session.upload_id,
                exc,
                exc_info=True,
            )
            await self._abort(session)
            raise

        self.state = MultipartState.COMPLETED
        await progress.complete()
        logger.info("Completed multipart upload of %s in %d parts", candidate.name, len(parts))
        return UploadResult(
            url=url,
            filename=candidate.name,
            strategy=TransferStrategy.MULTIPART,
            path=UploadPath.DIRECT,
            parts=len(parts),
        )

    async def _initiate(self, candidate: UploadCandidate) -> UploadSession:
        try:
            session = await self._backend.initiate_multipart(candidate.name, candidate.mime_type)
        except Exception:
            self.state = MultipartState.FAILED
            raise
        self.state = MultipartState.INITIATED
        logger.info("Initiated multipart upload for %s (upload_id=%s)", candidate.name, session.upload_id)
        return session

    async def _upload_part(
        self,
        candidate: UploadCandidate,
        session: UploadSession,
        chunk: ChunkDescriptor,
        progress: ProgressAggregator,
        total_parts: int,
    ) -> CompletedPart:
        part_url = await self._backend.get_part_url(session, chunk.part_number)
        payload = await candidate.read_range(chunk.start, chunk.end)

        tracker = progress.track_chunk(chunk)
        etag = await self._transport.put_bytes(
            part_url,
            payload,
            candidate.mime_type,
            on_progress=tracker,
        )
        await tracker.commit()

        part = CompletedPart(part_number=chunk.part_number, etag=etag)
        logger.debug("Uploaded part %d/%d of %s", chunk.part_number, total_parts, candidate.name)
        await self._events.emit(PART_UPLOADED, part, total_parts)
        return part

    async def _abort(self, session: UploadSession) -> None:
        if not self._abort_on_failure:
            return
        try:
            await self._backend.abort_multipart(session)
            logger.info("Aborted multipart upload %s", session.upload_id)
        except Exception as exc:
            logger.warning("Could not abort multipart upload %s: %s", session.upload_id, exc)
