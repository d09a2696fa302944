"""
Progress Aggregator - Single Responsibility: turn transfer progress into one percentage.

Transports report fractions of their own payload. Multipart uploads convert
those fractions into ``(attempt_id, bytes_delta)`` events which the
aggregator sums into a single running byte count. Only strictly increasing
integer percentages are published, so listeners see a non-decreasing
sequence that reaches 100 exactly once.
"""
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from typing import Optional

from ..models import ChunkDescriptor
from ..utils.events import PROGRESS, EventEmitter

logger = logging.getLogger(__name__)


def percent(bytes_completed: int, total_bytes: int) -> int:
    """``clamp(round(100 * bytes_completed / total_bytes), 0, 100)``, rounding halves up."""
    if total_bytes <= 0:
        return 0
    value = math.floor(100 * bytes_completed / total_bytes + 0.5)
    return max(0, min(100, value))


@dataclass
class ProgressState:
    """Byte counters for one upload attempt."""
    bytes_completed: int = 0
    total_bytes: int = 0

    @property
    def percent(self) -> int:
        return percent(self.bytes_completed, self.total_bytes)


@dataclass(frozen=True)
class ProgressEvent:
    """Bytes moved by one transfer since its previous event."""
    attempt_id: str
    bytes_delta: int


class ChunkProgress:
    """
    Progress callback for one chunk transfer.

    Converts transport fractions into byte deltas and commits the chunk's
    full size exactly once.
    """

    def __init__(self, aggregator: "ProgressAggregator", chunk: ChunkDescriptor):
        self._aggregator = aggregator
        self._size = chunk.size_bytes
        self._sent = 0
        self._committed = False
        self.attempt_id = f"part-{chunk.part_number}-{uuid.uuid4().hex[:8]}"

    async def __call__(self, fraction: float) -> None:
        if self._committed:
            return
        loaded = min(self._size, int(self._size * max(0.0, fraction)))
        delta = loaded - self._sent
        if delta <= 0:
            return
        self._sent = loaded
        await self._aggregator.consume(ProgressEvent(self.attempt_id, delta))

    async def commit(self) -> None:
        """Count whatever the transport did not report for this chunk."""
        if self._committed:
            return
        remaining = self._size - self._sent
        self._sent = self._size
        self._committed = True
        if remaining > 0:
            await self._aggregator.consume(ProgressEvent(self.attempt_id, remaining))


class ProgressAggregator:
    """Monotonic percentage for one upload attempt."""

    def __init__(self, total_bytes: int, emitter: Optional[EventEmitter] = None):
        self.state = ProgressState(total_bytes=total_bytes)
        self._emitter = emitter or EventEmitter()
        self._last_reported = -1

    @property
    def last_reported(self) -> int:
        return max(self._last_reported, 0)

    async def consume(self, event: ProgressEvent) -> None:
        """Apply a byte-delta event and publish the new percentage if it grew."""
        remaining = self.state.total_bytes - self.state.bytes_completed
        self.state.bytes_completed += max(0, min(event.bytes_delta, remaining))
        await self._publish(self.state.percent)

    async def update_fraction(self, fraction: float) -> None:
        """Single-shot transfers: forward the transport fraction directly."""
        fraction = max(0.0, min(1.0, fraction))
        self.state.bytes_completed = max(
            self.state.bytes_completed, int(self.state.total_bytes * fraction)
        )
        await self._publish(math.floor(100 * fraction + 0.5))

    def track_chunk(self, chunk: ChunkDescriptor) -> ChunkProgress:
        return ChunkProgress(self, chunk)

    async def complete(self) -> None:
        self.state.bytes_completed = self.state.total_bytes
        await self._publish(100)

    async def _publish(self, value: int) -> None:
        value = max(0, min(100, value))
        if value <= self._last_reported:
            return
        self._last_reported = value
        await self._emitter.emit(PROGRESS, value)
