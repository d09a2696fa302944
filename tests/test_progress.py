"""Tests for progress aggregation."""
import pytest

from media_uploader.models import ChunkDescriptor
from media_uploader.services.progress import (
    ProgressAggregator,
    ProgressEvent,
    ProgressState,
    percent,
)
from media_uploader.utils.events import PROGRESS, EventEmitter


def _aggregator(total, sink):
    events = EventEmitter()
    events.on(PROGRESS, sink.append)
    return ProgressAggregator(total, events)


class TestPercent:
    def test_basic(self):
        assert percent(0, 100) == 0
        assert percent(50, 100) == 50
        assert percent(100, 100) == 100

    def test_rounds_half_up(self):
        assert percent(1, 200) == 1
        assert percent(1, 3) == 33
        assert percent(2, 3) == 67

    def test_clamped(self):
        assert percent(150, 100) == 100
        assert percent(-5, 100) == 0

    def test_zero_total(self):
        assert percent(0, 0) == 0

    def test_state(self):
        assert ProgressState(bytes_completed=25, total_bytes=100).percent == 25


class TestProgressAggregator:
    @pytest.mark.asyncio
    async def test_fraction_updates_are_monotonic(self):
        seen = []
        aggregator = _aggregator(1000, seen)

        for fraction in (0.1, 0.5, 0.3, 0.5, 0.9):
            await aggregator.update_fraction(fraction)

        assert seen == [10, 50, 90]

    @pytest.mark.asyncio
    async def test_complete_reports_100_once(self):
        seen = []
        aggregator = _aggregator(1000, seen)

        await aggregator.update_fraction(1.0)
        await aggregator.complete()
        await aggregator.complete()

        assert seen == [100]

    @pytest.mark.asyncio
    async def test_chunk_counted_once(self):
        seen = []
        aggregator = _aggregator(300, seen)
        first = aggregator.track_chunk(ChunkDescriptor(1, 0, 100))

        await first(0.5)
        await first(1.0)
        await first.commit()
        await first.commit()

        assert aggregator.state.bytes_completed == 100
        assert seen == [17, 33]

    @pytest.mark.asyncio
    async def test_commit_without_progress_events(self):
        seen = []
        aggregator = _aggregator(200, seen)

        await aggregator.track_chunk(ChunkDescriptor(1, 0, 100)).commit()
        await aggregator.track_chunk(ChunkDescriptor(2, 100, 200)).commit()

        assert seen == [50, 100]

    @pytest.mark.asyncio
    async def test_weighted_by_chunk_size(self):
        seen = []
        aggregator = _aggregator(1000, seen)
        big = aggregator.track_chunk(ChunkDescriptor(1, 0, 800))
        await big(0.5)
        await big.commit()
        small = aggregator.track_chunk(ChunkDescriptor(2, 800, 1000))
        await small(0.5)

        assert seen == [40, 80, 90]

    @pytest.mark.asyncio
    async def test_events_never_exceed_total(self):
        seen = []
        aggregator = _aggregator(100, seen)

        await aggregator.consume(ProgressEvent("a", 80))
        await aggregator.consume(ProgressEvent("a", 80))

        assert aggregator.state.bytes_completed == 100
        assert seen == [80, 100]

    @pytest.mark.asyncio
    async def test_listener_errors_do_not_break_progress(self):
        seen = []
        events = EventEmitter()

        def broken(value):
            raise RuntimeError("ui crashed")

        events.on(PROGRESS, broken)
        events.on(PROGRESS, seen.append)
        aggregator = ProgressAggregator(10, events)

        await aggregator.complete()

        assert seen == [100]
