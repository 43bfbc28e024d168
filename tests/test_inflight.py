"""Tests for chuk_mcp_wfs.core.inflight.InFlightTracker."""

import asyncio

import pytest

from chuk_mcp_wfs.core.inflight import InFlightTracker

BBOX = (11.57, 48.13, 11.58, 48.14)


async def hang(pending):
    await asyncio.Event().wait()


class TestStart:
    @pytest.mark.asyncio
    async def test_start_tracks_request(self):
        tracker = InFlightTracker()
        pending = tracker.start("k", "layer", BBOX, hang)

        assert "k" in tracker
        assert len(tracker) == 1
        assert tracker.get("k") is pending
        assert pending.request_id == 1
        assert pending.task is not None

        tracker.cancel_all()

    @pytest.mark.asyncio
    async def test_request_ids_increase(self):
        tracker = InFlightTracker()
        first = tracker.start("a", "layer", BBOX, hang)
        second = tracker.start("b", "layer", BBOX, hang)
        assert second.request_id > first.request_id
        tracker.cancel_all()

    @pytest.mark.asyncio
    async def test_same_key_replaces_and_cancels(self):
        tracker = InFlightTracker()
        first = tracker.start("k", "layer", BBOX, hang)
        second = tracker.start("k", "layer", BBOX, hang)

        await asyncio.sleep(0)
        assert len(tracker) == 1
        assert tracker.get("k") is second
        assert first.task.cancelled()
        assert tracker.cancelled == 1

        tracker.cancel_all()


class TestFinish:
    @pytest.mark.asyncio
    async def test_finish_current(self):
        tracker = InFlightTracker()
        pending = tracker.start("k", "layer", BBOX, hang)
        assert tracker.is_current("k", pending.request_id)
        assert tracker.finish("k", pending.request_id) is pending
        assert "k" not in tracker
        pending.task.cancel()

    @pytest.mark.asyncio
    async def test_finish_superseded_returns_none(self):
        tracker = InFlightTracker()
        first = tracker.start("k", "layer", BBOX, hang)
        second = tracker.start("k", "layer", BBOX, hang)

        assert tracker.finish("k", first.request_id) is None
        assert tracker.get("k") is second
        tracker.cancel_all()

    @pytest.mark.asyncio
    async def test_finish_cancelled_returns_none(self):
        tracker = InFlightTracker()
        pending = tracker.start("k", "layer", BBOX, hang)
        tracker.cancel("k")
        assert tracker.finish("k", pending.request_id) is None


class TestCancel:
    def test_cancel_unknown_key(self):
        tracker = InFlightTracker()
        assert tracker.cancel("nope") is False
        assert tracker.cancelled == 0

    @pytest.mark.asyncio
    async def test_cancel_others_keeps_one(self):
        tracker = InFlightTracker()
        a = tracker.start("a", "layer", BBOX, hang)
        tracker.start("b", "layer", BBOX, hang)
        tracker.start("c", "layer", BBOX, hang)

        cancelled = tracker.cancel_others("a")
        await asyncio.sleep(0)

        assert sorted(cancelled) == ["b", "c"]
        assert tracker.keys() == ["a"]
        assert not a.task.done()
        tracker.cancel_all()

    @pytest.mark.asyncio
    async def test_cancel_all(self):
        tracker = InFlightTracker()
        requests = [tracker.start(k, "layer", BBOX, hang) for k in ("a", "b")]

        assert sorted(tracker.cancel_all()) == ["a", "b"]
        await asyncio.sleep(0)
        assert len(tracker) == 0
        assert all(p.task.cancelled() for p in requests)
