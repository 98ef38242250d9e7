"""Tests for the time-windowed corridor history."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from pulseops.domain.snapshot import WorldStatus
from pulseops.store.history import WorldHistory

_T0 = 1_700_000_000_000
_MINUTE = 60_000


def _status(delay: float = 1.0) -> WorldStatus:
    return WorldStatus(
        route_id="10",
        segment_start_stop_id="S2",
        segment_end_stop_id="S3",
        avg_delay_minutes=delay,
        trips_impacted=0,
        riders_estimated=0,
        source="simulated",
    )


class TestWorldHistory:
    def test_record_stamps_with_clock(self) -> None:
        history = WorldHistory()
        with patch("pulseops.store.history.now_ms", return_value=_T0):
            timed = history.record(_status(2.0))
        assert timed.timestamp == _T0
        assert timed.avg_delay_minutes == 2.0
        assert len(history) == 1

    def test_keeps_insertion_order(self) -> None:
        history = WorldHistory()
        with patch("pulseops.store.history.now_ms", side_effect=[_T0, _T0 + 1, _T0 + 2]):
            for delay in (1.0, 2.0, 3.0):
                history.record(_status(delay))
        assert [h.avg_delay_minutes for h in history.history()] == [1.0, 2.0, 3.0]

    def test_evicts_entries_older_than_window(self) -> None:
        history = WorldHistory(window=timedelta(minutes=60))
        times = [_T0, _T0 + 30 * _MINUTE, _T0 + 61 * _MINUTE]
        with patch("pulseops.store.history.now_ms", side_effect=times):
            for delay in (1.0, 2.0, 3.0):
                history.record(_status(delay))
        entries = history.history()
        assert [h.avg_delay_minutes for h in entries] == [2.0, 3.0]
        newest = entries[-1].timestamp
        assert all(h.timestamp >= newest - 60 * _MINUTE for h in entries)

    def test_entry_exactly_at_cutoff_is_retained(self) -> None:
        history = WorldHistory(window=timedelta(minutes=60))
        with patch("pulseops.store.history.now_ms", side_effect=[_T0, _T0 + 60 * _MINUTE]):
            history.record(_status(1.0))
            history.record(_status(2.0))
        assert len(history) == 2

    def test_reads_do_not_evict(self) -> None:
        history = WorldHistory(window=timedelta(minutes=1))
        with patch("pulseops.store.history.now_ms", return_value=_T0):
            history.record(_status())
        # Much later, but no insertion has happened since
        assert len(history.history()) == 1
        assert history.history() == history.history()

    def test_history_returns_a_copy(self) -> None:
        history = WorldHistory()
        with patch("pulseops.store.history.now_ms", return_value=_T0):
            history.record(_status())
        snapshot = history.history()
        snapshot.clear()
        assert len(history) == 1
