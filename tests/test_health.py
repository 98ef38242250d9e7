"""Tests for corridor health aggregation."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from pulseops.core.health import PERFECT_HEALTH, compute_health_metrics
from pulseops.domain.enums import RiskLevel
from pulseops.domain.snapshot import TimedWorldStatus
from pulseops.foundation.numbers import round_half_up

_NOW = 1_700_000_000_000
_MINUTE = 60_000


def _timed(delay: float, minutes_ago: float = 1, riders: int = 100) -> TimedWorldStatus:
    return TimedWorldStatus(
        route_id="10",
        segment_start_stop_id="S2",
        segment_end_stop_id="S3",
        avg_delay_minutes=delay,
        trips_impacted=3,
        riders_estimated=riders,
        source="simulated",
        timestamp=int(_NOW - minutes_ago * _MINUTE),
    )


def _health(history):
    with patch("pulseops.core.health.now_ms", return_value=_NOW):
        return compute_health_metrics(history)


class TestEmptyHistory:
    def test_perfect_health(self) -> None:
        m = _health([])
        assert m == PERFECT_HEALTH
        assert m.health_score == 100
        assert m.risk_level is RiskLevel.LOW
        assert m.percent_time_minor == 100.0
        assert m.percent_time_moderate == 0.0
        assert m.percent_time_severe == 0.0

    def test_stale_history_has_zero_buckets(self) -> None:
        m = _health([_timed(12.0, minutes_ago=45)])
        assert m.health_score == 100
        assert m.avg_delay_15m == 0.0
        assert m.near_miss_count_30m == 0
        assert (m.percent_time_minor, m.percent_time_moderate, m.percent_time_severe) == (0.0, 0.0, 0.0)


class TestScoring:
    def test_mixed_delays(self) -> None:
        history = [_timed(d, minutes_ago=5 - i) for i, d in enumerate([1, 1, 3, 6, 6])]
        m = _health(history)
        assert m.avg_delay_15m == 3.4
        assert m.delay_volatility == 2.2
        assert m.near_miss_count_30m == 3
        assert m.health_score == 70
        assert m.risk_level is RiskLevel.LOW
        assert m.percent_time_minor == 40.0
        assert m.percent_time_moderate == 20.0
        assert m.percent_time_severe == 40.0
        assert m.avg_delay_30m == 3.4
        assert m.total_rider_delay_minutes_30m == 1700

    def test_ten_minute_delay_is_high_risk(self) -> None:
        m = _health([_timed(10.0)])
        assert m.health_score == 50
        assert m.near_miss_count_30m == 0
        assert m.risk_level is RiskLevel.HIGH

    def test_five_minute_delay_is_medium_risk(self) -> None:
        m = _health([_timed(5.0)])
        assert m.health_score == 73
        assert m.near_miss_count_30m == 1
        assert m.risk_level is RiskLevel.MEDIUM

    def test_score_floors_at_zero(self) -> None:
        history = [_timed(3.0, minutes_ago=1 + i * 0.1) for i in range(10)]
        history += [_timed(40.0, minutes_ago=1 + i * 0.1) for i in range(10)]
        m = _health(history)
        assert m.health_score == 0
        assert m.risk_level is RiskLevel.HIGH

    @pytest.mark.parametrize("delays", [[0.0], [2.0, 8.0], [50.0, 0.0, 50.0], [9.9] * 12])
    def test_score_always_in_bounds(self, delays) -> None:
        m = _health([_timed(d) for d in delays])
        assert 0 <= m.health_score <= 100
        total = m.percent_time_minor + m.percent_time_moderate + m.percent_time_severe
        assert total == pytest.approx(100.0, abs=0.2)


class TestWindows:
    def test_short_window_excludes_older_snapshots(self) -> None:
        m = _health([_timed(20.0, minutes_ago=20), _timed(2.0, minutes_ago=1)])
        assert m.avg_delay_15m == 2.0
        assert m.avg_delay_30m == 11.0

    def test_negative_inputs_add_no_rider_delay(self) -> None:
        m = _health([_timed(-3.0, riders=100), _timed(2.0, riders=-50)])
        assert m.total_rider_delay_minutes_30m == 0

    def test_negative_delay_snapshot_contributes_nothing(self) -> None:
        m = _health([_timed(-5.0, riders=200)])
        assert m.total_rider_delay_minutes_30m == 0
        assert m.health_score <= 100


class TestRoundHalfUp:
    @pytest.mark.parametrize("value,digits,expected", [
        (0.25, 1, 0.3),
        (2.5, 0, 3.0),
        (-0.25, 1, -0.2),
    ])
    def test_halves_round_upward(self, value: float, digits: int, expected: float) -> None:
        assert round_half_up(value, digits) == expected
