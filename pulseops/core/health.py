"""Corridor health aggregation over the rolling history.

Windows are measured back from the clock at call time, not from the newest
snapshot, so a stale history reads as "no recent data" rather than as the
last known state.

Health score:
    health = clamp(100 - delay_penalty - volatility_penalty - near_miss_penalty, 0, 100)

    delay_penalty      = min(avg_delay_15m * 5, 50)
    volatility_penalty = min(delay_volatility * 3, 30)
    near_miss_penalty  = min(near_miss_count_30m * 2, 20)

Risk level:
    medium if health < 70 or avg_delay_15m >= 5
    high   if health < 50 or avg_delay_15m >= 10   (checked independently)
"""

from __future__ import annotations

import math
from typing import Sequence

from pulseops.domain.enums import RiskLevel
from pulseops.domain.metrics import HealthMetrics
from pulseops.domain.snapshot import TimedWorldStatus
from pulseops.foundation.clock import now_ms
from pulseops.foundation.numbers import round_half_up

SHORT_WINDOW_MS = 15 * 60 * 1000
LONG_WINDOW_MS = 30 * 60 * 1000

# Near-miss band: at or above concern, below the incident threshold
CONCERN_THRESHOLD_MINUTES = 3.0
INCIDENT_THRESHOLD_MINUTES = 10.0

# Delay buckets for the stakeholder KPIs
MINOR_MAX_MINUTES = 2.0
MODERATE_MAX_MINUTES = 5.0

PERFECT_HEALTH = HealthMetrics(
    health_score=100,
    avg_delay_15m=0.0,
    delay_volatility=0.0,
    risk_level=RiskLevel.LOW,
    near_miss_count_30m=0,
    avg_delay_30m=0.0,
    total_rider_delay_minutes_30m=0,
    percent_time_minor=100.0,
    percent_time_moderate=0.0,
    percent_time_severe=0.0,
)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _population_stddev(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    mean = _mean(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


def rider_delay_minutes(entry: TimedWorldStatus) -> float:
    """Load-weighted impact of one snapshot; negative inputs count as zero."""
    return max(entry.avg_delay_minutes, 0.0) * max(entry.riders_estimated, 0)


def compute_health_metrics(history: Sequence[TimedWorldStatus]) -> HealthMetrics:
    """Derive a health report from the full history (possibly empty).

    An empty history is reported as perfect health.  A non-empty history
    whose last 30 minutes are empty reports 0/0/0 bucket percentages
    instead; the two cases are deliberately kept distinct.
    """
    if not history:
        return PERFECT_HEALTH

    now = now_ms()
    last15m = [h for h in history if now - h.timestamp <= SHORT_WINDOW_MS]
    last30m = [h for h in history if now - h.timestamp <= LONG_WINDOW_MS]

    avg_delay_15m = _mean([h.avg_delay_minutes for h in last15m])

    delays_30m = [h.avg_delay_minutes for h in last30m]
    delay_volatility = _population_stddev(delays_30m)

    near_miss_count_30m = sum(
        1 for d in delays_30m
        if CONCERN_THRESHOLD_MINUTES <= d < INCIDENT_THRESHOLD_MINUTES
    )

    delay_penalty = min(avg_delay_15m * 5, 50)
    volatility_penalty = min(delay_volatility * 3, 30)
    near_miss_penalty = min(near_miss_count_30m * 2, 20)
    health_score = 100 - delay_penalty - volatility_penalty - near_miss_penalty
    health_score = max(0.0, min(health_score, 100.0))

    risk_level = RiskLevel.LOW
    if health_score < 70 or avg_delay_15m >= 5:
        risk_level = RiskLevel.MEDIUM
    if health_score < 50 or avg_delay_15m >= 10:
        risk_level = RiskLevel.HIGH

    # ── Stakeholder KPIs (last 30 minutes) ───────────────────────────────
    avg_delay_30m = _mean(delays_30m)
    total_rider_delay = sum(rider_delay_minutes(h) for h in last30m)

    minor = moderate = severe = 0
    for d in delays_30m:
        if d <= MINOR_MAX_MINUTES:
            minor += 1
        elif d <= MODERATE_MAX_MINUTES:
            moderate += 1
        else:
            severe += 1
    denominator = max(len(last30m), 1)

    return HealthMetrics(
        health_score=int(round_half_up(health_score)),
        avg_delay_15m=round_half_up(avg_delay_15m, 1),
        delay_volatility=round_half_up(delay_volatility, 1),
        risk_level=risk_level,
        near_miss_count_30m=near_miss_count_30m,
        avg_delay_30m=round_half_up(avg_delay_30m, 1),
        total_rider_delay_minutes_30m=int(round_half_up(total_rider_delay)),
        percent_time_minor=round_half_up(minor / denominator * 100, 1),
        percent_time_moderate=round_half_up(moderate / denominator * 100, 1),
        percent_time_severe=round_half_up(severe / denominator * 100, 1),
    )
