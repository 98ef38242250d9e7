"""Short-horizon (15 minute) delay forecast and risk score.

The forecast is a linear extrapolation: the newest delay plus the
difference between the mean of the latest third and the earliest third of
the last 15 minutes of snapshots.

Risk score (clamped to [0, 100] only at the end):
    current delay >= 5 → +30 "current_delay_high"
                  >= 3 → +15 "current_delay_moderate"
    trend  > 0.5       → +25 "delay_trend_worsening"
           < -0.5      → -10 "delay_trend_improving"
    mean riders >= 1500 → +25 "high_ridership"
                >= 700  → +10 "medium_ridership"
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from pulseops.domain.metrics import RiskAssessment
from pulseops.domain.snapshot import TimedWorldStatus
from pulseops.foundation.clock import now_ms

RISK_WINDOW_MS = 15 * 60 * 1000


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_risk_for_route(history: Sequence[TimedWorldStatus]) -> Optional[RiskAssessment]:
    """Assess the route of the most recent snapshot; None for an empty history."""
    if not history:
        return None

    ordered = sorted(history, key=lambda h: h.timestamp)
    latest = ordered[-1]

    cutoff = now_ms() - RISK_WINDOW_MS
    recent = [h for h in ordered if h.timestamp >= cutoff]

    if not recent:
        return RiskAssessment(
            route_id=latest.route_id,
            segment_start_stop_id=latest.segment_start_stop_id,
            segment_end_stop_id=latest.segment_end_stop_id,
            current_delay_minutes=latest.avg_delay_minutes,
            predicted_delay_15m=latest.avg_delay_minutes,
            predicted_risk_score=0,
            risk_factors=["no_recent_history"],
        )

    delays = [h.avg_delay_minutes for h in recent]
    current_delay = delays[-1]
    avg_riders = _mean([h.riders_estimated for h in recent])

    third = max(len(delays) // 3, 1)
    trend = _mean(delays[-third:]) - _mean(delays[:third])

    predicted = current_delay + trend
    if not math.isfinite(predicted):
        predicted = current_delay

    risk = 0
    factors: list[str] = []

    if current_delay >= 5:
        risk += 30
        factors.append("current_delay_high")
    elif current_delay >= 3:
        risk += 15
        factors.append("current_delay_moderate")

    if trend > 0.5:
        risk += 25
        factors.append("delay_trend_worsening")
    elif trend < -0.5:
        risk -= 10
        factors.append("delay_trend_improving")

    if avg_riders >= 1500:
        risk += 25
        factors.append("high_ridership")
    elif avg_riders >= 700:
        risk += 10
        factors.append("medium_ridership")

    return RiskAssessment(
        route_id=latest.route_id,
        segment_start_stop_id=latest.segment_start_stop_id,
        segment_end_stop_id=latest.segment_end_stop_id,
        current_delay_minutes=current_delay,
        predicted_delay_15m=predicted,
        current_headway_variance_secs=None,
        predicted_risk_score=max(0, min(risk, 100)),
        risk_factors=factors,
    )
