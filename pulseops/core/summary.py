"""Daily rollup over whatever the history still retains."""

from __future__ import annotations

from typing import Sequence

from pulseops.core.health import rider_delay_minutes
from pulseops.domain.metrics import DaySummary
from pulseops.domain.snapshot import TimedWorldStatus

# Snapshots at or above this delay are counted as incidents
INCIDENT_DELAY_MINUTES = 5.0


def summarize_day(history: Sequence[TimedWorldStatus]) -> DaySummary:
    if not history:
        return DaySummary(
            total_incidents=0,
            avg_delay=0.0,
            max_delay=0.0,
            total_rider_delay_minutes=0.0,
        )

    delays = [h.avg_delay_minutes for h in history]
    return DaySummary(
        total_incidents=sum(1 for d in delays if d >= INCIDENT_DELAY_MINUTES),
        avg_delay=sum(delays) / len(delays),
        max_delay=max(delays),
        total_rider_delay_minutes=sum(rider_delay_minutes(h) for h in history),
    )
