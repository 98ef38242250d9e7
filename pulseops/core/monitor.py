"""CorridorMonitor: the explicitly owned aggregation context.

Owns one WorldHistory and answers health / risk / daily-summary queries
as pure reads over a consistent copy of it.  One instance is constructed
by the application factory and handed to whichever driver needs it.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from pulseops.core.health import compute_health_metrics
from pulseops.core.risk import compute_risk_for_route
from pulseops.core.summary import summarize_day
from pulseops.domain.metrics import DaySummary, HealthMetrics, RiskAssessment
from pulseops.domain.snapshot import TimedWorldStatus, WorldStatus
from pulseops.store.history import WorldHistory


class CorridorMonitor:
    def __init__(self, window: timedelta = timedelta(minutes=60)) -> None:
        self._history = WorldHistory(window=window)

    def record(self, status: WorldStatus) -> TimedWorldStatus:
        return self._history.record(status)

    def history(self) -> list[TimedWorldStatus]:
        return self._history.history()

    def health(self) -> HealthMetrics:
        return compute_health_metrics(self._history.history())

    def risk(self) -> Optional[RiskAssessment]:
        return compute_risk_for_route(self._history.history())

    def daily_summary(self) -> DaySummary:
        return summarize_day(self._history.history())

    def sparkline(self) -> list[dict]:
        """Compact (timestamp, delay) series for dashboard charts."""
        return [
            {"timestamp": h.timestamp, "avg_delay_minutes": h.avg_delay_minutes}
            for h in self._history.history()
        ]
