"""Derived corridor observations: health, short-horizon risk, daily rollup.

These are ephemeral query results recomputed from history on every
request.  They carry no identity and are never stored.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from pulseops.domain.enums import RiskLevel


class HealthMetrics(BaseModel):
    """Snapshot-in-time corridor health report."""

    health_score: int = Field(..., ge=0, le=100)
    avg_delay_15m: float = Field(..., description="Mean delay over the last 15 minutes")
    delay_volatility: float = Field(..., description="Population std-dev of delay over the last 30 minutes")
    risk_level: RiskLevel
    near_miss_count_30m: int = Field(..., description="Snapshots with delay in [3, 10) over the last 30 minutes")

    # Stakeholder KPIs over the last 30 minutes
    avg_delay_30m: float
    total_rider_delay_minutes_30m: int
    percent_time_minor: float = Field(..., description="Share of snapshots with delay <= 2")
    percent_time_moderate: float = Field(..., description="Share of snapshots with 2 < delay <= 5")
    percent_time_severe: float = Field(..., description="Share of snapshots with delay > 5")

    model_config = {"frozen": True}


class RiskAssessment(BaseModel):
    """15-minute-ahead delay forecast for the most recent route in history."""

    route_id: str
    segment_start_stop_id: str
    segment_end_stop_id: str
    current_delay_minutes: float
    predicted_delay_15m: float
    current_headway_variance_secs: Optional[float] = Field(
        None, description="Reserved; not derivable from delay snapshots",
    )
    predicted_risk_score: int = Field(..., ge=0, le=100)
    risk_factors: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class DaySummary(BaseModel):
    """Coarse rollup over the whole retained history.

    total_incidents counts snapshots with delay >= 5, so a persistent
    disruption is counted once per qualifying snapshot.
    """

    total_incidents: int
    avg_delay: float
    max_delay: float
    total_rider_delay_minutes: float

    model_config = {"frozen": True}
