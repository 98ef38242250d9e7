"""Incidents and the response actions planned for them."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from pulseops.domain.enums import (
    ActionCategory,
    DataSource,
    IncidentSeverity,
    IncidentStatus,
    IncidentType,
)
from pulseops.domain.snapshot import WorldStatus
from pulseops.foundation.clock import utc_now
from pulseops.foundation.identifiers import new_incident_id


class Incident(BaseModel):
    """A corridor disruption that operators (or the agent) are responding to."""

    id: str = Field(default_factory=new_incident_id)
    status: IncidentStatus = IncidentStatus.OPEN
    severity: IncidentSeverity
    type: IncidentType = IncidentType.CORRIDOR_BLOCKAGE
    route_ids: list[str] = Field(..., min_length=1)
    segment_start_stop_id: str
    segment_end_stop_id: str
    start_time: datetime = Field(default_factory=utc_now)
    avg_delay_minutes: float = 0.0
    trips_impacted: int = 0
    riders_estimated: int = 0
    data_source: Optional[DataSource] = None

    @classmethod
    def from_world_status(cls, status: WorldStatus, severity: IncidentSeverity) -> "Incident":
        return cls(
            severity=severity,
            route_ids=[status.route_id],
            segment_start_stop_id=status.segment_start_stop_id,
            segment_end_stop_id=status.segment_end_stop_id,
            avg_delay_minutes=status.avg_delay_minutes,
            trips_impacted=status.trips_impacted,
            riders_estimated=status.riders_estimated,
            data_source=status.source,
        )

    @property
    def primary_route(self) -> str:
        return self.route_ids[0]

    def is_open_on_route(self, route_id: str) -> bool:
        return self.status == IncidentStatus.OPEN and route_id in self.route_ids


class PlannedAction(BaseModel):
    """One drafted response: operator summary plus rider/ops/social copy."""

    id: Optional[str] = None
    incident_id: Optional[str] = None
    category: ActionCategory
    summary: str
    rider_alert_header: str
    rider_alert_body: str
    ops_script: str
    social_post: str
    created_at: Optional[datetime] = None


class PlanResult(BaseModel):
    """What the planner returns: ranked actions and the reasoning behind them."""

    actions: list[PlannedAction]
    reasoning: str = Field(..., min_length=1)
