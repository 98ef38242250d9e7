"""Canned test scenarios for creating realistic demo incidents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from pulseops.domain.enums import DataSource, IncidentSeverity
from pulseops.domain.incident import Incident

logger = logging.getLogger(__name__)

# Trip count heuristic when a scenario only states riders
RIDERS_PER_TRIP = 30


class TestScenario(BaseModel):
    __test__ = False  # not a pytest class

    id: str
    label: str
    short_description: str
    mode: str
    route_id: str
    segment_start_stop_id: str
    segment_end_stop_id: str
    severity: IncidentSeverity
    reason: str
    expected_delay_minutes: float
    riders_estimated: int
    default_actions: list[str] = Field(default_factory=list)

    def to_incident(self) -> Incident:
        return Incident(
            severity=self.severity,
            route_ids=[self.route_id],
            segment_start_stop_id=self.segment_start_stop_id,
            segment_end_stop_id=self.segment_end_stop_id,
            avg_delay_minutes=self.expected_delay_minutes,
            trips_impacted=-(-self.riders_estimated // RIDERS_PER_TRIP),
            riders_estimated=self.riders_estimated,
            data_source=DataSource.SIMULATED,
        )


_SCENARIO_LIST = TypeAdapter(list[TestScenario])


class ScenarioCatalog:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._scenarios: list[TestScenario] | None = None

    def all(self) -> list[TestScenario]:
        if self._scenarios is None:
            try:
                self._scenarios = _SCENARIO_LIST.validate_json(self._path.read_bytes())
                logger.info("Loaded %d test scenarios", len(self._scenarios))
            except (OSError, ValidationError) as exc:
                logger.error("Failed to load test scenarios from %s: %s", self._path, exc)
                self._scenarios = []
        return list(self._scenarios)

    def get(self, scenario_id: str) -> Optional[TestScenario]:
        return next((s for s in self.all() if s.id == scenario_id), None)
