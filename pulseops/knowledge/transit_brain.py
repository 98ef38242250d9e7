"""Transit brain: a tiny corridor knowledge graph with rule matching.

Rules carry string conditions of three shapes:

    corridor_id == 'red_core'       checked only when the route maps to a corridor
    headway_variance_secs > 240     never evaluated; the metric is not derivable yet
    nearby_event == true            requires at least one upcoming event

A rule triggers when none of its evaluated conditions fail.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from pulseops.domain.snapshot import TimedWorldStatus
from pulseops.external.context import ExternalContext

logger = logging.getLogger(__name__)


class Corridor(BaseModel):
    id: str
    name: str
    modes: list[str] = Field(default_factory=list)
    routes: list[str] = Field(default_factory=list)
    transfer_hubs: list[str] = Field(default_factory=list)
    vulnerabilities: list[str] = Field(default_factory=list)
    notes: Optional[str] = None


class BrainRule(BaseModel):
    id: str
    description: str
    conditions: list[str] = Field(default_factory=list)
    suggested_actions: list[str] = Field(default_factory=list)


class TransitBrainData(BaseModel):
    corridors: list[Corridor] = Field(default_factory=list)
    rules: list[BrainRule] = Field(default_factory=list)


class BrainInsight(BaseModel):
    corridor_id: Optional[str] = None
    corridor_name: Optional[str] = None
    likely_failure_modes: list[str] = Field(default_factory=list)
    triggered_rules: list[BrainRule] = Field(default_factory=list)


def _condition_holds(
    condition: str,
    corridor: Optional[Corridor],
    headway_variance: Optional[float],
    nearby_event: bool,
) -> bool:
    if "corridor_id" in condition and corridor is not None:
        expected = condition.split("==", 1)[1].strip().strip("'\"")
        return corridor.id == expected
    if "headway_variance_secs" in condition and headway_variance is not None:
        threshold = float(condition.rsplit(">", 1)[1].strip())
        return headway_variance > threshold
    if "nearby_event == true" in condition:
        return nearby_event
    return True


class TransitBrain:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._data: TransitBrainData | None = None

    @property
    def data(self) -> TransitBrainData:
        if self._data is None:
            self._data = self._load()
        return self._data

    def corridor_for_route(self, route_id: str) -> Optional[Corridor]:
        return next((c for c in self.data.corridors if route_id in c.routes), None)

    def analyze(
        self,
        history: Sequence[TimedWorldStatus],
        external: Optional[ExternalContext] = None,
    ) -> BrainInsight:
        if not history:
            return BrainInsight()

        latest = history[-1]
        corridor = self.corridor_for_route(latest.route_id)
        nearby_event = bool(external and external.events)
        headway_variance: Optional[float] = None

        triggered = [
            rule for rule in self.data.rules
            if all(
                _condition_holds(cond, corridor, headway_variance, nearby_event)
                for cond in rule.conditions
            )
        ]

        return BrainInsight(
            corridor_id=corridor.id if corridor else None,
            corridor_name=corridor.name if corridor else None,
            likely_failure_modes=list(dict.fromkeys(corridor.vulnerabilities)) if corridor else [],
            triggered_rules=triggered,
        )

    def _load(self) -> TransitBrainData:
        try:
            return TransitBrainData.model_validate_json(self._path.read_bytes())
        except (OSError, ValidationError) as exc:
            logger.error("Failed to load transit brain from %s: %s", self._path, exc)
            return TransitBrainData()
