"""In-memory incident and action store with async-safe access.

Design notes:
    - An asyncio.Lock guards all mutations so concurrent request handlers
      and the background agent loop never interleave a read-modify-write.
    - Incidents are keyed by ID; actions are kept per incident in the
      order they were planned.
    - Nothing here survives a restart.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from pulseops.domain.incident import Incident, PlannedAction
from pulseops.foundation.clock import utc_now

logger = logging.getLogger(__name__)


class IncidentStore:
    """Async-safe keyed store of incidents and their planned actions."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._incidents: dict[str, Incident] = {}
        self._actions: dict[str, list[PlannedAction]] = {}

    # ── Incidents ────────────────────────────────────────────────────────

    async def all_incidents(self) -> list[Incident]:
        async with self._lock:
            return list(self._incidents.values())

    async def get(self, incident_id: str) -> Incident | None:
        async with self._lock:
            return self._incidents.get(incident_id)

    async def create(self, incident: Incident) -> Incident:
        async with self._lock:
            if incident.id in self._incidents:
                raise ValueError(f"Incident {incident.id} already exists")
            self._incidents[incident.id] = incident
        logger.info(
            "Created incident %s (route=%s severity=%s source=%s)",
            incident.id,
            incident.primary_route,
            incident.severity.value,
            incident.data_source.value if incident.data_source else None,
        )
        return incident

    async def update(self, incident_id: str, **changes: Any) -> Incident | None:
        """Apply *changes* to an incident; None if it does not exist."""
        async with self._lock:
            existing = self._incidents.get(incident_id)
            if existing is None:
                return None
            updated = Incident.model_validate({**existing.model_dump(), **changes})
            self._incidents[incident_id] = updated
        logger.info("Updated incident %s: %s", incident_id, sorted(changes))
        return updated

    async def find(self, predicate: Callable[[Incident], bool]) -> Incident | None:
        """First incident for which *predicate(incident)* is true, in creation order."""
        async with self._lock:
            return next(
                (inc for inc in self._incidents.values() if predicate(inc)),
                None,
            )

    # ── Actions ──────────────────────────────────────────────────────────

    async def actions_for(self, incident_id: str) -> list[PlannedAction]:
        async with self._lock:
            return list(self._actions.get(incident_id, []))

    async def add_actions(
        self,
        incident_id: str,
        actions: list[PlannedAction],
    ) -> list[PlannedAction]:
        """Append *actions*, assigning sequential IDs and linking them to the incident."""
        async with self._lock:
            existing = self._actions.setdefault(incident_id, [])
            offset = len(existing)
            now = utc_now()
            stamped = [
                action.model_copy(update={
                    "id": f"{incident_id}-action-{offset + idx}",
                    "incident_id": incident_id,
                    "created_at": now,
                })
                for idx, action in enumerate(actions)
            ]
            existing.extend(stamped)
        logger.info("Saved %d action(s) for incident %s", len(stamped), incident_id)
        return stamped

    async def all_actions(self) -> list[PlannedAction]:
        async with self._lock:
            return [a for actions in self._actions.values() for a in actions]
