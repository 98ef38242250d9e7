"""PulseOpsAgent: the autonomous tick and the background monitoring loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pulseops.core.monitor import CorridorMonitor
from pulseops.services.auto_incidents import from_live_status, from_simulated_status
from pulseops.services.planner import IncidentPlanner
from pulseops.store.incident_store import IncidentStore
from pulseops.world.provider import WorldStatusProvider

logger = logging.getLogger(__name__)

PLANNER_MISSING_WARNING = "LLM planning not configured"


class PulseOpsAgent:
    def __init__(
        self,
        provider: WorldStatusProvider,
        monitor: CorridorMonitor,
        store: IncidentStore,
        planner: IncidentPlanner,
    ) -> None:
        self._provider = provider
        self._monitor = monitor
        self._store = store
        self._planner = planner

    async def tick(self) -> dict[str, Any]:
        """Evolve the simulation one step, observe, and respond.

        Raises:
            PlanningError: An incident was created but could not be planned.
        """
        self._provider.simulation.decay()
        status = await self._provider.current()
        self._monitor.record(status)
        logger.info(
            "Agent tick: delay=%.1f min source=%s", status.avg_delay_minutes, status.source.value,
        )

        result: dict[str, Any] = {
            "ok": True,
            "world_status": status.model_dump(mode="json"),
            "incident_created": None,
        }

        candidate = await from_simulated_status(status, self._store)
        if candidate is None:
            return result

        if not self._planner.is_configured:
            logger.warning("Skipping incident creation: %s", PLANNER_MISSING_WARNING)
            result["warning"] = PLANNER_MISSING_WARNING
            return result

        incident = await self._store.create(candidate)
        plan = await self._planner.plan(incident)
        saved = await self._store.add_actions(incident.id, plan.actions)

        result["incident_created"] = incident.id
        result["actions_planned"] = len(saved)
        return result

    async def monitor_once(self) -> None:
        status = await self._provider.current()
        self._monitor.record(status)
        await from_live_status(status, self._store)

    async def run_background_loop(self, interval: float) -> None:
        """Observe and auto-create live incidents every *interval* seconds until cancelled."""
        logger.info("Background agent loop started (interval=%.0fs)", interval)
        while True:
            await asyncio.sleep(interval)
            try:
                await self.monitor_once()
            except Exception:
                logger.exception("Background agent loop iteration failed")
