"""Corridor monitoring endpoints: health, risk, daily summary, what-if, tick."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException

from pulseops.core.monitor import CorridorMonitor
from pulseops.core.simulation import SimulationInput, simulate_impact
from pulseops.planning.runner import PlanningError
from pulseops.services.agent import PulseOpsAgent
from pulseops.world.provider import WorldStatusProvider

logger = logging.getLogger(__name__)


def create_world_router(
    provider: WorldStatusProvider,
    monitor: CorridorMonitor,
    agent: PulseOpsAgent,
) -> APIRouter:
    router = APIRouter(tags=["world"])

    @router.get("/health")
    async def corridor_health() -> dict[str, Any]:
        """Record a fresh snapshot, then report health over the retained history."""
        status = await provider.current()
        monitor.record(status)
        return {
            "ok": True,
            "world_status": status,
            "health": monitor.health(),
            "history": monitor.sparkline(),
        }

    @router.get("/risk")
    async def corridor_risk() -> dict[str, Any]:
        return {"ok": True, "risk": monitor.risk()}

    @router.get("/summary/daily")
    async def daily_summary() -> dict[str, Any]:
        return {"ok": True, "summary": monitor.daily_summary()}

    @router.post("/simulate")
    async def simulate(params: Optional[SimulationInput] = None) -> dict[str, Any]:
        return {"ok": True, "result": simulate_impact(params or SimulationInput())}

    @router.post("/agent/tick")
    async def agent_tick() -> dict[str, Any]:
        try:
            return await agent.tick()
        except PlanningError as exc:
            logger.error("Agent tick planning failed: %s", exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc

    return router
