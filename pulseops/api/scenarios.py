"""Canned test scenarios and incident creation from them."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from pulseops.knowledge.scenarios import ScenarioCatalog
from pulseops.planning.runner import PlanningError
from pulseops.services.planner import IncidentPlanner
from pulseops.store.incident_store import IncidentStore

logger = logging.getLogger(__name__)


def create_scenarios_router(
    catalog: ScenarioCatalog,
    store: IncidentStore,
    planner: IncidentPlanner,
) -> APIRouter:
    router = APIRouter(prefix="/test-scenarios", tags=["scenarios"])

    @router.get("/mbta")
    async def list_scenarios() -> dict[str, Any]:
        return {"ok": True, "scenarios": catalog.all()}

    @router.post("/mbta/{scenario_id}/create-incident", status_code=201)
    async def create_scenario_incident(scenario_id: str) -> dict[str, Any]:
        scenario = catalog.get(scenario_id)
        if scenario is None:
            raise HTTPException(status_code=404, detail=f"Scenario {scenario_id} not found")

        incident = await store.create(scenario.to_incident())
        logger.info("Created scenario incident %s from %s", incident.id, scenario.id)

        plan = None
        if planner.is_configured:
            try:
                plan = await planner.plan(incident)
                await store.add_actions(incident.id, plan.actions)
            except PlanningError as exc:
                logger.warning("Auto-planning failed for %s: %s", incident.id, exc)
                plan = None

        return {
            "ok": True,
            "incident": incident,
            "scenario_info": {
                "label": scenario.label,
                "description": scenario.short_description,
                "default_actions": scenario.default_actions,
            },
            "plan": plan,
        }

    return router
