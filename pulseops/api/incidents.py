"""REST endpoints for incidents and their planned actions."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from pulseops.domain.enums import IncidentSeverity, IncidentStatus
from pulseops.knowledge.learning_log import LearningLog
from pulseops.planning.runner import PlannerNotConfiguredError, PlanningError
from pulseops.services.planner import IncidentPlanner
from pulseops.store.incident_store import IncidentStore

logger = logging.getLogger(__name__)


class IncidentUpdate(BaseModel):
    status: Optional[IncidentStatus] = None
    severity: Optional[IncidentSeverity] = None


def create_incidents_router(
    store: IncidentStore,
    planner: IncidentPlanner,
    learning_log: LearningLog,
) -> APIRouter:
    """Factory that wires incident endpoints to the store and planner."""

    router = APIRouter(tags=["incidents"])

    @router.get("/incidents")
    async def list_incidents() -> dict[str, Any]:
        return {"incidents": await store.all_incidents()}

    @router.get("/incidents/{incident_id}")
    async def get_incident(incident_id: str) -> dict[str, Any]:
        incident = await store.get(incident_id)
        if incident is None:
            raise HTTPException(status_code=404, detail=f"Incident {incident_id} not found")
        return {"incident": incident}

    @router.patch("/incidents/{incident_id}")
    async def update_incident(incident_id: str, body: IncidentUpdate) -> dict[str, Any]:
        changes = body.model_dump(exclude_none=True)
        if not changes:
            raise HTTPException(status_code=400, detail="Nothing to update")

        incident = await store.update(incident_id, **changes)
        if incident is None:
            raise HTTPException(status_code=404, detail=f"Incident {incident_id} not found")

        if body.status is IncidentStatus.RESOLVED:
            actions = await store.actions_for(incident_id)
            learning_log.add(
                summary=(
                    f"Incident {incident_id} on route {incident.primary_route} resolved "
                    f"at {incident.avg_delay_minutes:g} min delay with {len(actions)} planned action(s)."
                ),
                category="playbook_feedback",
                incident_id=incident_id,
                route_id=incident.primary_route,
            )
        return {"incident": incident}

    @router.post("/incidents/{incident_id}/plan")
    async def plan_incident(incident_id: str) -> dict[str, Any]:
        incident = await store.get(incident_id)
        if incident is None:
            raise HTTPException(status_code=404, detail=f"Incident {incident_id} not found")

        try:
            plan = await planner.plan(incident)
        except PlannerNotConfiguredError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        except PlanningError as exc:
            logger.error("Planning failed for %s: %s", incident_id, exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc

        saved = await store.add_actions(incident_id, plan.actions)
        return {
            "incident_id": incident_id,
            "plan": plan,
            "actions_saved": len(saved),
        }

    @router.get("/incidents/{incident_id}/actions")
    async def incident_actions(incident_id: str) -> dict[str, Any]:
        return {"incident_id": incident_id, "actions": await store.actions_for(incident_id)}

    @router.get("/actions")
    async def list_actions() -> dict[str, Any]:
        actions = await store.all_actions()
        return {"actions": actions, "count": len(actions)}

    return router
