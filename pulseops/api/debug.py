"""Debug and demo endpoints: hand-made incidents, disruptions, fake flow."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from pulseops.domain.enums import DataSource, IncidentSeverity
from pulseops.domain.incident import Incident
from pulseops.foundation.clock import utc_now
from pulseops.store.incident_store import IncidentStore
from pulseops.world.provider import WorldStatusProvider

logger = logging.getLogger(__name__)

DEFAULT_CUSTOM_DELAY_MINUTES = 15.0
DEFAULT_CUSTOM_TRIPS = 5
DEFAULT_CUSTOM_RIDERS = 150


class CustomIncidentRequest(BaseModel):
    route_id: Optional[str] = None
    severity: Optional[str] = None
    segment_start_stop_id: Optional[str] = None
    segment_end_stop_id: Optional[str] = None
    avg_delay_minutes: Optional[float] = None
    trips_impacted: Optional[int] = None
    riders_estimated: Optional[int] = None


class FlowRequest(BaseModel):
    route_id: Optional[str] = None
    segment_start_stop_id: Optional[str] = None
    segment_end_stop_id: Optional[str] = None


def create_debug_router(store: IncidentStore, provider: WorldStatusProvider) -> APIRouter:
    router = APIRouter(tags=["debug"])

    @router.post("/debug/create-incident")
    async def create_demo_incident() -> dict[str, Any]:
        incident = await store.create(Incident(
            severity=IncidentSeverity.MAJOR,
            route_ids=["10"],
            segment_start_stop_id="stop-100",
            segment_end_stop_id="stop-120",
            avg_delay_minutes=15,
            trips_impacted=8,
            riders_estimated=240,
            data_source=DataSource.SIMULATED,
        ))
        return {"message": "Demo incident created", "incident": incident}

    @router.post("/debug/create-custom-incident")
    async def create_custom_incident(body: CustomIncidentRequest) -> dict[str, Any]:
        if not (body.route_id and body.severity
                and body.segment_start_stop_id and body.segment_end_stop_id):
            raise HTTPException(status_code=400, detail="Missing required fields")
        if body.severity not in (IncidentSeverity.MINOR.value, IncidentSeverity.MAJOR.value):
            raise HTTPException(status_code=400, detail="Severity must be 'minor' or 'major'")

        # Zero counts as missing, like the dashboard form sends it
        incident = await store.create(Incident(
            severity=IncidentSeverity(body.severity),
            route_ids=[body.route_id],
            segment_start_stop_id=body.segment_start_stop_id,
            segment_end_stop_id=body.segment_end_stop_id,
            avg_delay_minutes=body.avg_delay_minutes or DEFAULT_CUSTOM_DELAY_MINUTES,
            trips_impacted=body.trips_impacted or DEFAULT_CUSTOM_TRIPS,
            riders_estimated=body.riders_estimated or DEFAULT_CUSTOM_RIDERS,
            data_source=DataSource.SIMULATED,
        ))
        return {"message": "Custom incident created", "incident": incident}

    @router.post("/debug/trigger-disruption")
    async def trigger_disruption() -> dict[str, Any]:
        provider.simulation.trigger_disruption()
        status = await provider.current()
        logger.warning("Disruption triggered manually via API")
        return {"ok": True, "world_status": status}

    @router.get("/debug/routes")
    async def list_routes(request: Request) -> dict[str, Any]:
        routes = [
            {"path": path, "methods": ", ".join(sorted(method.upper() for method in operations))}
            for path, operations in request.app.openapi()["paths"].items()
        ]
        return {"routes": routes}

    @router.post("/fake-flow")
    async def fake_flow(body: Optional[FlowRequest] = None) -> dict[str, Any]:
        """Stand-in for the external context flow, with a fixed weather story."""
        logger.debug("Fake flow called with %s", body)
        return {
            "route_id": (body.route_id if body else None) or "10",
            "avg_delay_minutes_live": 18,
            "weather_summary": "heavy rain",
            "suggested_cause": "WEATHER",
            "timestamp": utc_now().isoformat(),
        }

    return router
