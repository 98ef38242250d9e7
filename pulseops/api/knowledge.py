"""Context and knowledge endpoints: weather/events, brain, learning log, case studies."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from pulseops.core.monitor import CorridorMonitor
from pulseops.external.context import ExternalContextService
from pulseops.foundation.clock import utc_now
from pulseops.knowledge.case_studies import CaseStudyLibrary, CaseStudyQuery
from pulseops.knowledge.learning_log import LearningLog
from pulseops.knowledge.time_context import infer_mode, infer_time_of_day, infer_weekday
from pulseops.knowledge.transit_brain import TransitBrain
from pulseops.world.provider import WorldStatusProvider

LEARNING_LOG_LIMIT = 30


def create_knowledge_router(
    monitor: CorridorMonitor,
    provider: WorldStatusProvider,
    context_service: ExternalContextService,
    brain: TransitBrain,
    case_studies: CaseStudyLibrary,
    learning_log: LearningLog,
) -> APIRouter:
    router = APIRouter(tags=["knowledge"])

    @router.get("/context")
    async def external_context() -> dict[str, Any]:
        ctx = await context_service.snapshot()
        return {"ok": True, "weather": ctx.weather, "events": ctx.events}

    @router.get("/brain/insights")
    async def brain_insights() -> dict[str, Any]:
        external = await context_service.snapshot()
        insights = brain.analyze(monitor.history(), external)
        return {"ok": True, "insights": insights, "external": external}

    @router.get("/learning-log")
    async def learning_entries() -> dict[str, Any]:
        return {"ok": True, "entries": learning_log.recent(LEARNING_LOG_LIMIT)}

    @router.get("/case-studies/recommendations")
    async def recommended_case_studies() -> dict[str, Any]:
        now = utc_now()
        status = await provider.current()
        mode, corridor_type = infer_mode(status.route_id)
        cases = case_studies.find_relevant(CaseStudyQuery(
            mode=mode,
            corridor_type=corridor_type,
            time_of_day=infer_time_of_day(now),
            weekday=infer_weekday(now),
        ))
        return {"ok": True, "cases": cases}

    return router
