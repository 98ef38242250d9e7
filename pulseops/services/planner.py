"""IncidentPlanner: gathers context and case studies, then drafts a plan."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from pulseops.domain.incident import Incident, PlanResult
from pulseops.external.flow import IncidentContextFlow
from pulseops.knowledge.case_studies import CaseStudyLibrary, CaseStudyQuery
from pulseops.knowledge.time_context import infer_mode, infer_time_of_day, infer_weekday
from pulseops.planning.nodes import LLMFactory
from pulseops.planning.runner import PlannerNotConfiguredError, gemini_api_key, run_planning

logger = logging.getLogger(__name__)

PLANNING_SCENARIO_TYPE = "service_delay"
MAX_CASE_STUDIES = 5


def case_study_query_for(incident: Incident) -> CaseStudyQuery:
    mode, corridor_type = infer_mode(incident.primary_route)
    return CaseStudyQuery(
        mode=mode,
        corridor_type=corridor_type,
        time_of_day=infer_time_of_day(incident.start_time),
        weekday=infer_weekday(incident.start_time),
        scenario_type=PLANNING_SCENARIO_TYPE,
    )


class IncidentPlanner:
    def __init__(
        self,
        flow: IncidentContextFlow,
        case_studies: CaseStudyLibrary,
        *,
        llm_factory: Optional[LLMFactory] = None,
        max_attempts: int | None = None,
    ) -> None:
        self._flow = flow
        self._case_studies = case_studies
        self._llm_factory = llm_factory
        self._max_attempts = max_attempts

    @property
    def is_configured(self) -> bool:
        return self._llm_factory is not None or bool(gemini_api_key())

    async def plan(self, incident: Incident) -> PlanResult:
        """Draft a plan for *incident*.

        Raises:
            PlannerNotConfiguredError: No model credentials.
            PlanningError: The model never produced a valid plan.
        """
        if not self.is_configured:
            raise PlannerNotConfiguredError("LLM planning is not configured")

        context = await self._flow.context_for(incident)
        related = self._case_studies.find_relevant(case_study_query_for(incident))[:MAX_CASE_STUDIES]
        logger.info(
            "Planning %s with case studies %s", incident.id, [cs.id for cs in related],
        )

        return await asyncio.to_thread(
            run_planning,
            incident,
            context,
            related,
            llm_factory=self._llm_factory,
            max_attempts=self._max_attempts,
        )
