"""Graph runner: clean interface for drafting a plan for one incident.

Usage:
    from pulseops.planning.runner import run_planning

    plan = run_planning(incident, context, case_studies)

Blocking: callers on the event loop run it in a worker thread.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional, Sequence

from pulseops.config import settings
from pulseops.domain.incident import Incident, PlanResult
from pulseops.knowledge.case_studies import CaseStudy
from pulseops.planning.builder import build_planning_graph
from pulseops.planning.nodes import LLMFactory
from pulseops.planning.state import PlanningState

logger = logging.getLogger(__name__)


class PlanningError(Exception):
    """The model did not produce a usable plan."""


class PlannerNotConfiguredError(PlanningError):
    """No model credentials are available."""


def gemini_api_key() -> str:
    return os.environ.get("GOOGLE_API_KEY") or settings.gemini_api_key


def _default_llm_factory():
    """Create a Gemini Flash instance from environment config."""
    from langchain_google_genai import ChatGoogleGenerativeAI

    api_key = gemini_api_key()
    if not api_key:
        raise PlannerNotConfiguredError(
            "Gemini API key not found. Set GOOGLE_API_KEY or PULSEOPS_GEMINI_API_KEY "
            "in your environment variables."
        )

    return ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=api_key,
        temperature=settings.gemini_temperature,
        max_output_tokens=settings.gemini_max_output_tokens,
    )


def run_planning(
    incident: Incident,
    context: dict[str, Any],
    case_studies: Sequence[CaseStudy],
    *,
    llm_factory: Optional[LLMFactory] = None,
    max_attempts: int | None = None,
) -> PlanResult:
    """Invoke the planning graph for an incident.

    Args:
        incident: The incident to plan for.
        context: Live context for the incident.
        case_studies: Relevant historical cases, most relevant first.
        llm_factory: Optional override for LLM construction (for testing).
        max_attempts: Override the number of drafts allowed.

    Raises:
        PlanningError: No draft produced a valid plan.
    """
    factory = llm_factory or _default_llm_factory
    attempts = max_attempts or settings.planning_max_attempts

    initial_state: PlanningState = {
        "incident": incident.model_dump(mode="json"),
        "context": context,
        "case_studies": [cs.model_dump(mode="json") for cs in case_studies],
        "plan": None,
        "attempts": 0,
        "max_attempts": attempts,
        "errors": [],
    }

    logger.info(
        "Planning incident %s with %d case studies (max_attempts=%d)",
        incident.id, len(case_studies), attempts,
    )
    final_state = build_planning_graph(factory).invoke(initial_state)

    plan = final_state.get("plan")
    if plan is None:
        errors = final_state.get("errors") or ["no response"]
        raise PlanningError(
            f"Planning failed for {incident.id} after "
            f"{final_state.get('attempts', 0)} attempt(s): {errors[-1]}"
        )

    result = PlanResult.model_validate(plan)
    logger.info("Planned %d action(s) for incident %s", len(result.actions), incident.id)
    return result
