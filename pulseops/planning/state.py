"""PlanningState: the state object the planning graph nodes read and write."""

from __future__ import annotations

from typing import Any, Optional, TypedDict


class PlanningState(TypedDict, total=False):
    """LangGraph state for drafting an incident response plan.

    Fields:
        incident: Serialised Incident (JSON-mode dict).
        context: Live context for the incident (flow response or fallback).
        case_studies: Serialised relevant CaseStudy dicts.
        user_prompt: Human message sent to the model.
        raw_response: Text of the most recent model reply.
        plan: Validated PlanResult as a dict, once one parses.
        attempts: Drafts requested so far.
        max_attempts: Safety cap on drafts.
        errors: Why each rejected draft was rejected, oldest first.
    """

    incident: dict[str, Any]
    context: dict[str, Any]
    case_studies: list[dict[str, Any]]
    user_prompt: str
    raw_response: str
    plan: Optional[dict[str, Any]]
    attempts: int
    max_attempts: int
    errors: list[str]
