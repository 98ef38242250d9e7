"""LangGraph nodes for incident response planning.

Each node receives the full PlanningState and returns a partial update.
Only draft_plan talks to the model; everything else is deterministic.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from pydantic import ValidationError

from pulseops.domain.incident import PlanResult
from pulseops.planning.state import PlanningState

logger = logging.getLogger(__name__)

LLMFactory = Callable[[], Any]  # Returns a langchain BaseChatModel


SYSTEM_PROMPT = """You are PulseOps, an incident command assistant for a public transit control center.
Your job is to review live disruptions, decide on the best operational responses,
and draft clear communications for staff and riders.

You are conservative, safety-aware, and aligned with agency playbooks.
Never invent routes, stops, people, or resources that are not in the provided data.

You are also given real-world incident case_studies from other transit agencies.
You MUST:
- Compare the current incident to those historical cases
- Prefer patterns that led to "good" outcomes
- Call out which case IDs you are drawing from when relevant

You MUST output ONLY valid JSON with this shape:

{
  "actions": [
    {
      "category": "alert_only" | "detour" | "shuttle",
      "summary": "short one-sentence summary for operators",
      "rider_alert_header": "short rider-facing title",
      "rider_alert_body": "2-3 sentence rider-friendly message",
      "ops_script": "internal instructions referencing real routes/stops and staff",
      "social_post": "update text, <= 240 characters"
    }
  ],
  "reasoning": "1-5 sentences explaining why you ranked the actions this way."
}

Do not wrap JSON in backticks or markdown.
Do not include any other top-level keys besides "actions" and "reasoning"."""


_USER_PROMPT = """You are handling a new transit incident. Here is the incident data:

<incident_json>
{incident}
</incident_json>

<additional_context>
{context}
</additional_context>

<case_studies>
{case_studies}
</case_studies>

Based on this information, generate a response plan with appropriate actions.
Output ONLY the JSON response as specified in your system prompt."""

_RETRY_NOTE = """

Your previous reply could not be used ({error}).
Reply again with ONLY the JSON object."""


# ── 1. assemble_prompt ──────────────────────────────────────────────────────

def assemble_prompt(state: PlanningState) -> dict:
    prompt = _USER_PROMPT.format(
        incident=json.dumps(state.get("incident", {}), indent=2),
        context=json.dumps(state.get("context", {}), indent=2, default=str),
        case_studies=json.dumps(state.get("case_studies", []), indent=2),
    )
    return {"user_prompt": prompt}


# ── 2. draft_plan ───────────────────────────────────────────────────────────

def _response_text(response: Any) -> str:
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, list):
        # Gemini can return content as a list of parts
        return "".join(
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in content
        )
    return str(content)


def make_draft_plan(llm_factory: LLMFactory):
    """Create the draft_plan node with an injected LLM factory."""

    def draft_plan(state: PlanningState) -> dict:
        attempts = state.get("attempts", 0) + 1
        errors = state.get("errors", [])
        prompt = state.get("user_prompt", "")
        if errors:
            prompt += _RETRY_NOTE.format(error=errors[-1])

        try:
            llm = llm_factory()
            response = llm.invoke([("system", SYSTEM_PROMPT), ("human", prompt)])
        except Exception as exc:
            logger.error("LLM invocation failed on attempt %d: %s", attempts, exc)
            return {
                "attempts": attempts,
                "raw_response": "",
                "errors": errors + [f"model call failed: {exc}"],
            }

        text = _response_text(response)
        logger.info("Plan draft %d: %d chars", attempts, len(text))
        return {"attempts": attempts, "raw_response": text}

    return draft_plan


# ── 3. parse_plan ───────────────────────────────────────────────────────────

def strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        lines = [l for l in text.split("\n") if not l.strip().startswith("```")]
        text = "\n".join(lines).strip()
    return text


def parse_plan(state: PlanningState) -> dict:
    """Validate the latest draft into a PlanResult, or record why it failed."""
    errors = state.get("errors", [])
    text = strip_code_fences(state.get("raw_response", ""))
    if not text:
        # draft_plan already recorded the failure
        return {"plan": None}

    try:
        result = PlanResult.model_validate(json.loads(text))
    except json.JSONDecodeError as exc:
        logger.warning("Plan draft is not valid JSON: %s", exc)
        return {"plan": None, "errors": errors + [f"invalid JSON: {exc.msg}"]}
    except ValidationError as exc:
        logger.warning("Plan draft failed validation: %d error(s)", exc.error_count())
        return {"plan": None, "errors": errors + [f"invalid plan: {exc.errors()[0]['msg']}"]}

    return {"plan": result.model_dump(mode="json")}


# ── 4. check_plan (conditional edge) ────────────────────────────────────────

def check_plan(state: PlanningState) -> str:
    if state.get("plan") is not None:
        return "end"
    if state.get("attempts", 0) >= state.get("max_attempts", 1):
        logger.warning("Giving up after %d plan draft(s)", state.get("attempts", 0))
        return "end"
    return "retry"
