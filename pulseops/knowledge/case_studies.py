"""Historical incident case studies and relevance matching.

Scoring per case study:
    mode match           +2
    scenario_type match  +3
    corridor_type match  +1
    time_of_day match    +1
    weekday match        +1
    outcome "good"       +0.5

If at least three case studies score above zero, the top five of those
are returned; otherwise the top five overall.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

MAX_RESULTS = 5


class CaseStudy(BaseModel):
    id: str
    city: str
    agency: str
    mode: str
    scenario_type: str
    corridor_type: str
    time_of_day: str
    weekday: str
    peak_delay_minutes: float
    duration_minutes: float
    riders_impacted: int
    actions_taken: list[str] = Field(default_factory=list)
    outcome_quality: Literal["good", "mixed", "poor"]
    summary: str
    source_url: Optional[str] = None


class CaseStudyQuery(BaseModel):
    mode: Optional[str] = None
    scenario_type: Optional[str] = None
    time_of_day: Optional[str] = None
    weekday: Optional[str] = None
    corridor_type: Optional[str] = None


_CASE_LIST = TypeAdapter(list[CaseStudy])


def score_case_study(cs: CaseStudy, query: CaseStudyQuery) -> float:
    score = 0.0
    if query.mode and cs.mode == query.mode:
        score += 2
    if query.scenario_type and cs.scenario_type == query.scenario_type:
        score += 3
    if query.corridor_type and cs.corridor_type == query.corridor_type:
        score += 1
    if query.time_of_day and cs.time_of_day == query.time_of_day:
        score += 1
    if query.weekday and cs.weekday == query.weekday:
        score += 1
    if cs.outcome_quality == "good":
        score += 0.5
    return score


class CaseStudyLibrary:
    """Lazily loaded, read-only collection of case studies."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._cases: list[CaseStudy] | None = None

    def all(self) -> list[CaseStudy]:
        if self._cases is None:
            self._cases = self._load()
        return list(self._cases)

    def find_relevant(self, query: CaseStudyQuery) -> list[CaseStudy]:
        cases = self.all()
        if not cases:
            return []

        # sorted() is stable, so equal scores keep file order
        scored = sorted(
            ((score_case_study(cs, query), cs) for cs in cases),
            key=lambda pair: pair[0],
            reverse=True,
        )
        non_zero = [cs for score, cs in scored if score > 0]
        if len(non_zero) >= 3:
            return non_zero[:MAX_RESULTS]
        return [cs for _, cs in scored][:MAX_RESULTS]

    def _load(self) -> list[CaseStudy]:
        try:
            cases = _CASE_LIST.validate_json(self._path.read_bytes())
        except (OSError, ValidationError) as exc:
            logger.error("Failed to load case studies from %s: %s", self._path, exc)
            return []
        logger.info("Loaded %d case studies", len(cases))
        return cases
