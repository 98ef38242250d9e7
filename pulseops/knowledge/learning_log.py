"""Learning log: operator-facing notes on what the copilot has learned.

Held in memory for the life of the process.  An optional JSON file seeds
the log at start-up; it is never written back.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from pulseops.foundation.clock import utc_now
from pulseops.foundation.identifiers import new_learning_id

logger = logging.getLogger(__name__)


class LearningEntry(BaseModel):
    id: str = Field(default_factory=new_learning_id)
    created_at: datetime = Field(default_factory=utc_now)
    incident_id: Optional[str] = None
    route_id: Optional[str] = None
    summary: str = Field(..., min_length=1)
    category: str = Field(..., description="threshold_adjustment, pattern_detected, playbook_feedback, ...")


_ENTRY_LIST = TypeAdapter(list[LearningEntry])


class LearningLog:
    def __init__(self, seed_path: Optional[Path] = None) -> None:
        self._lock = threading.Lock()
        self._entries: list[LearningEntry] = self._load_seed(seed_path) if seed_path else []

    def recent(self, limit: int = 20) -> list[LearningEntry]:
        with self._lock:
            return self._entries[-limit:] if limit > 0 else []

    def add(
        self,
        summary: str,
        category: str,
        incident_id: Optional[str] = None,
        route_id: Optional[str] = None,
    ) -> LearningEntry:
        entry = LearningEntry(
            summary=summary, category=category, incident_id=incident_id, route_id=route_id,
        )
        with self._lock:
            self._entries.append(entry)
        logger.info("Learning log: [%s] %s", category, summary)
        return entry

    @staticmethod
    def _load_seed(path: Path) -> list[LearningEntry]:
        if not path.exists():
            return []
        try:
            return _ENTRY_LIST.validate_json(path.read_bytes())
        except (OSError, ValidationError) as exc:
            logger.error("Ignoring unreadable learning log seed %s: %s", path, exc)
            return []
