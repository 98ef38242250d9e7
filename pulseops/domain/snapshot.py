"""World-status snapshots: the single input of the corridor aggregation core.

A WorldStatus is one observation of corridor conditions as reported by a
world-status provider (live GTFS-Realtime or the simulation).  Payloads
from upstream are loosely typed, so this model is the validation
boundary: missing numeric fields default to zero, anything non-numeric or
non-finite is rejected.  Negative values are accepted as-is; the
aggregators clamp them where it matters.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from pulseops.domain.enums import DataSource


class WorldStatus(BaseModel):
    """Point-in-time corridor reading, before it is stamped into history."""

    route_id: str = Field(..., min_length=1, max_length=128)
    segment_start_stop_id: str = Field(..., min_length=1, max_length=128)
    segment_end_stop_id: str = Field(..., min_length=1, max_length=128)
    avg_delay_minutes: float = Field(0.0, allow_inf_nan=False, description="Average delay at capture time")
    trips_impacted: int = Field(0, description="Trips affected at capture time")
    riders_estimated: int = Field(0, description="Estimated riders affected at capture time")
    source: DataSource

    model_config = {"frozen": True}

    @field_validator("avg_delay_minutes", "trips_impacted", "riders_estimated", mode="before")
    @classmethod
    def missing_numbers_default_to_zero(cls, v: Any) -> Any:
        if v is None or v == "":
            return 0
        return v


class TimedWorldStatus(WorldStatus):
    """A WorldStatus stamped with its capture instant (ms since epoch).

    Immutable once appended to history: only read or evicted.
    """

    timestamp: int = Field(..., description="Capture instant in milliseconds since the epoch")

    @classmethod
    def stamp(cls, status: WorldStatus, timestamp: int) -> "TimedWorldStatus":
        return cls(**status.model_dump(), timestamp=timestamp)
