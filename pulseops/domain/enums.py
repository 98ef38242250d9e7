"""Controlled enumerations for the pulseops domain.

Every categorical field in the domain references an enum defined here.
"""

from __future__ import annotations

from enum import Enum


class DataSource(str, Enum):
    """Where a world-status snapshot (or the incident built from it) came from."""

    GTFS_REALTIME = "gtfs_realtime"
    SIMULATED = "simulated"

    @property
    def is_live(self) -> bool:
        return self is DataSource.GTFS_REALTIME


class IncidentStatus(str, Enum):
    OPEN = "open"
    MONITORING = "monitoring"
    RESOLVED = "resolved"


class IncidentSeverity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"


class IncidentType(str, Enum):
    CORRIDOR_BLOCKAGE = "corridor_blockage"


class ActionCategory(str, Enum):
    """Kinds of operational response the planner may propose."""

    ALERT_ONLY = "alert_only"
    DETOUR = "detour"
    SHUTTLE = "shuttle"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
