"""ID generation for incidents and learning-log entries."""

from __future__ import annotations

from uuid import uuid4

from pulseops.foundation.clock import now_ms


def new_incident_id() -> str:
    """Millisecond-stamped incident ID with a random suffix to keep it unique."""
    return f"incident-{now_ms()}-{uuid4().hex[:6]}"


def new_learning_id() -> str:
    return f"log-{now_ms()}-{uuid4().hex[:6]}"
