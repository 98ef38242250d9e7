"""Incident context flow: live cause/weather hints for one incident.

The flow is an external HTTP workflow (by default the local /fake-flow
endpoint).  When it cannot be reached the planner still gets a context
object built from the incident itself.
"""

from __future__ import annotations

import logging
from typing import Any

from pulseops.domain.incident import Incident
from pulseops.external.http import UpstreamClient, UpstreamError

logger = logging.getLogger(__name__)


def fallback_context(incident: Incident) -> dict[str, Any]:
    return {
        "route_id": incident.primary_route,
        "avg_delay_minutes_live": incident.avg_delay_minutes,
        "weather_summary": "unknown",
        "suggested_cause": "UNKNOWN",
    }


class IncidentContextFlow:
    def __init__(self, url: str, client: UpstreamClient) -> None:
        self._url = url
        self._client = client

    async def context_for(self, incident: Incident) -> dict[str, Any]:
        if not self._url:
            return fallback_context(incident)
        try:
            data = await self._client.post_json(self._url, {
                "route_id": incident.primary_route,
                "segment_start_stop_id": incident.segment_start_stop_id,
                "segment_end_stop_id": incident.segment_end_stop_id,
            })
        except UpstreamError as exc:
            logger.warning("Incident context flow failed for %s: %s", incident.id, exc)
            return fallback_context(incident)

        if not isinstance(data, dict):
            logger.warning("Incident context flow returned %s, expected object", type(data).__name__)
            return fallback_context(incident)
        return data
