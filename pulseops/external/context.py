"""Weather and events context for the corridor.

Both adapters are optional: unconfigured (missing URL or key) or failing
upstreams yield None / [] so the dashboard and the planner simply see
"no context".  Payloads from these APIs vary, so fields are read from a
few common aliases.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from pulseops.external.http import UpstreamClient, UpstreamError, bearer

logger = logging.getLogger(__name__)

Intensity = Literal["none", "light", "moderate", "heavy"]


class WeatherSummary(BaseModel):
    condition: str = "clear"
    intensity: Intensity = "moderate"
    temperature_c: Optional[float] = None


class EventSummary(BaseModel):
    id: str
    name: str
    venue: Optional[str] = None
    start_time: Optional[str] = None
    expected_attendance: Optional[int] = None
    relevance_score: float = Field(0.5, ge=0.0, le=1.0)


class ExternalContext(BaseModel):
    weather: Optional[WeatherSummary] = None
    events: list[EventSummary] = Field(default_factory=list)


def _first(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def parse_weather(data: Any) -> WeatherSummary:
    """Normalise a weather API payload.

    Raises:
        ValueError: If the payload is not an object or has unusable fields.
    """
    if not isinstance(data, dict):
        raise ValueError("weather payload is not a JSON object")
    condition = str(_first(data, "condition", "weather") or "clear").lower()
    return WeatherSummary(
        condition=condition,
        intensity=data.get("intensity") or "moderate",
        temperature_c=_first(data, "temperature_c", "temp_c"),
    )


def parse_events(data: Any) -> list[EventSummary]:
    """Normalise an events API payload; malformed items are skipped."""
    if not isinstance(data, dict):
        raise ValueError("events payload is not a JSON object")
    items = data.get("events") or data.get("items") or []

    events: list[EventSummary] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            events.append(EventSummary(
                id=str(_first(item, "id", "slug") or len(events)),
                name=str(_first(item, "name", "title") or "Event"),
                venue=_first(item, "venue", "location"),
                start_time=_first(item, "start_time", "datetime"),
                expected_attendance=_first(item, "expected_attendance", "attendance"),
            ))
        except ValidationError as exc:
            logger.debug("Skipping malformed event item: %s", exc)
    return events


class ExternalContextService:
    def __init__(
        self,
        client: UpstreamClient,
        weather_url: str = "",
        weather_key: str = "",
        events_url: str = "",
        events_key: str = "",
    ) -> None:
        self._client = client
        self._weather_url = weather_url
        self._weather_key = weather_key
        self._events_url = events_url
        self._events_key = events_key

    async def weather(self) -> Optional[WeatherSummary]:
        if not self._weather_url or not self._weather_key:
            return None
        try:
            data = await self._client.get_json(self._weather_url, headers=bearer(self._weather_key))
            return parse_weather(data)
        except (UpstreamError, ValueError) as exc:
            logger.warning("Weather context unavailable: %s", exc)
            return None

    async def events(self) -> list[EventSummary]:
        if not self._events_url or not self._events_key:
            return []
        try:
            data = await self._client.get_json(self._events_url, headers=bearer(self._events_key))
            return parse_events(data)
        except (UpstreamError, ValueError) as exc:
            logger.warning("Events context unavailable: %s", exc)
            return []

    async def snapshot(self) -> ExternalContext:
        weather, events = await asyncio.gather(self.weather(), self.events())
        return ExternalContext(weather=weather, events=events)
