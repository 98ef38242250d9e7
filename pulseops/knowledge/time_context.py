"""Coarse context labels used to match incidents against case studies."""

from __future__ import annotations

from datetime import datetime


def _local(dt: datetime) -> datetime:
    # Aware instants are judged in server-local time; naive ones as given
    return dt.astimezone() if dt.tzinfo is not None else dt


def infer_time_of_day(dt: datetime) -> str:
    hour = _local(dt).hour
    if hour < 10:
        return "am_peak"
    if hour < 16:
        return "midday"
    if hour < 22:
        return "pm_peak"
    return "overnight"


def infer_weekday(dt: datetime) -> str:
    return "weekend" if _local(dt).weekday() >= 5 else "weekday"


def infer_mode(route_id: str) -> tuple[str, str]:
    """(mode, corridor_type) guessed from a route identifier."""
    rid = (route_id or "").lower()
    if "green" in rid:
        return "light_rail", "core_subway"
    if "red" in rid or "orange" in rid or "blue" in rid:
        return "subway", "core_subway"
    return "bus", "urban_trunk"
