"""Automatic incident detection from world-status snapshots.

Two independent paths:

    live        gtfs_realtime snapshots with delay >= 5 min or >= 3 trips
                impacted; severity major at >= 8 min, else moderate.  At
                most one open live-sourced incident per route.
    simulated   simulated snapshots with delay > 10 min; severity major at
                >= 20 min, else minor.  At most one open incident per
                route and segment.
"""

from __future__ import annotations

import logging
from typing import Optional

from pulseops.domain.enums import DataSource, IncidentSeverity
from pulseops.domain.incident import Incident
from pulseops.domain.snapshot import WorldStatus
from pulseops.store.incident_store import IncidentStore

logger = logging.getLogger(__name__)

LIVE_MODERATE_DELAY_MINUTES = 5.0
LIVE_SEVERE_DELAY_MINUTES = 8.0
LIVE_MANY_TRIPS = 3

SIM_INCIDENT_DELAY_MINUTES = 10.0
SIM_MAJOR_DELAY_MINUTES = 20.0


async def from_live_status(status: WorldStatus, store: IncidentStore) -> Optional[Incident]:
    """Create and store an incident for a significant live disruption."""
    if status.source is not DataSource.GTFS_REALTIME:
        logger.debug("Skipping live auto-incident (source=%s)", status.source.value)
        return None

    moderate = status.avg_delay_minutes >= LIVE_MODERATE_DELAY_MINUTES
    many_trips = status.trips_impacted >= LIVE_MANY_TRIPS
    if not moderate and not many_trips:
        logger.debug(
            "No live auto-incident: delay=%.1f trips=%d route=%s",
            status.avg_delay_minutes, status.trips_impacted, status.route_id,
        )
        return None

    existing = await store.find(
        lambda inc: inc.is_open_on_route(status.route_id)
        and inc.data_source is not None
        and inc.data_source.is_live
    )
    if existing is not None:
        logger.info("Open live incident %s already covers route %s", existing.id, status.route_id)
        return None

    severity = (
        IncidentSeverity.MAJOR
        if status.avg_delay_minutes >= LIVE_SEVERE_DELAY_MINUTES
        else IncidentSeverity.MODERATE
    )
    incident = Incident.from_world_status(status, severity)
    return await store.create(incident)


async def from_simulated_status(status: WorldStatus, store: IncidentStore) -> Optional[Incident]:
    """Candidate incident for a simulated disruption, not yet stored.

    The caller decides whether to commit it (the agent tick only does so
    when a plan can be drafted for it).
    """
    if status.source is not DataSource.SIMULATED:
        return None
    if status.avg_delay_minutes <= SIM_INCIDENT_DELAY_MINUTES:
        return None

    existing = await store.find(
        lambda inc: inc.is_open_on_route(status.route_id)
        and inc.segment_start_stop_id == status.segment_start_stop_id
        and inc.segment_end_stop_id == status.segment_end_stop_id
    )
    if existing is not None:
        logger.debug("Open incident %s already covers the simulated segment", existing.id)
        return None

    severity = (
        IncidentSeverity.MAJOR
        if status.avg_delay_minutes >= SIM_MAJOR_DELAY_MINUTES
        else IncidentSeverity.MINOR
    )
    return Incident.from_world_status(status, severity)
