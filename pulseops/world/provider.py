"""WorldStatusProvider: live feed first, simulation as the fallback."""

from __future__ import annotations

import logging

from pulseops.domain.snapshot import WorldStatus
from pulseops.external.http import UpstreamError
from pulseops.world.gtfs import GtfsRealtimeFeed
from pulseops.world.simulated import SimulatedWorld

logger = logging.getLogger(__name__)


class WorldStatusProvider:
    def __init__(self, simulation: SimulatedWorld, live: GtfsRealtimeFeed | None = None) -> None:
        self.simulation = simulation
        self._live = live

    async def current(self) -> WorldStatus:
        """Current corridor status; never raises for upstream failures."""
        if self._live is not None and self._live.configured:
            try:
                status = await self._live.fetch_status()
            except UpstreamError as exc:
                logger.warning("Live world status failed, falling back to simulation: %s", exc)
            else:
                if status is not None:
                    return status
                logger.debug("Live feed reported no delays, using simulation")
        return self.simulation.status()
