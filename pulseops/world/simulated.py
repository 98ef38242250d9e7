"""Simulated corridor used when no live feed is configured or reachable.

The simulation is a single delay counter: a disruption sets it high and
each agent tick decays it by a minute until the corridor has recovered.
"""

from __future__ import annotations

import logging

from pulseops.domain.enums import DataSource
from pulseops.domain.snapshot import WorldStatus

logger = logging.getLogger(__name__)

# Trips and riders reported while the simulated corridor is delayed
_DISRUPTED_TRIPS = 3
_DISRUPTED_RIDERS = 90


class SimulatedWorld:
    def __init__(
        self,
        route_id: str = "10",
        segment_start_stop_id: str = "S2",
        segment_end_stop_id: str = "S3",
        disruption_delay_minutes: float = 15.0,
    ) -> None:
        self._route_id = route_id
        self._segment_start = segment_start_stop_id
        self._segment_end = segment_end_stop_id
        self._disruption_delay = disruption_delay_minutes
        self.current_delay: float = 0.0

    def trigger_disruption(self) -> None:
        """Simulate a sudden blockage on the corridor."""
        self.current_delay = self._disruption_delay
        logger.info("Disruption triggered: delay set to %.0f minutes", self.current_delay)

    def decay(self) -> None:
        """Recover by one minute of delay (never below zero)."""
        if self.current_delay > 0:
            self.current_delay = max(0.0, self.current_delay - 1)
            logger.info("Delay decaying, now %.0f minutes", self.current_delay)

    def status(self) -> WorldStatus:
        delayed = self.current_delay > 0
        return WorldStatus(
            route_id=self._route_id,
            segment_start_stop_id=self._segment_start,
            segment_end_stop_id=self._segment_end,
            avg_delay_minutes=self.current_delay,
            trips_impacted=_DISRUPTED_TRIPS if delayed else 0,
            riders_estimated=_DISRUPTED_RIDERS if delayed else 0,
            source=DataSource.SIMULATED,
        )
