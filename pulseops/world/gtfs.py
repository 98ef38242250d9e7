"""GTFS-Realtime trip-update feed → corridor WorldStatus.

Delays are aggregated across all delayed trips in the feed:

    - trips are de-duplicated by trip_id (``unknown-<entity id>`` when absent)
    - per stop_time_update, arrival.delay wins over departure.delay
    - negative (early) delays count as zero
    - a trip counts as delayed when its summed delay is positive

    avg_delay_minutes = total_delay_seconds / delayed_trips / 60  (1 dp)
    riders_estimated  = delayed_trips * riders_per_trip

A feed with no delayed trips yields None so the caller falls back to the
simulation.
"""

from __future__ import annotations

import logging
from typing import Optional

from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from pulseops.domain.enums import DataSource
from pulseops.domain.snapshot import WorldStatus
from pulseops.external.http import MalformedPayloadError, UpstreamClient
from pulseops.foundation.numbers import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_ID = "gtfs-route"


class TripDelayAggregate:
    """Raw totals extracted from one feed message."""

    __slots__ = ("delayed_trips", "total_delay_seconds")

    def __init__(self, delayed_trips: int = 0, total_delay_seconds: int = 0) -> None:
        self.delayed_trips = delayed_trips
        self.total_delay_seconds = total_delay_seconds


def decode_feed(url: str, content: bytes) -> gtfs_realtime_pb2.FeedMessage:
    feed = gtfs_realtime_pb2.FeedMessage()
    try:
        feed.ParseFromString(content)
    except DecodeError as exc:
        raise MalformedPayloadError(url, f"not a GTFS-RT FeedMessage: {exc}") from exc
    return feed


def _stop_delay_seconds(stu) -> Optional[int]:
    if stu.HasField("arrival") and stu.arrival.HasField("delay"):
        return stu.arrival.delay
    if stu.HasField("departure") and stu.departure.HasField("delay"):
        return stu.departure.delay
    return None


def aggregate_trip_delays(
    feed: gtfs_realtime_pb2.FeedMessage,
    route_filter: str = "",
) -> TripDelayAggregate:
    """Sum positive stop delays per trip across the feed."""
    result = TripDelayAggregate()
    seen_trips: set[str] = set()

    for entity in feed.entity:
        if not entity.HasField("trip_update"):
            continue
        trip = entity.trip_update.trip

        # Trips without a route_id are kept even when filtering
        if route_filter and trip.route_id and trip.route_id != route_filter:
            continue

        trip_id = trip.trip_id or f"unknown-{entity.id}"
        if trip_id in seen_trips:
            continue

        trip_delay = 0
        for stu in entity.trip_update.stop_time_update:
            delay = _stop_delay_seconds(stu)
            if delay is None:
                continue
            trip_delay += max(delay, 0)

        if trip_delay > 0:
            seen_trips.add(trip_id)
            result.delayed_trips += 1
            result.total_delay_seconds += trip_delay

    return result


class GtfsRealtimeFeed:
    """Live world-status source backed by a GTFS-RT TripUpdates URL."""

    def __init__(
        self,
        url: str,
        client: UpstreamClient,
        route_filter: str = "",
        segment_start_stop_id: str = "stop-100",
        segment_end_stop_id: str = "stop-120",
        riders_per_trip: int = 30,
    ) -> None:
        self._url = url
        self._client = client
        self._route_filter = route_filter
        self._segment_start = segment_start_stop_id
        self._segment_end = segment_end_stop_id
        self._riders_per_trip = riders_per_trip

    @property
    def configured(self) -> bool:
        return bool(self._url)

    async def fetch_status(self) -> Optional[WorldStatus]:
        """Fetch, decode and aggregate the feed.

        Returns None when unconfigured or when no trip is delayed.

        Raises:
            UpstreamError: If the feed is unreachable or undecodable.
        """
        if not self._url:
            return None

        logger.debug("Fetching GTFS-RT feed from %s", self._url)
        content = await self._client.get_bytes(self._url)
        feed = decode_feed(self._url, content)
        return self.status_from_feed(feed)

    def status_from_feed(self, feed: gtfs_realtime_pb2.FeedMessage) -> Optional[WorldStatus]:
        totals = aggregate_trip_delays(feed, self._route_filter)
        logger.info(
            "GTFS-RT feed: %d entities, %d delayed trips, %ds total delay",
            len(feed.entity), totals.delayed_trips, totals.total_delay_seconds,
        )
        if totals.delayed_trips == 0 or totals.total_delay_seconds == 0:
            return None

        avg_delay = totals.total_delay_seconds / totals.delayed_trips / 60
        return WorldStatus(
            route_id=self._route_filter or DEFAULT_ROUTE_ID,
            segment_start_stop_id=self._segment_start,
            segment_end_stop_id=self._segment_end,
            avg_delay_minutes=round_half_up(avg_delay, 1),
            trips_impacted=totals.delayed_trips,
            riders_estimated=totals.delayed_trips * self._riders_per_trip,
            source=DataSource.GTFS_REALTIME,
        )
