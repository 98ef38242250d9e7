"""Tests for the domain models: world-status snapshots and incidents."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pulseops.domain.enums import DataSource, IncidentSeverity, IncidentStatus
from pulseops.domain.incident import Incident, PlanResult
from pulseops.domain.snapshot import TimedWorldStatus, WorldStatus


def _status(**overrides) -> WorldStatus:
    fields = {
        "route_id": "10",
        "segment_start_stop_id": "S2",
        "segment_end_stop_id": "S3",
        "avg_delay_minutes": 4.5,
        "trips_impacted": 3,
        "riders_estimated": 90,
        "source": "simulated",
    }
    fields.update(overrides)
    return WorldStatus(**fields)


# ── WorldStatus ──────────────────────────────────────────────────────────────


class TestWorldStatus:
    def test_valid_status(self) -> None:
        s = _status()
        assert s.source is DataSource.SIMULATED
        assert s.avg_delay_minutes == 4.5

    def test_missing_numbers_default_to_zero(self) -> None:
        s = WorldStatus(
            route_id="10",
            segment_start_stop_id="S2",
            segment_end_stop_id="S3",
            avg_delay_minutes=None,
            trips_impacted="",
            source="gtfs_realtime",
        )
        assert s.avg_delay_minutes == 0.0
        assert s.trips_impacted == 0
        assert s.riders_estimated == 0

    def test_non_finite_delay_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _status(avg_delay_minutes=float("nan"))
        with pytest.raises(ValidationError):
            _status(avg_delay_minutes=float("inf"))

    def test_non_numeric_delay_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _status(avg_delay_minutes="late")

    def test_empty_route_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _status(route_id="")

    def test_unknown_source_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _status(source="mbta_v3_api")

    def test_negative_values_accepted(self) -> None:
        s = _status(avg_delay_minutes=-2.0, riders_estimated=-5)
        assert s.avg_delay_minutes == -2.0
        assert s.riders_estimated == -5

    def test_status_is_frozen(self) -> None:
        s = _status()
        with pytest.raises(ValidationError):
            s.avg_delay_minutes = 99.0

    def test_stamp_keeps_fields(self) -> None:
        timed = TimedWorldStatus.stamp(_status(), 1_700_000_000_000)
        assert timed.timestamp == 1_700_000_000_000
        assert timed.route_id == "10"
        assert timed.riders_estimated == 90


# ── Incident ─────────────────────────────────────────────────────────────────


class TestIncident:
    def test_from_world_status(self) -> None:
        inc = Incident.from_world_status(_status(avg_delay_minutes=12), IncidentSeverity.MINOR)
        assert inc.status is IncidentStatus.OPEN
        assert inc.route_ids == ["10"]
        assert inc.avg_delay_minutes == 12
        assert inc.data_source is DataSource.SIMULATED
        assert inc.id.startswith("incident-")

    def test_ids_are_unique(self) -> None:
        a = Incident.from_world_status(_status(), IncidentSeverity.MINOR)
        b = Incident.from_world_status(_status(), IncidentSeverity.MINOR)
        assert a.id != b.id

    def test_requires_a_route(self) -> None:
        with pytest.raises(ValidationError):
            Incident(
                severity="minor",
                route_ids=[],
                segment_start_stop_id="S2",
                segment_end_stop_id="S3",
            )

    def test_is_open_on_route(self) -> None:
        inc = Incident.from_world_status(_status(), IncidentSeverity.MAJOR)
        assert inc.is_open_on_route("10")
        assert not inc.is_open_on_route("Red")
        resolved = inc.model_copy(update={"status": IncidentStatus.RESOLVED})
        assert not resolved.is_open_on_route("10")


class TestPlanResult:
    def test_rejects_unknown_category(self) -> None:
        with pytest.raises(ValidationError):
            PlanResult.model_validate({
                "actions": [{
                    "category": "teleport",
                    "summary": "s",
                    "rider_alert_header": "h",
                    "rider_alert_body": "b",
                    "ops_script": "o",
                    "social_post": "p",
                }],
                "reasoning": "because",
            })

    def test_requires_reasoning(self) -> None:
        with pytest.raises(ValidationError):
            PlanResult.model_validate({"actions": [], "reasoning": ""})
