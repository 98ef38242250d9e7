"""Tests for automatic incident detection and the agent tick."""

from __future__ import annotations

import json
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from pulseops.config import settings
from pulseops.core.monitor import CorridorMonitor
from pulseops.domain.enums import DataSource, IncidentSeverity, IncidentStatus
from pulseops.domain.snapshot import WorldStatus
from pulseops.external.flow import IncidentContextFlow
from pulseops.external.http import UpstreamClient
from pulseops.knowledge.case_studies import CaseStudyLibrary
from pulseops.services.agent import PLANNER_MISSING_WARNING, PulseOpsAgent
from pulseops.services.auto_incidents import from_live_status, from_simulated_status
from pulseops.services.planner import IncidentPlanner
from pulseops.store.incident_store import IncidentStore
from pulseops.world.provider import WorldStatusProvider
from pulseops.world.simulated import SimulatedWorld


def _status(delay: float, trips: int = 0, source: str = "gtfs_realtime", route: str = "Red") -> WorldStatus:
    return WorldStatus(
        route_id=route,
        segment_start_stop_id="stop-100",
        segment_end_stop_id="stop-120",
        avg_delay_minutes=delay,
        trips_impacted=trips,
        riders_estimated=trips * 30,
        source=source,
    )


_PLAN = {
    "actions": [{
        "category": "alert_only",
        "summary": "Alert riders",
        "rider_alert_header": "Delays",
        "rider_alert_body": "Expect delays.",
        "ops_script": "Monitor.",
        "social_post": "Delays on Route 10.",
    }],
    "reasoning": "Minor disruption.",
}


def _planner(llm=None) -> IncidentPlanner:
    # Empty flow URL: planning uses the fallback context without any HTTP
    return IncidentPlanner(
        IncidentContextFlow("", UpstreamClient()),
        CaseStudyLibrary(settings.data_dir / "case_studies.json"),
        llm_factory=(lambda: llm) if llm is not None else None,
    )


def _agent(world: SimulatedWorld, store: IncidentStore, planner: IncidentPlanner):
    monitor = CorridorMonitor(window=timedelta(minutes=60))
    return PulseOpsAgent(WorldStatusProvider(world), monitor, store, planner), monitor


# ── Live path ────────────────────────────────────────────────────────────────


class TestLiveAutoIncidents:
    @pytest.mark.asyncio
    async def test_ignores_simulated_status(self) -> None:
        store = IncidentStore()
        assert await from_live_status(_status(20, source="simulated"), store) is None
        assert await store.all_incidents() == []

    @pytest.mark.asyncio
    async def test_below_thresholds(self) -> None:
        assert await from_live_status(_status(4.9, trips=2), IncidentStore()) is None

    @pytest.mark.asyncio
    async def test_moderate_delay(self) -> None:
        inc = await from_live_status(_status(5.0, trips=1), IncidentStore())
        assert inc.severity is IncidentSeverity.MODERATE
        assert inc.data_source is DataSource.GTFS_REALTIME

    @pytest.mark.asyncio
    async def test_many_trips_with_small_delay(self) -> None:
        inc = await from_live_status(_status(1.0, trips=3), IncidentStore())
        assert inc.severity is IncidentSeverity.MODERATE

    @pytest.mark.asyncio
    async def test_severe_delay_is_major(self) -> None:
        inc = await from_live_status(_status(8.0, trips=4), IncidentStore())
        assert inc.severity is IncidentSeverity.MAJOR

    @pytest.mark.asyncio
    async def test_one_open_live_incident_per_route(self) -> None:
        store = IncidentStore()
        first = await from_live_status(_status(9.0, trips=4), store)
        assert await from_live_status(_status(12.0, trips=5), store) is None

        await store.update(first.id, status=IncidentStatus.RESOLVED)
        assert await from_live_status(_status(12.0, trips=5), store) is not None
        assert len(await store.all_incidents()) == 2


# ── Simulation path ──────────────────────────────────────────────────────────


class TestSimulatedAutoIncidents:
    @pytest.mark.asyncio
    async def test_threshold_is_exclusive(self) -> None:
        assert await from_simulated_status(_status(10.0, source="simulated"), IncidentStore()) is None

    @pytest.mark.asyncio
    async def test_candidate_not_stored(self) -> None:
        store = IncidentStore()
        inc = await from_simulated_status(_status(12.0, trips=3, source="simulated"), store)
        assert inc.severity is IncidentSeverity.MINOR
        assert await store.all_incidents() == []

    @pytest.mark.asyncio
    async def test_major_at_twenty(self) -> None:
        inc = await from_simulated_status(_status(20.0, source="simulated"), IncidentStore())
        assert inc.severity is IncidentSeverity.MAJOR

    @pytest.mark.asyncio
    async def test_skips_when_segment_already_open(self) -> None:
        store = IncidentStore()
        await store.create(await from_simulated_status(_status(12.0, source="simulated"), store))
        assert await from_simulated_status(_status(14.0, source="simulated"), store) is None


# ── Agent tick ───────────────────────────────────────────────────────────────


class TestAgentTick:
    @pytest.mark.asyncio
    async def test_calm_tick_records_snapshot(self) -> None:
        store = IncidentStore()
        agent, monitor = _agent(SimulatedWorld(), store, _planner())
        result = await agent.tick()
        assert result["incident_created"] is None
        assert result["world_status"]["avg_delay_minutes"] == 0
        assert len(monitor.history()) == 1

    @pytest.mark.asyncio
    async def test_disruption_creates_and_plans(self) -> None:
        world = SimulatedWorld()
        world.trigger_disruption()
        llm = MagicMock()
        llm.invoke.return_value = SimpleNamespace(content=json.dumps(_PLAN))
        store = IncidentStore()
        agent, _ = _agent(world, store, _planner(llm))

        result = await agent.tick()
        # 15 decays to 14 before observation
        assert result["world_status"]["avg_delay_minutes"] == 14
        assert result["actions_planned"] == 1
        incident = await store.get(result["incident_created"])
        assert incident.severity is IncidentSeverity.MINOR
        assert len(await store.actions_for(incident.id)) == 1

        # Second tick sees the open incident and does nothing
        again = await agent.tick()
        assert again["incident_created"] is None
        assert llm.invoke.call_count == 1

    @pytest.mark.asyncio
    async def test_skips_creation_without_planner(self, monkeypatch) -> None:
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setattr(settings, "gemini_api_key", "")
        world = SimulatedWorld()
        world.trigger_disruption()
        store = IncidentStore()
        agent, _ = _agent(world, store, _planner())

        result = await agent.tick()
        assert result["incident_created"] is None
        assert result["warning"] == PLANNER_MISSING_WARNING
        assert await store.all_incidents() == []

    @pytest.mark.asyncio
    async def test_monitor_once_uses_live_path_only(self) -> None:
        world = SimulatedWorld()
        world.trigger_disruption()
        store = IncidentStore()
        agent, monitor = _agent(world, store, _planner())
        await agent.monitor_once()
        assert len(monitor.history()) == 1
        assert await store.all_incidents() == []
