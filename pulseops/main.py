"""pulseops: transit corridor monitoring and incident response copilot.

This is the application entry point.  create_app() wires the corridor
monitor, world-status providers, incident store, knowledge base, planner
and background agent together, then mounts the HTTP routers.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI

from pulseops.api.debug import create_debug_router
from pulseops.api.incidents import create_incidents_router
from pulseops.api.knowledge import create_knowledge_router
from pulseops.api.scenarios import create_scenarios_router
from pulseops.api.world import create_world_router
from pulseops.config import Settings, settings as default_settings
from pulseops.core.monitor import CorridorMonitor
from pulseops.external.context import ExternalContextService
from pulseops.external.flow import IncidentContextFlow
from pulseops.external.http import UpstreamClient
from pulseops.knowledge.case_studies import CaseStudyLibrary
from pulseops.knowledge.learning_log import LearningLog
from pulseops.knowledge.scenarios import ScenarioCatalog
from pulseops.knowledge.transit_brain import TransitBrain
from pulseops.planning.nodes import LLMFactory
from pulseops.services.agent import PulseOpsAgent
from pulseops.services.planner import IncidentPlanner
from pulseops.store.incident_store import IncidentStore
from pulseops.world.gtfs import GtfsRealtimeFeed
from pulseops.world.provider import WorldStatusProvider
from pulseops.world.simulated import SimulatedWorld

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=default_settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[Settings] = None,
    *,
    llm_factory: Optional[LLMFactory] = None,
    client: Optional[UpstreamClient] = None,
) -> FastAPI:
    """Build a fully wired application with fresh in-memory state.

    Args:
        config: Settings to use (defaults to the environment-loaded settings).
        llm_factory: Override for chat model construction (for testing).
        client: Override for the upstream HTTP client (for testing).
    """
    cfg = config or default_settings
    http = client or UpstreamClient(timeout=cfg.http_timeout_seconds)

    # ── World ────────────────────────────────────────────────────────────
    simulation = SimulatedWorld(
        route_id=cfg.sim_route_id,
        segment_start_stop_id=cfg.sim_segment_start_stop_id,
        segment_end_stop_id=cfg.sim_segment_end_stop_id,
        disruption_delay_minutes=cfg.sim_disruption_delay_minutes,
    )
    live = GtfsRealtimeFeed(
        cfg.gtfs_rt_url,
        http,
        route_filter=cfg.gtfs_rt_route_filter,
        segment_start_stop_id=cfg.gtfs_rt_segment_start_stop_id,
        segment_end_stop_id=cfg.gtfs_rt_segment_end_stop_id,
        riders_per_trip=cfg.gtfs_rt_riders_per_trip,
    )
    provider = WorldStatusProvider(simulation, live)
    monitor = CorridorMonitor(window=timedelta(minutes=cfg.history_window_minutes))

    # ── Knowledge ────────────────────────────────────────────────────────
    case_studies = CaseStudyLibrary(cfg.data_dir / "case_studies.json")
    brain = TransitBrain(cfg.data_dir / "transit_brain.json")
    scenarios = ScenarioCatalog(cfg.data_dir / "mbta_test_scenarios.json")
    learning_log = LearningLog(cfg.data_dir / "learning_log.json")

    # ── Incidents & planning ─────────────────────────────────────────────
    store = IncidentStore()
    planner = IncidentPlanner(
        IncidentContextFlow(cfg.context_flow_url, http),
        case_studies,
        llm_factory=llm_factory,
        max_attempts=cfg.planning_max_attempts,
    )
    agent = PulseOpsAgent(provider, monitor, store, planner)
    context_service = ExternalContextService(
        http,
        weather_url=cfg.weather_api_url,
        weather_key=cfg.weather_api_key,
        events_url=cfg.events_api_url,
        events_key=cfg.events_api_key,
    )

    # ── Lifespan ─────────────────────────────────────────────────────────
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if cfg.agent_loop_enabled:
            task = asyncio.create_task(agent.run_background_loop(cfg.agent_loop_interval_seconds))
        logger.info(
            "pulseops ready (live feed: %s, planner: %s)",
            "on" if live.configured else "off",
            "on" if planner.is_configured else "off",
        )
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

    # ── App ──────────────────────────────────────────────────────────────
    app = FastAPI(
        title=cfg.app_name,
        description="Transit corridor monitoring and incident response copilot",
        version="0.1.0",
        lifespan=lifespan,
    )

    # ── Routes ───────────────────────────────────────────────────────────
    app.include_router(create_incidents_router(store, planner, learning_log))
    app.include_router(create_debug_router(store, provider))
    app.include_router(create_world_router(provider, monitor, agent))
    app.include_router(create_knowledge_router(
        monitor, provider, context_service, brain, case_studies, learning_log,
    ))
    app.include_router(create_scenarios_router(scenarios, store, planner))

    app.state.store = store
    app.state.monitor = monitor
    app.state.simulation = simulation
    app.state.learning_log = learning_log
    return app


app = create_app()
