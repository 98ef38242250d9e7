"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

_DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseSettings):
    app_name: str = "pulseops"
    debug: bool = False
    log_level: str = "INFO"

    # Corridor history retention
    history_window_minutes: int = 60

    # Background agent loop
    agent_loop_enabled: bool = True
    agent_loop_interval_seconds: float = 30.0

    # Simulated corridor
    sim_route_id: str = "10"
    sim_segment_start_stop_id: str = "S2"
    sim_segment_end_stop_id: str = "S3"
    sim_disruption_delay_minutes: float = 15.0

    # GTFS-Realtime trip updates
    gtfs_rt_url: str = ""
    gtfs_rt_route_filter: str = ""
    gtfs_rt_segment_start_stop_id: str = "stop-100"
    gtfs_rt_segment_end_stop_id: str = "stop-120"
    gtfs_rt_riders_per_trip: int = 30

    # External context
    weather_api_url: str = ""
    weather_api_key: str = ""
    events_api_url: str = ""
    events_api_key: str = ""
    context_flow_url: str = "http://localhost:8000/fake-flow"
    http_timeout_seconds: float = 5.0

    # Gemini LLM planning
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = 0.2
    gemini_max_output_tokens: int = 2048
    planning_max_attempts: int = 2

    # Knowledge base files
    data_dir: Path = _DATA_DIR

    model_config = {"env_prefix": "PULSEOPS_"}


settings = Settings()
