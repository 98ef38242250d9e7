"""What-if rider impact estimate for a hypothetical disruption."""

from __future__ import annotations

from pydantic import BaseModel, Field

HIGH_IMPACT_RIDER_MINUTES = 20_000
MODERATE_IMPACT_RIDER_MINUTES = 5_000


class SimulationInput(BaseModel):
    delay_minutes: float = Field(0.0, allow_inf_nan=False)
    riders_estimated: float = Field(0.0, allow_inf_nan=False)
    # Accepted for the client's benefit; the estimate is per-snapshot, not time-integrated
    duration_minutes: float = Field(0.0, allow_inf_nan=False)


class SimulationResult(BaseModel):
    rider_delay_minutes: float
    qualitative_impact: str


def simulate_impact(params: SimulationInput) -> SimulationResult:
    rider_delay_minutes = params.delay_minutes * params.riders_estimated

    impact = "low"
    if rider_delay_minutes > HIGH_IMPACT_RIDER_MINUTES:
        impact = "high"
    elif rider_delay_minutes > MODERATE_IMPACT_RIDER_MINUTES:
        impact = "moderate"

    return SimulationResult(rider_delay_minutes=rider_delay_minutes, qualitative_impact=impact)
