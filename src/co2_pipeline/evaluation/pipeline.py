# Runs hydraulics -> costs -> financials for one fully specified design.
from ..domain.models import (
    LocationContext,
    PipelineDesign,
    PipelineEvaluation,
    ScheduleAndFinance,
    TerrainFactors,
    TerrainMix,
)
from .costs import evaluate_costs
from .financials import evaluate_financials
from .hydraulics import evaluate_hydraulics


def evaluate_design(design: PipelineDesign, finance: ScheduleAndFinance, location: LocationContext,
                    terrain: TerrainMix, terrain_factors: TerrainFactors) -> PipelineEvaluation:
    engineering = evaluate_hydraulics(design)
    costs = evaluate_costs(design, engineering, finance, location, terrain, terrain_factors)
    financials = evaluate_financials(design, finance, costs)
    return PipelineEvaluation(engineering=engineering, costs=costs, financials=financials)
