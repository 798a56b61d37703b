# Public entry points of the engine: evaluate, optimize, sensitivity and route analysis.
import functools
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from ..algorithms.local.scipy_solvers import solve_npv_breakeven_price
from ..algorithms.search import diameter_search
from ..algorithms.search.velocity_sizing import recommend_velocity_diameter
from ..algorithms.sensitivity import tornado
from ..data.providers.defaults import TexasMapProvider
from ..domain.models import (
    BreakevenPoint,
    CostPerTonne,
    DesignEvaluation,
    FinancialResult,
    LeveragePoint,
    LocationContext,
    ModelInputs,
    OptimizationResult,
    PipelineDesign,
    PipelineEvaluation,
    RouteStats,
    ScheduleAndFinance,
    SensitivityEntry,
    TerrainFactors,
    TerrainMix,
)
from ..domain.route.features import ExistingPipeline, TerrainZone
from ..evaluation import route, scenarios
from ..evaluation.pipeline import evaluate_design

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=1)
def compute_engineering_and_financials(design: PipelineDesign, finance: ScheduleAndFinance,
                                       location: LocationContext, terrain: TerrainMix,
                                       terrain_factors: TerrainFactors) -> PipelineEvaluation:
    """
    Full engineering, cost and financial evaluation at ``design.diameter``.

    Inputs are frozen models, so the last input/result pair is memoized.
    """
    evaluation = evaluate_design(design, finance, location, terrain, terrain_factors)
    breakeven = solve_npv_breakeven_price(design, finance, evaluation.costs)
    return evaluation.model_copy(update={"npv_breakeven_price": breakeven})


def optimize_diameter(design: PipelineDesign, finance: ScheduleAndFinance, location: LocationContext,
                      terrain: TerrainMix, terrain_factors: TerrainFactors,
                      map_fn: Callable = map) -> OptimizationResult:
    return diameter_search.optimize_diameter(design, finance, location, terrain, terrain_factors, map_fn=map_fn)


def analyze_sensitivity(financials: FinancialResult, finance: ScheduleAndFinance) -> List[SensitivityEntry]:
    return tornado.analyze_sensitivity(financials, finance)


def analyze_route(points: Sequence[Tuple[float, float]], zones: Optional[Sequence[TerrainZone]] = None,
                  pipelines: Optional[Sequence[ExistingPipeline]] = None) -> RouteStats:
    """Route statistics; zones and pipelines default to the demonstration map."""
    provider = TexasMapProvider()
    if zones is None:
        zones = provider.get_terrain_zones()
    if pipelines is None:
        pipelines = provider.get_existing_pipelines()
    return route.analyze_route(points, zones, pipelines)


def apply_route(inputs: ModelInputs, stats: RouteStats) -> ModelInputs:
    """Feed a measured route back in as the design length and terrain mix"""
    design = inputs.design.model_copy(update={"length": stats.total_miles})
    return inputs.model_copy(update={"design": design, "terrain": stats.terrain_mix})


def evaluate(inputs: ModelInputs, map_fn: Callable = map) -> DesignEvaluation:
    """
    Optimize, then evaluate the diameter the mode selects.

    In "override" mode the design's own diameter is evaluated and the optimizer's
    choice is still reported for comparison.
    """
    optimization = optimize_diameter(inputs.design, inputs.finance, inputs.location, inputs.terrain,
                                     inputs.terrain_factors, map_fn=map_fn)
    if inputs.diameter_mode == "auto":
        selected = optimization.optimal_diameter
    else:
        selected = inputs.design.diameter
    design = inputs.design.model_copy(update={"diameter": selected})

    evaluation = compute_engineering_and_financials(design, inputs.finance, inputs.location, inputs.terrain,
                                                    inputs.terrain_factors)
    return DesignEvaluation(
        mode=inputs.diameter_mode,
        selected_diameter=selected,
        optimal_diameter=optimization.optimal_diameter,
        velocity_based_diameter=recommend_velocity_diameter(inputs.design.mass_flow_rate),
        evaluation=evaluation,
        optimization=optimization,
    )


def cost_per_tonne(evaluation: PipelineEvaluation, design: PipelineDesign,
                   finance: ScheduleAndFinance) -> CostPerTonne:
    return scenarios.cost_per_tonne(evaluation.financials, design, finance)


def breakeven_by_distance(evaluation: PipelineEvaluation, design: PipelineDesign,
                          finance: ScheduleAndFinance) -> List[BreakevenPoint]:
    return scenarios.breakeven_by_distance(evaluation.financials, design, finance)


def leverage_curve(evaluation: PipelineEvaluation, finance: ScheduleAndFinance) -> List[LeveragePoint]:
    return scenarios.leverage_curve(evaluation.financials, finance)
