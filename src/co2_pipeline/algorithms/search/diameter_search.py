# Exhaustive NPV search over the standard line-pipe diameters.
import functools
import logging
from typing import Callable, Iterable, Sequence

from ...domain.co2.specifications import STANDARD_DIAMETERS
from ...domain.models import (
    CandidateEvaluation,
    LocationContext,
    OptimizationResult,
    PipelineDesign,
    ScheduleAndFinance,
    TerrainFactors,
    TerrainMix,
)
from ...evaluation.pipeline import evaluate_design

logger = logging.getLogger(__name__)


def evaluate_candidate(diameter: float, design: PipelineDesign, finance: ScheduleAndFinance,
                       location: LocationContext, terrain: TerrainMix,
                       terrain_factors: TerrainFactors) -> CandidateEvaluation:
    candidate = design.model_copy(update={"diameter": diameter})
    evaluation = evaluate_design(candidate, finance, location, terrain, terrain_factors)
    return CandidateEvaluation(diameter=diameter, feasible=evaluation.engineering.feasible, evaluation=evaluation)


def select_optimal(candidates: Sequence[CandidateEvaluation], fallback: float):
    """
    Highest project NPV among velocity-feasible candidates.

    Ties keep the first candidate in the given order. Returns (diameter, used_fallback).
    """
    best = None
    for candidate in candidates:
        if candidate.feasible and (best is None or candidate.project_npv > best.project_npv):
            best = candidate
    if best is None:
        return fallback, True
    return best.diameter, False


def optimize_diameter(design: PipelineDesign, finance: ScheduleAndFinance, location: LocationContext,
                      terrain: TerrainMix, terrain_factors: TerrainFactors,
                      diameters: Iterable[float] = STANDARD_DIAMETERS,
                      map_fn: Callable = map) -> OptimizationResult:
    """
    Evaluate every diameter in full and pick the NPV-maximizing feasible one.

    ``design.diameter`` is ignored. ``map_fn`` may be an executor's ``map``;
    candidates are reduced in diameter order, whatever order they finish in.
    Without a feasible diameter the largest one is returned.
    """
    diameters = sorted(diameters)
    evaluate = functools.partial(evaluate_candidate, design=design, finance=finance, location=location,
                                 terrain=terrain, terrain_factors=terrain_factors)
    candidates = sorted(map_fn(evaluate, diameters), key=lambda c: c.diameter)

    optimal_diameter, used_fallback = select_optimal(candidates, fallback=diameters[-1])
    if used_fallback:
        logger.warning("No diameter keeps velocity in range, falling back to %.3f in", optimal_diameter)
    else:
        logger.info("NPV-optimal diameter: %.3f in", optimal_diameter)

    candidates = tuple(
        c.model_copy(update={"is_optimal": c.diameter == optimal_diameter}) for c in candidates
    )
    return OptimizationResult(candidates=candidates, optimal_diameter=optimal_diameter,
                              used_fallback=used_fallback)
