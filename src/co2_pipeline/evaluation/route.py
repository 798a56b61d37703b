# Turns a drawn route into length, terrain mix and existing-pipeline crossings.
import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from ..algorithms.geometry.segments import Point, midpoint, path_bounds, segment_length, segments_intersect
from ..domain.models import PipelineCrossing, RouteStats, TerrainMix
from ..domain.route.features import ExistingPipeline, TerrainZone
from ..exceptions import InvalidInputError

logger = logging.getLogger(__name__)

MILES_PER_PIXEL = 800 / 500  # ~500 px across Texas
CROSSING_LENGTH_MILES = 0.19  # ~1000 ft of bore per crossing
MAX_ROW_FRACTION = 0.15


def _zone_membership(point: Point, zones: Iterable[TerrainZone]) -> List[str]:
    # Bounding-box containment, not true polygon containment
    return [zone.terrain_type for zone in zones if path_bounds(zone.path).contains(point)]


def find_crossings(points: Sequence[Point], pipelines: Iterable[ExistingPipeline]) -> List[PipelineCrossing]:
    """Crossings of the route with existing pipelines, one per crossed pipeline segment"""
    crossings = {}
    for i in range(1, len(points)):
        start, end = points[i - 1], points[i]
        for pipeline in pipelines:
            for j in range(1, len(pipeline.points)):
                key = (pipeline.pipeline_id, j)
                if key in crossings:
                    continue
                pipe_start, pipe_end = Point(*pipeline.points[j - 1]), Point(*pipeline.points[j])
                if segments_intersect(start, end, pipe_start, pipe_end):
                    center = midpoint(start, end)
                    crossings[key] = PipelineCrossing(
                        pipeline_id=pipeline.pipeline_id,
                        pipeline_name=pipeline.name,
                        pipeline_segment=j,
                        route_segment=i,
                        location=(center.x, center.y),
                    )
    return list(crossings.values())


def analyze_route(points: Sequence[Tuple[float, float]], zones: Sequence[TerrainZone],
                  pipelines: Sequence[ExistingPipeline], miles_per_pixel: float = MILES_PER_PIXEL,
                  crossing_length_miles: float = CROSSING_LENGTH_MILES,
                  max_row_fraction: float = MAX_ROW_FRACTION) -> RouteStats:
    """
    Measure a drawn route.

    Each segment's length is credited to every zone whose bounding box holds the
    segment midpoint; distance in no zone counts as flat/dry. Crossings add a
    synthetic existing-ROW share (bore length per crossing, capped) and the other
    shares shrink proportionally so the mix still sums to one.
    """
    if len(points) < 2:
        raise InvalidInputError("route points", "a route needs at least two points")
    route = [Point(*p) for p in points]

    total_pixels = 0.0
    crossed: Dict[str, float] = {}
    for i in range(1, len(route)):
        length = segment_length(route[i - 1], route[i])
        total_pixels += length
        for terrain_type in _zone_membership(midpoint(route[i - 1], route[i]), zones):
            crossed[terrain_type] = crossed.get(terrain_type, 0.0) + length
    if total_pixels <= 0:
        raise InvalidInputError("route length", "route points are all coincident")

    total_miles = total_pixels * miles_per_pixel

    fractions = {terrain_type: distance / total_pixels for terrain_type, distance in crossed.items()}
    assigned = sum(crossed.values())
    if assigned < total_pixels:
        fractions["flat_dry"] = fractions.get("flat_dry", 0.0) + (total_pixels - assigned) / total_pixels

    crossings = find_crossings(route, pipelines)
    logger.debug("Route of %.1f mi crosses %d existing pipeline segments", total_miles, len(crossings))

    row_fraction = min(len(crossings) * crossing_length_miles / total_miles, max_row_fraction)
    if row_fraction > 0:
        fractions = {key: share * (1 - row_fraction) for key, share in fractions.items() if key != "existing_row"}
        fractions["existing_row"] = row_fraction

    return RouteStats(
        total_pixels=total_pixels,
        total_miles=total_miles,
        terrain_fractions=fractions,
        terrain_mix=TerrainMix.from_shares(fractions),
        crossings=tuple(crossings),
        existing_row_fraction=row_fraction,
    )
