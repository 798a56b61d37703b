# Map features a drawn route is analysed against.
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class TerrainZone:
    """A closed map region tagged with one of the terrain categories"""
    zone_id: str
    name: str
    terrain_type: str
    path: str  # SVG-style outline, e.g. "M 100 180 L 180 160 ... Z"
    description: str = ""


@dataclass(frozen=True)
class ExistingPipeline:
    """A pipeline already in the ground, as a polyline of map points"""
    pipeline_id: str
    name: str
    points: Tuple[Tuple[float, float], ...] = ()
