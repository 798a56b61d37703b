# Planar segment helpers for route drawing: orientation test, intersection and bounding boxes.
import math
import re
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

_NUMBER = re.compile(r"-?[\d.]+")


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Bounds:
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    def contains(self, point: Point) -> bool:
        return self.min_x <= point.x <= self.max_x and self.min_y <= point.y <= self.max_y


def ccw(a: Point, b: Point, c: Point) -> bool:
    """True when a -> b -> c turns counter-clockwise"""
    return (c.y - a.y) * (b.x - a.x) > (b.y - a.y) * (c.x - a.x)


def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point) -> bool:
    """Whether segment p1-p2 properly crosses segment p3-p4"""
    return ccw(p1, p3, p4) != ccw(p2, p3, p4) and ccw(p1, p2, p3) != ccw(p1, p2, p4)


def segment_length(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def path_bounds(path: Union[str, Sequence[Tuple[float, float]]]) -> Bounds:
    """Axis-aligned bounds of an SVG-style path string ("M x y L x y ... Z") or a vertex list"""
    if isinstance(path, str):
        coords = [float(n) for n in _NUMBER.findall(path)]
        xs, ys = coords[0::2], coords[1::2]
    else:
        xs = [float(x) for x, _ in path]
        ys = [float(y) for _, y in path]
    if not xs or len(xs) != len(ys):
        raise ValueError(f"path has no complete coordinate pairs: {path!r}")
    return Bounds(min(xs), max(xs), min(ys), max(ys))
