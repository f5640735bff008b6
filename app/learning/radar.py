# app/learning/radar.py
import math
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from models import MAX_AXIS_SCORE, PROFICIENCY_AXES

Point = Tuple[float, float]

CANVAS_SIZE = 100.0
CENTER = CANVAS_SIZE / 2
RADIUS = CANVAS_SIZE * 0.4
LABEL_OFFSET = 10.0
GRID_LEVELS = 5

SCORE_RING_RADIUS = 16.0
SCORE_RING_CIRCUMFERENCE = 2 * math.pi * SCORE_RING_RADIUS


@dataclass(frozen=True)
class RadarAxis:
    label: str
    start: Point
    end: Point
    label_pos: Point


@dataclass(frozen=True)
class RadarChart:
    value_points: List[Point]
    grid_polygons: List[List[Point]]
    axes: List[RadarAxis]


def _angle(i: int, n: int) -> float:
    # axis 0 points straight up, the rest follow clockwise (y grows downward)
    return (math.pi * 2 * i) / n - math.pi / 2


def _polar(r: float, angle: float) -> Point:
    return (CENTER + r * math.cos(angle), CENTER + r * math.sin(angle))


def build_radar_chart(
    scores: Mapping[str, float],
    labels: Sequence[str] = PROFICIENCY_AXES,
) -> RadarChart:
    n = len(labels)

    value_points = []
    for i, label in enumerate(labels):
        value = scores.get(label) or 0.0
        value_points.append(_polar(RADIUS * (value / MAX_AXIS_SCORE), _angle(i, n)))

    grid_polygons = []
    for level in range(1, GRID_LEVELS + 1):
        r = RADIUS * (level / GRID_LEVELS)
        grid_polygons.append([_polar(r, _angle(j, n)) for j in range(n)])

    axes = [
        RadarAxis(
            label=label,
            start=(CENTER, CENTER),
            end=_polar(RADIUS, _angle(i, n)),
            label_pos=_polar(RADIUS + LABEL_OFFSET, _angle(i, n)),
        )
        for i, label in enumerate(labels)
    ]
    return RadarChart(value_points=value_points, grid_polygons=grid_polygons, axes=axes)


def score_ring_dash_offset(score: int, radius: Optional[float] = None) -> float:
    circumference = SCORE_RING_CIRCUMFERENCE if radius is None else 2 * math.pi * radius
    return circumference - (score / 100) * circumference


def format_points(points: Sequence[Point]) -> str:
    """SVG `points` attribute: 'x,y x,y ...'."""
    return " ".join(f"{x:.3f},{y:.3f}" for x, y in points)
