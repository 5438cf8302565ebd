"""Obstacle archetypes and the shape factory.

Every obstacle's geometry is a pure function of its canonical fields::

    build_shapes(type, grid_x, grid_y, rotation_angle, anchor, cell_size)

The factory builds the archetype's vertices in a local frame (apex or top
left corner at the origin, y pointing down), translates them so the anchor
vertex sits on the grid point ``(grid_x * cell_size, grid_y * cell_size)``,
then rotates every vertex about that anchor. Same inputs always give the
same floats, which is what makes save/reload reproduce the exact geometry.

All archetype sizes derive from one unit length, ``2 * cell_size * 0.9``
(two cells, shrunk slightly so neighbouring pieces don't touch).
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from .geometry import rotate_polygons, translate_polygons
from .types import Polygon

SIZE_FACTOR = 0.9

_TRIANGLE_ANCHORS = {"topLeft": 0, "bottomLeft": 1, "bottomRight": 2}
_QUAD_ANCHORS = {
    "topLeft": 0,
    "topRight": 1,
    "bottomRight": 2,
    "bottomLeft": 3,
}


def _unit(cell_size: float) -> float:
    return 2 * cell_size * SIZE_FACTOR


def _triangle(side: float) -> Polygon:
    h = math.sqrt(3) / 2 * side
    return [(0.0, 0.0), (-side / 2, h), (side / 2, h)]


def _small_triangle(cell_size: float) -> Polygon:
    return _triangle(_unit(cell_size))


def _big_triangle(cell_size: float) -> Polygon:
    return _triangle(2 * _unit(cell_size))


def _rhombus(cell_size: float) -> Polygon:
    s = _unit(cell_size)
    r = math.pi / 3
    return [
        (0.0, 0.0),
        (s, 0.0),
        (s + s * math.cos(r), s * math.sin(r)),
        (s * math.cos(r), s * math.sin(r)),
    ]


def _trapezoid(cell_size: float) -> Polygon:
    tw = _unit(cell_size)
    bw = 2 * tw
    h = math.sqrt(3) / 2 * tw
    return [
        (0.0, 0.0),
        (tw, 0.0),
        (tw + (bw - tw) / 2, h),
        (-(bw - tw) / 2, h),
    ]


@dataclass(frozen=True)
class Archetype:
    name: str
    display_name: str
    local_vertices: Callable[[float], Polygon]
    anchors: dict[str, int]

    def anchor_index(self, anchor: str) -> int:
        """Vertex index pinned to the grid point; unknown tags pin vertex 0."""
        return self.anchors.get(anchor, 0)


ARCHETYPES: dict[str, Archetype] = {
    a.name: a
    for a in (
        Archetype(
            "small_triangle",
            "Small triangle",
            _small_triangle,
            _TRIANGLE_ANCHORS,
        ),
        Archetype(
            "big_triangle", "Big triangle", _big_triangle, _TRIANGLE_ANCHORS
        ),
        Archetype("rhombus", "Rhombus", _rhombus, _QUAD_ANCHORS),
        Archetype("trapezoid", "Trapezoid", _trapezoid, _QUAD_ANCHORS),
    )
}


def is_archetype(type_name: object) -> bool:
    return isinstance(type_name, str) and type_name in ARCHETYPES


def anchor_tags(type_name: str) -> list[str]:
    """Anchor tags the archetype distinguishes, in vertex order."""
    arch = ARCHETYPES.get(type_name)
    if arch is None:
        return []
    return sorted(arch.anchors, key=arch.anchors.__getitem__)


def display_name(type_name: str) -> str:
    arch = ARCHETYPES.get(type_name)
    return arch.display_name if arch else "Obstacle"


def _align_to_grid(
    points: Polygon, gx: float, gy: float, anchor_index: int
) -> Polygon:
    ax, ay = points[anchor_index]
    [aligned] = translate_polygons([points], gx - ax, gy - ay)
    # x + (gx - x) can be off by an ulp; the anchor must be exact.
    aligned[anchor_index] = (gx, gy)
    return aligned


def build_shapes(
    type_name: str,
    grid_x: int,
    grid_y: int,
    rotation_angle: float,
    anchor: str,
    cell_size: float,
) -> list[Polygon]:
    """Generate world-space polygons for an obstacle's canonical fields.

    Returns ``[]`` for an unknown archetype.
    """
    arch = ARCHETYPES.get(type_name)
    if arch is None:
        return []
    idx = arch.anchor_index(anchor)
    pts = _align_to_grid(
        arch.local_vertices(cell_size),
        grid_x * cell_size,
        grid_y * cell_size,
        idx,
    )
    cx, cy = pts[idx]
    return rotate_polygons([pts], cx, cy, rotation_angle)
