"""Point and polygon math shared by the shape factory and the obstacle store.

Everything here is pure: functions take coordinates and return new
coordinates, never mutating their inputs. Points are plain ``(x, y)``
tuples in world units (y grows downward, as on a canvas); polygons are
lists of such tuples, implicitly closed (the last vertex connects back to
the first).

  * ``rotate_point`` / ``rotate_polygons``: rotation about an arbitrary
    center, used to pose a freshly built archetype about its anchor.
  * ``translate_polygons``: rigid shift, used to land an anchor vertex on
    its grid point.
  * ``reflect_point``: point reflection through a center, the mirror-copy
    transform.
  * ``point_in_polygon``: even-odd ray casting for hit-testing.
  * ``polygons_in_bounds``: the bounds check behind grid moves,
    vectorized over every vertex of every polygon.
  * ``normalize_angle``: folds accumulated rotation into [0, 360).
"""

from __future__ import annotations

import math

import numpy as np

from .types import Polygon


def normalize_angle(angle_deg: float) -> float:
    """Map any finite angle to [0, 360)."""
    r = math.fmod(angle_deg, 360.0)
    if r < 0:
        r += 360.0
    # Tiny negatives can round up to exactly 360.0; also folds -0.0.
    if r >= 360.0 or r == 0.0:
        return 0.0
    return r


def rotate_point(
    px: float,
    py: float,
    cx: float,
    cy: float,
    angle_deg: float,
) -> tuple[float, float]:
    """Rotate (px, py) about (cx, cy) by angle_deg degrees."""
    rad = angle_deg * math.pi / 180
    cos_r = math.cos(rad)
    sin_r = math.sin(rad)
    dx = px - cx
    dy = py - cy
    return (cx + dx * cos_r - dy * sin_r, cy + dx * sin_r + dy * cos_r)


def rotate_polygons(
    polygons: list[Polygon], cx: float, cy: float, angle_deg: float
) -> list[Polygon]:
    return [
        [rotate_point(x, y, cx, cy, angle_deg) for x, y in poly]
        for poly in polygons
    ]


def translate_polygons(
    polygons: list[Polygon], dx: float, dy: float
) -> list[Polygon]:
    return [[(x + dx, y + dy) for x, y in poly] for poly in polygons]


def reflect_point(
    px: float, py: float, cx: float, cy: float
) -> tuple[float, float]:
    """Point reflection through (cx, cy): a 180 degree rotation."""
    return (2 * cx - px, 2 * cy - py)


def polygons_in_bounds(
    polygons: list[Polygon],
    width: float,
    height: float,
) -> bool:
    """True if every vertex lies in [0, width] x [0, height].

    Bounds are inclusive: a vertex exactly on the edge is inside.
    """
    pts = [p for poly in polygons for p in poly]
    if not pts:
        return True
    arr = np.asarray(pts, dtype=np.float64)
    xs = arr[:, 0]
    ys = arr[:, 1]
    return bool(
        np.all((xs >= 0) & (xs <= width) & (ys >= 0) & (ys <= height))
    )


def point_in_polygon(px: float, py: float, vertices: Polygon) -> bool:
    """Ray-casting point-in-polygon test (even-odd rule)."""
    n = len(vertices)
    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        if (yi > py) != (yj > py):
            intersect_x = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < intersect_x:
                inside = not inside
        j = i
    return inside
