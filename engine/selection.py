"""Hit-testing of world points against placed obstacles."""

from __future__ import annotations

from .geometry import point_in_polygon
from .types import Obstacle


def _hits(obstacle: Obstacle, x: float, y: float) -> bool:
    return any(point_in_polygon(x, y, poly) for poly in obstacle.shapes)


def pick_at(obstacles: list[Obstacle], x: float, y: float) -> int | None:
    """Index of the topmost obstacle containing (x, y), or None.

    Iterates in reverse order so later (topmost) obstacles win.
    """
    for idx in range(len(obstacles) - 1, -1, -1):
        if _hits(obstacles[idx], x, y):
            return idx
    return None


def is_on_selected(
    obstacles: list[Obstacle],
    selected_index: int | None,
    x: float,
    y: float,
) -> bool:
    """True if (x, y) lies on the selected obstacle.

    Gates drag start: pressing on empty canvas must not drag the previous
    selection.
    """
    if selected_index is None:
        return False
    return _hits(obstacles[selected_index], x, y)
