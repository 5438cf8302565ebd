"""Obstacle store: the ordered, selectable collection behind the editor.

The store owns a list of ``Obstacle`` (list order is z-order; later entries
are drawn and hit-tested on top) and a single optional selection index.
All mutations fall into two groups:

  * **Structural**: ``add``, ``remove``, ``clear`` and ``mirror_all``
    grow or shrink the list. ``selected_index`` is kept either ``None`` or a
    valid index: removing the selected obstacle (or clearing) drops the
    selection, removing an earlier one shifts it down.
  * **Canonical**: ``move`` and ``rotate_selected`` change an obstacle's
    grid position or angle. Each builds a fresh ``Obstacle`` through
    ``_make``, which regenerates ``shapes`` from the canonical fields, and
    swaps it into the list only once it is known to be valid. A rejected
    move therefore leaves the stored object untouched (same identity, same
    vertices).

Uses ``shapes.py`` to generate geometry and ``geometry.py`` for the angle
and bounds math. Hit-testing lives in ``selection.py``.
"""

from __future__ import annotations

import math
from collections.abc import Iterator

from .geometry import normalize_angle, polygons_in_bounds, reflect_point
from .selection import pick_at
from .shapes import build_shapes, display_name, is_archetype
from .types import DEFAULT_ANCHOR, GridConfig, Obstacle

# direction -> (d_cells_x, d_cells_y); y grows downward
DIRECTIONS: dict[str, tuple[int, int]] = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}


def _as_grid_coord(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    if value != int(value):
        raise ValueError(f"{name} must be a whole cell index, got {value!r}")
    return int(value)


class ObstacleStore:
    def __init__(self, grid: GridConfig | None = None) -> None:
        self.grid = grid or GridConfig()
        self._obstacles: list[Obstacle] = []
        self._selected: int | None = None

    # -- queries --

    def __len__(self) -> int:
        return len(self._obstacles)

    def __iter__(self) -> Iterator[Obstacle]:
        return iter(self._obstacles)

    def __getitem__(self, index: int) -> Obstacle:
        return self._obstacles[index]

    @property
    def obstacles(self) -> list[Obstacle]:
        """Read-only view; mutate through the store's methods."""
        return list(self._obstacles)

    @property
    def selected_index(self) -> int | None:
        return self._selected

    def selected(self) -> Obstacle | None:
        if self._selected is None:
            return None
        return self._obstacles[self._selected]

    def labels(self) -> list[str]:
        """Per-type running labels, e.g. ``"Rhombus 2"`` for a 2nd rhombus."""
        counts: dict[str, int] = {}
        result = []
        for o in self._obstacles:
            counts[o.type] = counts.get(o.type, 0) + 1
            result.append(f"{display_name(o.type)} {counts[o.type]}")
        return result

    # -- construction --

    def _make(
        self,
        type_name: str,
        grid_x: int,
        grid_y: int,
        rotation_angle: float,
        anchor: str,
    ) -> Obstacle:
        cs = self.grid.cell_size
        return Obstacle(
            type=type_name,
            grid_x=grid_x,
            grid_y=grid_y,
            cell_size=cs,
            rotation_angle=rotation_angle,
            anchor=anchor,
            shapes=build_shapes(
                type_name, grid_x, grid_y, rotation_angle, anchor, cs
            ),
        )

    def add(
        self,
        type_name: str,
        grid_x: float,
        grid_y: float,
        anchor: str = DEFAULT_ANCHOR,
        rotation_angle: float = 0.0,
    ) -> int:
        """Append a new obstacle and return its index.

        Raises ValueError (and appends nothing) for an unknown archetype or
        a grid coordinate that is not a finite whole number.
        """
        if not is_archetype(type_name):
            raise ValueError(f"Unknown obstacle type: {type_name!r}")
        gx = _as_grid_coord("grid_x", grid_x)
        gy = _as_grid_coord("grid_y", grid_y)
        self._obstacles.append(
            self._make(
                type_name, gx, gy, normalize_angle(rotation_angle), anchor
            )
        )
        return len(self._obstacles) - 1

    def extend(self, obstacles: list[Obstacle]) -> None:
        """Append already-built obstacles (e.g. from a decoded document).

        Shapes are regenerated so nothing but the canonical fields is
        trusted.
        """
        for o in obstacles:
            self._obstacles.append(
                self._make(
                    o.type,
                    o.grid_x,
                    o.grid_y,
                    normalize_angle(o.rotation_angle),
                    o.anchor,
                )
            )

    # -- structural --

    def remove(self, index: int) -> None:
        if not 0 <= index < len(self._obstacles):
            raise IndexError(f"No obstacle at index {index}")
        del self._obstacles[index]
        if self._selected is None:
            return
        if self._selected == index:
            self._selected = None
        elif self._selected > index:
            self._selected -= 1

    def clear(self) -> None:
        self._obstacles.clear()
        self._selected = None

    def mirror_all(
        self, cx: float | None = None, cy: float | None = None
    ) -> int:
        """Append a point-reflected copy of every obstacle.

        Reflection through (cx, cy) is a 180 degree rotation about that
        point, so each copy gets the reflected anchor point and its angle
        advanced by 180. Defaults to the grid center. Returns the number of
        copies appended.
        """
        center = self.grid.center
        cx = center.x if cx is None else cx
        cy = center.y if cy is None else cy
        cs = self.grid.cell_size

        copies = []
        for o in self._obstacles:
            ap = o.anchor_point
            mx, my = reflect_point(ap.x, ap.y, cx, cy)
            gx = round(mx / cs)
            gy = round(my / cs)
            if not (
                math.isclose(gx * cs, mx, abs_tol=1e-9)
                and math.isclose(gy * cs, my, abs_tol=1e-9)
            ):
                raise ValueError(
                    f"Mirror center ({cx}, {cy}) moves obstacles off the grid"
                )
            copies.append(
                self._make(
                    o.type,
                    gx,
                    gy,
                    normalize_angle(o.rotation_angle + 180),
                    o.anchor,
                )
            )
        self._obstacles.extend(copies)
        return len(copies)

    # -- selection --

    def select(self, index: int | None) -> None:
        if index is not None and not 0 <= index < len(self._obstacles):
            raise IndexError(f"No obstacle at index {index}")
        self._selected = index

    def select_at(self, x: float, y: float) -> int | None:
        """Select the topmost obstacle under (x, y); a miss deselects."""
        self._selected = pick_at(self._obstacles, x, y)
        return self._selected

    # -- canonical --

    def rotate_selected(self, delta_deg: float) -> bool:
        """Rotate the selection about its anchor point. False if none.

        Raises ValueError for a non-finite delta.
        """
        if not math.isfinite(delta_deg):
            raise ValueError(f"delta_deg must be finite, got {delta_deg!r}")
        if self._selected is None:
            return False
        o = self._obstacles[self._selected]
        self._obstacles[self._selected] = self._make(
            o.type,
            o.grid_x,
            o.grid_y,
            normalize_angle(o.rotation_angle + delta_deg),
            o.anchor,
        )
        return True

    def move(self, index: int, d_cells_x: int, d_cells_y: int) -> bool:
        """Shift an obstacle by whole cells, all or nothing.

        The move is applied only if every vertex of every polygon stays in
        the grid's world bounds. Returns whether it was applied.
        """
        o = self._obstacles[index]
        moved = self._make(
            o.type,
            o.grid_x + d_cells_x,
            o.grid_y + d_cells_y,
            o.rotation_angle,
            o.anchor,
        )
        # Checked on the regenerated vertices (the ones that get stored),
        # which equal the old ones translated by whole cells.
        if not polygons_in_bounds(
            moved.shapes, self.grid.width, self.grid.height
        ):
            return False
        self._obstacles[index] = moved
        return True

    def move_selected(self, direction: str) -> bool:
        """One-cell nudge of the selection in ``up/down/left/right``."""
        if direction not in DIRECTIONS:
            raise ValueError(f"Unknown direction: {direction!r}")
        if self._selected is None:
            return False
        dx, dy = DIRECTIONS[direction]
        return self.move(self._selected, dx, dy)
