"""Data types matching the obstacle map JSON schema."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

Polygon = list[tuple[float, float]]

DEFAULT_CELL_SIZE = 30
DEFAULT_COLS = 16
DEFAULT_ROWS = 36
DEFAULT_ANCHOR = "topLeft"


@dataclass(frozen=True)
class GridConfig:
    cell_size: float = DEFAULT_CELL_SIZE
    cols: int = DEFAULT_COLS
    rows: int = DEFAULT_ROWS

    def __post_init__(self) -> None:
        if not (
            isinstance(self.cell_size, (int, float))
            and math.isfinite(self.cell_size)
            and self.cell_size > 0
        ):
            raise ValueError(f"cell_size must be positive: {self.cell_size!r}")
        for name in ("cols", "rows"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
                raise ValueError(f"{name} must be a positive integer: {v!r}")

    @property
    def width(self) -> float:
        return self.cols * self.cell_size

    @property
    def height(self) -> float:
        return self.rows * self.cell_size

    @property
    def center(self) -> Point:
        return Point(self.width / 2, self.height / 2)

    @staticmethod
    def from_dict(d: dict | None) -> GridConfig:
        if not d:
            return GridConfig()
        return GridConfig(
            cell_size=d.get("cell_size", DEFAULT_CELL_SIZE),
            cols=d.get("cols", DEFAULT_COLS),
            rows=d.get("rows", DEFAULT_ROWS),
        )

    def to_dict(self) -> dict:
        return {
            "cell_size": self.cell_size,
            "cols": self.cols,
            "rows": self.rows,
        }


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    @staticmethod
    def from_dict(d: dict) -> Point:
        return Point(x=d["x"], y=d["y"])

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass
class Obstacle:
    """A placed obstacle.

    ``type``, ``grid_x``/``grid_y``, ``rotation_angle`` and ``anchor`` are
    the canonical fields. ``shapes`` is derived from them by the shape
    factory and is replaced wholesale whenever a canonical field changes.
    """

    type: str
    grid_x: int
    grid_y: int
    cell_size: float
    rotation_angle: float = 0.0
    anchor: str = DEFAULT_ANCHOR
    shapes: list[Polygon] = field(default_factory=list)

    @property
    def anchor_point(self) -> Point:
        cs = self.cell_size
        return Point(self.grid_x * cs, self.grid_y * cs)

    def to_record(self) -> ObstacleRecord:
        return ObstacleRecord(
            type=self.type,
            anchor_point=self.anchor_point,
            rotation_angle=self.rotation_angle,
            anchor=self.anchor,
        )


@dataclass
class ObstacleRecord:
    """Canonical (persisted) form of an obstacle. Never carries vertices."""

    type: str
    anchor_point: Point
    rotation_angle: float = 0.0
    anchor: str = DEFAULT_ANCHOR

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "anchorPoint": self.anchor_point.to_dict(),
            "rotationAngle": self.rotation_angle,
            "anchor": self.anchor,
        }


@dataclass
class MapDocument:
    map_name: str
    created_at: str
    obstacles: list[ObstacleRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "mapName": self.map_name,
            "createdAt": self.created_at,
            "obstacles": [o.to_dict() for o in self.obstacles],
        }
