"""Map document encoding and decoding.

A map document stores only each obstacle's canonical fields::

    {"mapName": ..., "createdAt": ...,
     "obstacles": [{"type": ..., "anchorPoint": {"x": ..., "y": ...},
                    "rotationAngle": ..., "anchor": ...}]}

Vertices are never written. On load every obstacle's shapes are rebuilt by
the shape factory, so a loaded map is identical to one built by fresh
add/rotate calls with the same fields, and vertex data found in older
documents (which stored raw ``shapes``) is ignored.

Failures come at two granularities:

  * A document without an ``obstacles`` list is rejected as a whole with
    ``ValueError``; callers keep their current state.
  * A single bad entry (not an object, unknown ``type``, missing or
    non-numeric ``anchorPoint``) is skipped and its index recorded in
    ``LoadedMap.skipped``; the rest still load.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .geometry import normalize_angle
from .obstacles import ObstacleStore
from .shapes import build_shapes, is_archetype
from .types import DEFAULT_ANCHOR, GridConfig, MapDocument, Obstacle


@dataclass
class LoadedMap:
    map_name: str | None
    created_at: str | None
    obstacles: list[Obstacle] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)


def _now_iso() -> str:
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _is_number(v: object) -> bool:
    return (
        isinstance(v, (int, float))
        and not isinstance(v, bool)
        and math.isfinite(v)
    )


def _round_half_up(v: float) -> int:
    return math.floor(v + 0.5)


def to_document(
    store: ObstacleStore, map_name: str, created_at: str | None = None
) -> dict:
    """Encode the store's obstacles as a JSON-compatible map document.

    Raises ValueError for an empty map name.
    """
    if not isinstance(map_name, str) or not map_name.strip():
        raise ValueError("Map name is required")
    doc = MapDocument(
        map_name=map_name.strip(),
        created_at=created_at or _now_iso(),
        obstacles=[o.to_record() for o in store],
    )
    return doc.to_dict()


def _decode_obstacle(entry: object, grid: GridConfig) -> Obstacle | None:
    if not isinstance(entry, dict):
        return None
    type_name = entry.get("type")
    if not is_archetype(type_name):
        return None
    ap = entry.get("anchorPoint")
    if not isinstance(ap, dict):
        return None
    x = ap.get("x")
    y = ap.get("y")
    if not (_is_number(x) and _is_number(y)):
        return None

    raw_angle = entry.get("rotationAngle", 0)
    angle = normalize_angle(raw_angle) if _is_number(raw_angle) else 0.0
    anchor = entry.get("anchor") or DEFAULT_ANCHOR
    if not isinstance(anchor, str):
        anchor = DEFAULT_ANCHOR

    cs = grid.cell_size
    # Small cell sizes can push a huge but finite anchor past float range.
    if not (math.isfinite(x / cs) and math.isfinite(y / cs)):
        return None
    # Anchor points should already be multiples of the cell size; snap
    # anything else to the nearest grid point.
    gx = _round_half_up(x / cs)
    gy = _round_half_up(y / cs)
    return Obstacle(
        type=type_name,
        grid_x=gx,
        grid_y=gy,
        cell_size=cs,
        rotation_angle=angle,
        anchor=anchor,
        shapes=build_shapes(type_name, gx, gy, angle, anchor, cs),
    )


def from_document(doc: object, grid: GridConfig) -> LoadedMap:
    """Decode a map document, regenerating every obstacle's geometry.

    Raises ValueError if the document has no ``obstacles`` list.
    """
    if not isinstance(doc, dict) or not isinstance(
        doc.get("obstacles"), list
    ):
        raise ValueError("Invalid map document: 'obstacles' list not found")

    map_name = doc.get("mapName")
    created_at = doc.get("createdAt")
    loaded = LoadedMap(
        map_name=map_name if isinstance(map_name, str) else None,
        created_at=created_at if isinstance(created_at, str) else None,
    )
    for i, entry in enumerate(doc["obstacles"]):
        o = _decode_obstacle(entry, grid)
        if o is None:
            loaded.skipped.append(i)
        else:
            loaded.obstacles.append(o)
    return loaded


def load_store(
    doc: object, grid: GridConfig
) -> tuple[ObstacleStore, LoadedMap]:
    """Decode a document straight into a fresh store."""
    loaded = from_document(doc, grid)
    store = ObstacleStore(grid)
    store.extend(loaded.obstacles)
    return store, loaded
