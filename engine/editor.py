"""Command surface for driving the obstacle engine from a UI or script.

``MapEditor`` owns the grid config, one ``ObstacleStore`` and one
``DragState``. Input layers translate raw events into these calls:

  * pointer down -> ``begin_drag`` (starts a drag only on the selected
    obstacle; anywhere else it re-selects instead)
  * pointer move -> ``drag_to``; pointer up / leave -> ``end_drag``
  * arrow keys or on-screen pad -> ``move_selected``
  * menu actions -> ``add_obstacle``, ``delete_obstacle``, ``clear_all``,
    ``rotate_selected``, ``mirror_all``, ``export_document``,
    ``import_document``

Every call completes synchronously and leaves the editor usable even when
it raises.
"""

from __future__ import annotations

from .codec import from_document, to_document
from .drag import DragState
from .obstacles import ObstacleStore
from .selection import is_on_selected
from .types import DEFAULT_ANCHOR, GridConfig, Obstacle


class MapEditor:
    def __init__(self, grid: GridConfig | None = None) -> None:
        self.grid = grid or GridConfig()
        self.store = ObstacleStore(self.grid)
        self.drag = DragState(self.grid.cell_size)
        self.map_name: str | None = None

    @property
    def selected_index(self) -> int | None:
        return self.store.selected_index

    def selected(self) -> Obstacle | None:
        return self.store.selected()

    # -- obstacles --

    def add_obstacle(
        self,
        type_name: str,
        grid_x: float,
        grid_y: float,
        anchor: str = DEFAULT_ANCHOR,
    ) -> int:
        return self.store.add(type_name, grid_x, grid_y, anchor)

    def delete_obstacle(self, index: int) -> None:
        if index == self.store.selected_index:
            self.drag.end()
        self.store.remove(index)

    def clear_all(self) -> None:
        self.drag.end()
        self.store.clear()

    def mirror_all(self) -> int:
        return self.store.mirror_all()

    # -- selection --

    def select_at(self, x: float, y: float) -> int | None:
        before = self.store.selected_index
        index = self.store.select_at(x, y)
        if index != before:
            self.drag.end()
        return index

    def select_index(self, index: int | None) -> None:
        if index != self.store.selected_index:
            self.drag.end()
        self.store.select(index)

    # -- transforms --

    def rotate_selected(self, delta_deg: float) -> bool:
        return self.store.rotate_selected(delta_deg)

    def move_selected(self, direction: str) -> bool:
        return self.store.move_selected(direction)

    def _try_move_selected(self, dx: int, dy: int) -> bool:
        idx = self.store.selected_index
        if idx is None:
            return False
        return self.store.move(idx, dx, dy)

    def begin_drag(self, x: float, y: float) -> bool:
        """Start dragging if (x, y) is on the selection, else re-select.

        Returns True if a drag started. A press that only selects never
        drags in the same gesture.
        """
        if is_on_selected(
            self.store.obstacles, self.store.selected_index, x, y
        ):
            self.drag.begin(x, y)
            return True
        self.drag.end()
        self.store.select_at(x, y)
        return False

    def drag_to(self, x: float, y: float) -> int:
        """Feed a pointer position during a drag; returns cells moved."""
        if self.store.selected_index is None:
            return 0
        return self.drag.update(x, y, self._try_move_selected)

    def end_drag(self) -> None:
        self.drag.end()

    # -- documents --

    def export_document(
        self, map_name: str, created_at: str | None = None
    ) -> dict:
        doc = to_document(self.store, map_name, created_at)
        self.map_name = doc["mapName"]
        return doc

    def import_document(self, doc: object) -> list[int]:
        """Replace the current map with a decoded document.

        Returns the indices of skipped (malformed) entries. Raises
        ValueError for a malformed document, leaving the current map as is.
        """
        loaded = from_document(doc, self.grid)
        self.drag.end()
        self.store.clear()
        self.store.extend(loaded.obstacles)
        if loaded.map_name:
            self.map_name = loaded.map_name
        return loaded.skipped
