"""Tests for the obstacle store: structure, selection and transforms."""

import math

import pytest

from engine.geometry import reflect_point, rotate_polygons
from engine.obstacles import ObstacleStore
from engine.shapes import build_shapes
from engine.types import GridConfig, Point

GRID = GridConfig(cell_size=20, cols=16, rows=36)  # 320 x 720 world


def _store():
    return ObstacleStore(GRID)


def _assert_canonical(store):
    """Every obstacle's shapes are exactly what the factory produces."""
    for o in store:
        assert o.shapes == build_shapes(
            o.type,
            o.grid_x,
            o.grid_y,
            o.rotation_angle,
            o.anchor,
            GRID.cell_size,
        )


def _assert_polys_close(a, b):
    assert len(a) == len(b)
    for pa, pb in zip(a, b):
        assert len(pa) == len(pb)
        for va, vb in zip(pa, pb):
            assert va == pytest.approx(vb, abs=1e-9)


# ---------------------------------------------------------------------------
# add / remove / clear
# ---------------------------------------------------------------------------


class TestAdd:
    def test_add_sets_canonical_fields(self):
        s = _store()
        idx = s.add("rhombus", 3, 5, "topLeft")
        assert idx == 0
        o = s[0]
        assert o.type == "rhombus"
        assert o.anchor_point == Point(60, 100)
        assert o.rotation_angle == 0
        assert o.anchor == "topLeft"
        _assert_canonical(s)

    def test_add_appends_in_z_order(self):
        s = _store()
        assert s.add("rhombus", 1, 1) == 0
        assert s.add("trapezoid", 2, 2) == 1
        assert [o.type for o in s] == ["rhombus", "trapezoid"]

    def test_default_anchor(self):
        s = _store()
        s.add("small_triangle", 4, 4)
        assert s[0].anchor == "topLeft"

    def test_whole_float_coordinates_accepted(self):
        s = _store()
        s.add("rhombus", 3.0, 5.0)
        assert (s[0].grid_x, s[0].grid_y) == (3, 5)
        assert isinstance(s[0].grid_x, int)

    def test_unknown_type_rejected(self):
        s = _store()
        with pytest.raises(ValueError, match="Unknown obstacle type"):
            s.add("hexagon", 1, 1)
        assert len(s) == 0

    @pytest.mark.parametrize(
        "gx, gy",
        [(math.nan, 1), (1, math.inf), (-math.inf, 0), (1.5, 2), (True, 1)],
    )
    def test_bad_grid_coordinates_rejected(self, gx, gy):
        s = _store()
        with pytest.raises(ValueError):
            s.add("rhombus", gx, gy)
        assert len(s) == 0

    def test_store_usable_after_rejection(self):
        s = _store()
        with pytest.raises(ValueError):
            s.add("hexagon", 1, 1)
        assert s.add("rhombus", 1, 1) == 0


class TestRemoveAndClear:
    def test_remove_selected_clears_selection(self):
        s = _store()
        s.add("rhombus", 1, 1)
        s.add("rhombus", 5, 5)
        s.select(1)
        s.remove(1)
        assert s.selected_index is None
        assert len(s) == 1

    def test_remove_earlier_shifts_selection(self):
        s = _store()
        for gx in (1, 4, 7):
            s.add("rhombus", gx, 1)
        s.select(2)
        selected = s.selected()
        s.remove(0)
        assert s.selected_index == 1
        assert s.selected() is selected

    def test_remove_later_keeps_selection(self):
        s = _store()
        s.add("rhombus", 1, 1)
        s.add("rhombus", 4, 1)
        s.select(0)
        s.remove(1)
        assert s.selected_index == 0

    def test_remove_bad_index(self):
        s = _store()
        s.add("rhombus", 1, 1)
        with pytest.raises(IndexError):
            s.remove(3)
        with pytest.raises(IndexError):
            s.remove(-1)
        assert len(s) == 1

    def test_clear(self):
        s = _store()
        s.add("rhombus", 1, 1)
        s.select(0)
        s.clear()
        assert len(s) == 0
        assert s.selected_index is None
        assert s.selected() is None


class TestSelect:
    def test_select_and_deselect(self):
        s = _store()
        s.add("rhombus", 1, 1)
        s.select(0)
        assert s.selected() is s[0]
        s.select(None)
        assert s.selected() is None

    def test_select_out_of_range(self):
        s = _store()
        with pytest.raises(IndexError):
            s.select(0)
        assert s.selected_index is None

    def test_labels(self):
        s = _store()
        s.add("rhombus", 1, 1)
        s.add("trapezoid", 4, 4)
        s.add("rhombus", 8, 8)
        assert s.labels() == ["Rhombus 1", "Trapezoid 1", "Rhombus 2"]


# ---------------------------------------------------------------------------
# rotate
# ---------------------------------------------------------------------------


class TestRotateSelected:
    def test_no_selection_is_noop(self):
        s = _store()
        s.add("rhombus", 3, 5)
        before = s[0]
        assert s.rotate_selected(90) is False
        assert s[0] is before

    def test_rotate_regenerates(self):
        s = _store()
        s.add("rhombus", 3, 5)
        s.select(0)
        assert s.rotate_selected(90)
        assert s[0].rotation_angle == 90
        assert s[0].anchor_point == Point(60, 100)
        _assert_canonical(s)

    def test_matches_rotating_current_shapes(self):
        """Regenerating equals rotating the old vertices about the anchor."""
        s = _store()
        s.add("trapezoid", 6, 9, "bottomRight")
        s.select(0)
        s.rotate_selected(30)
        old = s[0].shapes
        ap = s[0].anchor_point
        s.rotate_selected(45)
        _assert_polys_close(s[0].shapes, rotate_polygons(old, ap.x, ap.y, 45))

    def test_angle_normalized(self):
        s = _store()
        s.add("rhombus", 3, 5)
        s.select(0)
        s.rotate_selected(-90)
        assert s[0].rotation_angle == 270
        s.rotate_selected(-90)
        assert s[0].rotation_angle == 180
        s.rotate_selected(540)
        assert s[0].rotation_angle == 0

    @pytest.mark.parametrize(
        "delta", [float("nan"), float("inf"), float("-inf")]
    )
    def test_non_finite_delta_rejected(self, delta):
        s = _store()
        s.add("rhombus", 3, 5)
        s.select(0)
        s.rotate_selected(30)
        before = s[0]
        with pytest.raises(ValueError, match="finite"):
            s.rotate_selected(delta)
        assert s[0] is before
        assert s[0].rotation_angle == 30
        _assert_canonical(s)


# ---------------------------------------------------------------------------
# move
# ---------------------------------------------------------------------------


class TestMove:
    def test_move_in_bounds(self):
        s = _store()
        s.add("rhombus", 3, 5)
        assert s.move(0, 1, 0)
        assert (s[0].grid_x, s[0].grid_y) == (4, 5)
        assert s[0].anchor_point == Point(80, 100)
        _assert_canonical(s)

    def test_move_translates_every_vertex_by_whole_cells(self):
        s = _store()
        s.add("big_triangle", 8, 8, "bottomLeft")
        s.select(0)
        s.rotate_selected(33)
        before = s[0].shapes
        assert s.move(0, -2, 3)
        expected = [[(x - 40, y + 60) for x, y in p] for p in before]
        _assert_polys_close(s[0].shapes, expected)

    def test_blocked_move_leaves_obstacle_untouched(self):
        s = _store()
        s.add("rhombus", 0, 5)
        before = s[0]
        shapes_before = [list(p) for p in before.shapes]
        assert s.move(0, -1, 0) is False
        assert s[0] is before
        assert s[0].shapes == shapes_before
        assert s[0].grid_x == 0

    def test_partial_overhang_rejects_whole_move(self):
        """Trapezoid's bottom-left corner hangs 18 left of its anchor."""
        s = _store()
        s.add("trapezoid", 1, 5)
        # anchor would land on x=0 (in bounds) but the corner would not
        assert s.move(0, -1, 0) is False
        assert s[0].grid_x == 1

    def test_right_and_bottom_edges_inclusive(self):
        s = _store()
        # Rhombus spans 54 wide; anchor at x=260 puts the far corner at 314.
        s.add("rhombus", 13, 34)
        assert s.move(0, 0, 0)
        assert s.move(0, 1, 0) is False
        assert s.move(0, 0, 1) is False

    def test_move_selected_up_stops_at_top_edge(self):
        s = _store()
        s.add("rhombus", 3, 3)
        s.select(0)
        ys = []
        for _ in range(5):
            s.move_selected("up")
            ys.append(s[0].anchor_point.y)
        assert ys == [40, 20, 0, 0, 0]

    def test_move_selected_up_blocked_by_apex(self):
        """A bottom-anchored triangle's apex hits y=0 before its anchor."""
        s = _store()
        s.add("small_triangle", 3, 4, "bottomLeft")
        s.select(0)
        results = [s.move_selected("up") for _ in range(4)]
        assert results == [True, True, False, False]
        assert s[0].anchor_point.y == 40

    def test_move_selected_directions(self):
        s = _store()
        s.add("rhombus", 5, 5)
        s.select(0)
        for d in ("down", "right", "up", "left", "left"):
            assert s.move_selected(d)
        assert (s[0].grid_x, s[0].grid_y) == (4, 5)

    def test_move_selected_without_selection(self):
        s = _store()
        s.add("rhombus", 5, 5)
        assert s.move_selected("up") is False

    def test_move_selected_unknown_direction(self):
        s = _store()
        s.add("rhombus", 5, 5)
        s.select(0)
        with pytest.raises(ValueError):
            s.move_selected("north")


# ---------------------------------------------------------------------------
# mirror
# ---------------------------------------------------------------------------


class TestMirrorAll:
    def test_copies_appended_with_reflected_anchor(self):
        s = _store()
        s.add("rhombus", 3, 5)
        assert s.mirror_all() == 1
        assert len(s) == 2
        m = s[1]
        assert m.type == "rhombus"
        assert m.anchor == "topLeft"
        assert m.anchor_point == Point(260, 620)
        assert m.rotation_angle == 180
        _assert_canonical(s)

    def test_copy_vertices_are_point_reflections(self):
        s = _store()
        s.add("trapezoid", 4, 7, "bottomLeft")
        s.select(0)
        s.rotate_selected(75)
        s.mirror_all()
        expected = [
            [reflect_point(x, y, 160, 360) for x, y in p]
            for p in s[0].shapes
        ]
        _assert_polys_close(s[1].shapes, expected)

    def test_mirror_twice_restores_originals(self):
        s = _store()
        s.add("rhombus", 3, 5)
        s.add("small_triangle", 10, 20, "bottomRight")
        s.select(1)
        s.rotate_selected(30)
        s.mirror_all()
        s.mirror_all()
        assert len(s) == 8
        for orig, again in ((s[0], s[6]), (s[1], s[7])):
            assert (again.grid_x, again.grid_y) == (orig.grid_x, orig.grid_y)
            assert again.rotation_angle == orig.rotation_angle
            _assert_polys_close(again.shapes, orig.shapes)

    def test_custom_center(self):
        s = _store()
        s.add("rhombus", 3, 5)
        s.mirror_all(100, 100)
        assert s[1].anchor_point == Point(140, 100)

    def test_off_grid_center_rejected(self):
        s = _store()
        s.add("rhombus", 3, 5)
        with pytest.raises(ValueError):
            s.mirror_all(5, 5)
        assert len(s) == 1

    def test_empty_store(self):
        s = _store()
        assert s.mirror_all() == 0
        assert len(s) == 0


def test_canonical_invariant_after_mixed_operations():
    s = _store()
    s.add("rhombus", 3, 5)
    s.add("big_triangle", 6, 12, "bottomRight")
    s.add("trapezoid", 2, 20, "topRight")
    s.select(1)
    s.rotate_selected(120)
    s.move_selected("left")
    s.mirror_all()
    s.select(4)
    s.rotate_selected(-15)
    s.move(4, 1, -1)
    s.remove(0)
    _assert_canonical(s)
