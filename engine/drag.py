"""Pointer drag quantization.

A drag turns continuous pointer motion into whole-cell moves. ``DragState``
is a two-state machine (``idle`` / ``dragging``); while dragging it keeps
the last pointer position and an accumulator per axis holding motion not
yet spent on a move.

Each ``update`` adds the pointer delta to the accumulators, then drains
them one cell at a time, X first, then Y. Every drained step calls the
caller's ``try_move(step_x, step_y)`` with a unit cell step (one of -1, 0,
1 per axis). The first blocked step ends that axis for the frame and drops
its whole cells, keeping only the sub-cell remainder. A drag pushing against
the grid edge therefore costs one attempt per frame with at least a full
cell of new motion, and sub-cell motion carries over between frames.
Non-finite pointer positions are ignored.

``end`` (pointer release, or leaving the canvas) returns to idle and
discards whatever sub-cell motion remains, so the obstacle stays at its
last committed cell.
"""

from __future__ import annotations

import math
from collections.abc import Callable

IDLE = "idle"
DRAGGING = "dragging"


def _sign(v: float) -> int:
    return 1 if v > 0 else -1


def _leftover(accum: float, cs: float) -> float:
    """Sub-cell part of ``accum``, keeping its sign."""
    return math.copysign(abs(accum) % cs, accum)


class DragState:
    def __init__(self, cell_size: float) -> None:
        self.cell_size = cell_size
        self.state = IDLE
        self.last_x = 0.0
        self.last_y = 0.0
        self.accum_dx = 0.0
        self.accum_dy = 0.0

    @property
    def active(self) -> bool:
        return self.state == DRAGGING

    def begin(self, x: float, y: float) -> None:
        self.state = DRAGGING
        self.last_x = x
        self.last_y = y
        self.accum_dx = 0.0
        self.accum_dy = 0.0

    def update(
        self,
        x: float,
        y: float,
        try_move: Callable[[int, int], bool],
    ) -> int:
        """Feed a pointer position; returns how many steps were applied."""
        if self.state != DRAGGING:
            return 0
        if not (math.isfinite(x) and math.isfinite(y)):
            return 0
        self.accum_dx += x - self.last_x
        self.accum_dy += y - self.last_y
        self.last_x = x
        self.last_y = y

        cs = self.cell_size
        applied = 0
        while abs(self.accum_dx) >= cs:
            step = _sign(self.accum_dx)
            if not try_move(step, 0):
                self.accum_dx = _leftover(self.accum_dx, cs)
                break
            applied += 1
            self.accum_dx -= step * cs
        while abs(self.accum_dy) >= cs:
            step = _sign(self.accum_dy)
            if not try_move(0, step):
                self.accum_dy = _leftover(self.accum_dy, cs)
                break
            applied += 1
            self.accum_dy -= step * cs
        return applied

    def end(self) -> None:
        self.state = IDLE
        self.accum_dx = 0.0
        self.accum_dy = 0.0
