"""Derive the arm request from a pointer position ("target mouse" mode)."""
from __future__ import annotations

import math
from typing import Optional, Tuple

from .linkage import LinkageState, Point2
from .solvers import Solver, solve_state


def pointer_request(x: float, y: float) -> Tuple[float, float]:
    """Return ``(direction_angle, distance)`` of a pointer in the arm frame."""
    return math.atan2(y, x), math.hypot(x, y)


def track(state: LinkageState, pointer: Point2, solver: Optional[Solver] = None) -> LinkageState:
    angle, dist = pointer_request(*pointer)
    return solve_state(state.with_request(direction_angle=angle, target_distance=dist), solver)


__all__ = ["pointer_request", "track"]
