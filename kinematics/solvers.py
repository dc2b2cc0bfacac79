"""Closed-form inverse kinematics for the two-link planar arm."""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple, Type

from .linkage import ORIGIN, LinkageState, Point2, clamp_distance

Joints = Tuple[Point2, Point2, Point2]


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class UnknownSolverError(ValueError):
    """Raised when a solver name has no registered implementation."""


class Solver(ABC):
    """Turns the four request scalars into a clamped distance and a joint triple."""

    name: str = ""

    @abstractmethod
    def solve(
        self,
        first_length: float,
        second_length: float,
        direction_angle: float,
        requested_distance: float,
    ) -> Tuple[float, Joints]:
        raise NotImplementedError


class AnalyticTwoLink(Solver):
    """Law-of-cosines solution, elbow on the counter-clockwise side of the target line."""

    name = "analytic"

    def solve(
        self,
        first_length: float,
        second_length: float,
        direction_angle: float,
        requested_distance: float,
    ) -> Tuple[float, Joints]:
        d = clamp_distance(requested_distance, first_length, second_length)
        theta = self.base_angle(first_length, second_length, d)

        elbow_angle = theta + direction_angle
        elbow = (first_length * math.cos(elbow_angle), first_length * math.sin(elbow_angle))
        end_effector = (d * math.cos(direction_angle), d * math.sin(direction_angle))
        return d, (ORIGIN, elbow, end_effector)

    @staticmethod
    def base_angle(first_length: float, second_length: float, d: float) -> float:
        """Angle at the base between the first link and the base-to-target line."""
        denominator = 2.0 * first_length * d
        if denominator == 0.0:
            # Equal links folded onto the base: any heading works, keep the target's.
            return 0.0
        numerator = first_length * first_length + d * d - second_length * second_length
        return math.acos(_clamp(numerator / denominator, -1.0, 1.0))


SOLVERS: Dict[str, Type[Solver]] = {AnalyticTwoLink.name: AnalyticTwoLink}

_DEFAULT_SOLVER = AnalyticTwoLink()


def get_solver(name: str) -> Solver:
    try:
        return SOLVERS[name]()
    except KeyError:
        raise UnknownSolverError(
            f"Unknown solver {name!r}; available: {', '.join(sorted(SOLVERS))}"
        ) from None


def solve(
    first_length: float,
    second_length: float,
    direction_angle: float,
    requested_distance: float,
) -> Tuple[float, Joints]:
    """Solve with the analytic two-link solver."""
    return _DEFAULT_SOLVER.solve(first_length, second_length, direction_angle, requested_distance)


def solve_state(state: LinkageState, solver: Optional[Solver] = None) -> LinkageState:
    """Return a new state whose joints and distance satisfy the current request."""
    solver = solver or _DEFAULT_SOLVER
    clamped, joints = solver.solve(
        state.first_length,
        state.second_length,
        state.direction_angle,
        state.target_distance,
    )
    return LinkageState(
        first_length=state.first_length,
        second_length=state.second_length,
        direction_angle=state.direction_angle,
        target_distance=clamped,
        joints=joints,
    )


__all__ = [
    "AnalyticTwoLink",
    "Joints",
    "SOLVERS",
    "Solver",
    "UnknownSolverError",
    "get_solver",
    "solve",
    "solve_state",
]
