"""Two-link planar linkage state and reachability helpers."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace
from typing import Dict, Tuple

Point2 = Tuple[float, float]

ORIGIN: Point2 = (0.0, 0.0)

# Slider policy of the presentation layer, not enforced by the solver.
LENGTH_RANGE: Tuple[float, float] = (0.001, 256.0)
ANGLE_RANGE: Tuple[float, float] = (0.0, 2.0 * math.pi)
MIN_REQUEST_DISTANCE = 0.001

REQUEST_FIELDS = ("first_length", "second_length", "direction_angle", "target_distance")


def _polar(radius: float, angle: float) -> Point2:
    return (radius * math.cos(angle), radius * math.sin(angle))


def reach_limits(first_length: float, second_length: float) -> Tuple[float, float]:
    """Return ``(min_reach, max_reach)`` of the reachable annulus."""
    return abs(first_length - second_length), first_length + second_length


def clamp_distance(target_distance: float, first_length: float, second_length: float) -> float:
    """Pull a requested base-to-target distance back into the reachable annulus.

    Farther than the fully extended arm snaps to ``first + second``; closer
    than the most folded arm snaps to ``|first - second|``, whichever link
    is the longer one.
    """
    min_reach, max_reach = reach_limits(first_length, second_length)
    if target_distance > max_reach:
        return max_reach
    if target_distance < min_reach:
        return min_reach
    return target_distance


def distance(a: Point2, b: Point2) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


@dataclass(frozen=True)
class LinkageState:
    """Request fields plus the joint triple ``(base, elbow, end_effector)``."""

    first_length: float
    second_length: float
    direction_angle: float
    target_distance: float
    joints: Tuple[Point2, Point2, Point2]

    @classmethod
    def initial(
        cls, first_length: float, second_length: float, direction_angle: float = 0.0
    ) -> "LinkageState":
        """Fully extended arm pointing along ``direction_angle``."""
        reach = first_length + second_length
        return cls(
            first_length=first_length,
            second_length=second_length,
            direction_angle=direction_angle,
            target_distance=reach,
            joints=(
                ORIGIN,
                _polar(first_length, direction_angle),
                _polar(reach, direction_angle),
            ),
        )

    @property
    def base(self) -> Point2:
        return self.joints[0]

    @property
    def elbow(self) -> Point2:
        return self.joints[1]

    @property
    def end_effector(self) -> Point2:
        return self.joints[2]

    def with_request(self, **changes: float) -> "LinkageState":
        """Copy with request fields replaced; joints stay stale until solved."""
        unknown = set(changes) - set(REQUEST_FIELDS)
        if unknown:
            raise TypeError(f"Not a request field: {', '.join(sorted(unknown))}")
        return replace(self, **{k: float(v) for k, v in changes.items()})

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["joints"] = [list(p) for p in self.joints]
        return data


def joint_distances(state: LinkageState) -> Tuple[float, float, float]:
    """Return ``(base-elbow, elbow-end, base-end)`` lengths of a pose."""
    base, elbow, end = state.joints
    return distance(base, elbow), distance(elbow, end), distance(base, end)


def distance_range(state: LinkageState) -> Tuple[float, float]:
    return MIN_REQUEST_DISTANCE, state.first_length + state.second_length


__all__ = [
    "ANGLE_RANGE",
    "LENGTH_RANGE",
    "LinkageState",
    "MIN_REQUEST_DISTANCE",
    "ORIGIN",
    "REQUEST_FIELDS",
    "Point2",
    "clamp_distance",
    "distance",
    "distance_range",
    "joint_distances",
    "reach_limits",
]
