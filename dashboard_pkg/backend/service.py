from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional

from apps.linkage_runtime.runtime import (
    build_solver,
    build_state,
    resolve_config,
)
from kinematics.linkage import ANGLE_RANGE, LENGTH_RANGE, LinkageState, distance_range
from kinematics.solvers import Solver, solve_state
from kinematics.tracking import track

logger = logging.getLogger(__name__)


class LinkageService:
    """Owns the long-lived arm state that the HTTP layer reads and mutates."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        config_path: Optional[Path] = None,
    ) -> None:
        if config is None:
            config = resolve_config(config_path)
        self._settings = config
        self._solver: Solver = build_solver(config)
        self._target_mouse = bool(config.get("target_mouse", False))

        self._lock = threading.Lock()
        self._state: LinkageState = solve_state(build_state(config), self._solver)
        self._events: Deque[Dict[str, Any]] = deque(maxlen=256)

    @property
    def target_mouse(self) -> bool:
        return self._target_mouse

    def state(self) -> LinkageState:
        with self._lock:
            return self._state

    def request(self, **changes: float) -> LinkageState:
        """Apply request fields, solve once and publish the new state."""
        with self._lock:
            requested = self._state.with_request(**changes)
            solved = solve_state(requested, self._solver)
            self._publish(solved, "request", requested.target_distance)
            return solved

    def pointer(self, x: float, y: float) -> LinkageState:
        with self._lock:
            solved = track(self._state, (x, y), self._solver)
            self._publish(solved, "pointer", math.hypot(x, y), pointer=[x, y])
            return solved

    def _publish(
        self,
        state: LinkageState,
        message: str,
        requested: Optional[float],
        **extra: Any,
    ) -> None:
        clamped = requested is not None and requested != state.target_distance
        if clamped:
            logger.debug("Clamped %.3f -> %.3f", requested, state.target_distance)
        event = {
            "timestamp": time.time(),
            "message": message,
            "clamped": clamped,
            "target_distance": state.target_distance,
            "joints": [list(p) for p in state.joints],
        }
        event.update(extra)
        self._state = state
        self._events.appendleft(event)

    def ranges(self) -> Dict[str, List[float]]:
        state = self.state()
        return {
            "first_length": list(LENGTH_RANGE),
            "second_length": list(LENGTH_RANGE),
            "direction_angle": list(ANGLE_RANGE),
            "target_distance": list(distance_range(state)),
        }

    def status(self) -> Dict[str, Any]:
        state = self.state()
        return {
            "solver": self._solver.name,
            "target_mouse": self._target_mouse,
            "state": state.to_dict(),
        }

    def events(self, limit: int = 50) -> List[Dict[str, Any]]:
        with self._lock:
            snapshot = list(self._events)
        return list(reversed(snapshot[:limit]))
