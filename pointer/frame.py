"""Mapping from window pixels to the arm's local frame."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import numpy as np


class PointerFrameNotFound(RuntimeError):
    """Raised when a saved pointer transform file is missing."""


@dataclass
class PointerFrame:
    """3x3 homogeneous transform, pixel ``(u, v)`` -> arm ``(x, y)``."""

    matrix: np.ndarray

    @classmethod
    def window_centered(cls, width: float, height: float) -> "PointerFrame":
        """Origin at the window centre, y pointing up (pixels grow downward)."""
        matrix = np.array(
            [
                [1.0, 0.0, -width / 2.0],
                [0.0, -1.0, height / 2.0],
                [0.0, 0.0, 1.0],
            ]
        )
        return cls(matrix=matrix)

    @classmethod
    def load(cls, path: Path | str) -> "PointerFrame":
        p = Path(path)
        if not p.exists():
            raise PointerFrameNotFound(f"Pointer transform not found at {p}")
        data = np.load(p)
        if data.shape != (3, 3):
            raise ValueError(f"Expected 3x3 pointer transform, got shape {data.shape}")
        return cls(matrix=data.astype(float))

    def save(self, path: Path | str) -> None:
        np.save(Path(path), self.matrix)

    def to_arm(self, u: float, v: float) -> Tuple[float, float]:
        vec = np.array([u, v, 1.0], dtype=float)
        warped = self.matrix @ vec
        if abs(warped[2]) < 1e-9:
            raise ValueError("Invalid pointer transform: w component close to zero")
        return float(warped[0] / warped[2]), float(warped[1] / warped[2])


__all__ = ["PointerFrame", "PointerFrameNotFound"]
