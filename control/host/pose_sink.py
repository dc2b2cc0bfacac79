"""JSON-lines output of solved poses for whatever draws the arm."""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, TextIO

from kinematics.linkage import LinkageState


@dataclass
class PoseSink:
    path: Optional[Path] = None
    stream: Optional[TextIO] = None
    _owned: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.path is not None and self.stream is not None:
            raise ValueError("Pass either path or stream, not both")
        if self.path is not None:
            self.path = Path(self.path)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.stream = self.path.open("a")
            self._owned = True
        elif self.stream is None:
            self.stream = sys.stdout

    def close(self) -> None:
        if self._owned and self.stream is not None:
            self.stream.close()
            self.stream = None

    def send_pose(self, state: LinkageState, metadata: Optional[Dict] = None) -> None:
        payload = {"cmd": "pose", **state.to_dict()}
        if metadata:
            payload.update(metadata)
        self._send(payload)

    def _send(self, payload: Dict) -> None:
        assert self.stream is not None
        self.stream.write(json.dumps(payload) + "\n")
        self.stream.flush()

    def __enter__(self) -> "PoseSink":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


__all__ = ["PoseSink"]
