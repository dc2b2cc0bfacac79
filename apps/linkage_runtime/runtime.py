"""Runtime that turns arm requests or pointer samples into solved two-link poses."""
from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import Dict, Iterator, Optional

try:
    import yaml
except ImportError as exc:  # pragma: no cover - user must install dependency
    raise SystemExit("PyYAML is required: pip install pyyaml") from exc

from control.host.pose_sink import PoseSink
from kinematics.linkage import LENGTH_RANGE, LinkageState, Point2
from kinematics.solvers import Solver, get_solver, solve_state
from kinematics.tracking import track
from pointer.frame import PointerFrame

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "configs" / "linkage.yaml"


class ConfigError(ValueError):
    """Raised when the arm configuration holds unusable values."""


def load_config(path: Path) -> Dict:
    with path.open() as fh:
        return yaml.safe_load(fh) or {}


def resolve_config(path: Optional[Path] = None) -> Dict:
    """Load ``path``, or the bundled defaults when present; built-ins otherwise."""
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG.exists():
        return load_config(DEFAULT_CONFIG)
    logger.debug("No config at %s, using built-in defaults", DEFAULT_CONFIG)
    return {}


def _length(arm_cfg: Dict, key: str, default: float) -> float:
    value = float(arm_cfg.get(key, default))
    lo, hi = LENGTH_RANGE
    if not lo <= value <= hi:
        raise ConfigError(f"arm.{key}={value} outside {lo}..{hi}")
    return value


def build_state(cfg: Dict) -> LinkageState:
    arm_cfg = cfg.get("arm") or {}
    return LinkageState.initial(
        _length(arm_cfg, "first_length", 128.0),
        _length(arm_cfg, "second_length", 128.0),
        float(arm_cfg.get("direction_angle", 0.0)),
    )


def build_solver(cfg: Dict) -> Solver:
    return get_solver(str(cfg.get("solver", "analytic")))


def build_frame(cfg: Dict) -> PointerFrame:
    frame_path = cfg.get("pointer_frame_path")
    if frame_path:
        return PointerFrame.load(frame_path)
    window = cfg.get("window") or {}
    return PointerFrame.window_centered(
        float(window.get("width", 512)), float(window.get("height", 512))
    )


def apply_overrides(cfg: Dict, args: argparse.Namespace) -> Dict:
    arm_cfg = dict(cfg.get("arm") or {})
    for key in ("first_length", "second_length"):
        value = getattr(args, key, None)
        if value is not None:
            arm_cfg[key] = value
    if getattr(args, "angle", None) is not None:
        arm_cfg["direction_angle"] = args.angle
    merged = dict(cfg)
    merged["arm"] = arm_cfg
    if getattr(args, "target_mouse", False):
        merged["target_mouse"] = True
    if getattr(args, "solver", None):
        merged["solver"] = args.solver
    return merged


def pointer_stream(path: Path, follow: bool = False) -> Iterator[Dict]:
    with path.open() as fh:
        if follow:
            fh.seek(0, 2)
        while True:
            line = fh.readline()
            if not line:
                if follow:
                    time.sleep(0.05)
                    continue
                break
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                logger.debug("Skipping malformed pointer line: %r", line)
                continue


def pointer_to_arm(sample: Dict, frame: PointerFrame) -> Optional[Point2]:
    """Arm-frame pointer from a sample holding either ``x``/``y`` or pixel ``u``/``v``."""
    try:
        if "x" in sample and "y" in sample:
            return float(sample["x"]), float(sample["y"])
        if "u" in sample and "v" in sample:
            return frame.to_arm(float(sample["u"]), float(sample["v"]))
    except (TypeError, ValueError) as err:
        logger.debug("Skipping pointer sample %r: %s", sample, err)
        return None
    logger.debug("Pointer sample without coordinates: %r", sample)
    return None


def _log_clamp(requested: float, state: LinkageState) -> None:
    if requested != state.target_distance:
        logger.info(
            "Requested distance %.3f out of reach, clamped to %.3f",
            requested,
            state.target_distance,
        )


def run(args: argparse.Namespace) -> int:
    """Solve and emit poses; returns the number of poses written."""
    cfg = apply_overrides(resolve_config(args.config), args)
    solver = build_solver(cfg)
    state = build_state(cfg)
    written = 0

    with PoseSink(path=args.output) as sink:
        if not cfg.get("target_mouse", False):
            requested = state.target_distance if args.distance is None else args.distance
            state = solve_state(state.with_request(target_distance=requested), solver)
            _log_clamp(requested, state)
            sink.send_pose(state, {"mode": "manual"})
            return 1

        if args.pointer_log is None:
            raise ConfigError("Tracking mode needs --pointer-log")
        frame = build_frame(cfg)
        logger.info("Tracking pointer samples from %s", args.pointer_log)
        for sample in pointer_stream(args.pointer_log, follow=args.follow):
            pointer = pointer_to_arm(sample, frame)
            if pointer is None:
                continue
            state = track(state, pointer, solver)
            sink.send_pose(
                state,
                {"mode": "track", "pointer": list(pointer), "ts": sample.get("ts", time.time())},
            )
            written += 1
    return written


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Arm config (default: {DEFAULT_CONFIG} when present)",
    )
    p.add_argument("--solver", type=str, default=None)
    p.add_argument("--first-length", type=float, default=None)
    p.add_argument("--second-length", type=float, default=None)
    p.add_argument("--angle", type=float, default=None, help="Direction angle in radians")
    p.add_argument(
        "--distance",
        type=float,
        default=None,
        help="Requested base-to-target distance (defaults to full extension)",
    )
    p.add_argument(
        "--target-mouse",
        action="store_true",
        help="Follow pointer samples instead of the manual request",
    )
    p.add_argument(
        "--pointer-log",
        type=Path,
        default=None,
        help="JSON-lines file of pointer samples ({'u','v'} pixels or {'x','y'} arm frame)",
    )
    p.add_argument("--follow", action="store_true", help="Keep tailing the pointer log")
    p.add_argument("--output", type=Path, default=None, help="Pose log (default: stdout)")
    p.add_argument("--verbose", action="store_true")
    return p


def main(argv: Optional[list[str]] = None) -> None:
    args = build_argparser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        run(args)
    except (ValueError, RuntimeError, OSError) as err:
        raise SystemExit(f"error: {err}") from err


if __name__ == "__main__":
    main()
