"""Gesture script loader — recorded pointer interactions in YAML.

A gesture script replays pointer events against one element so that
drag behavior can be reproduced outside the editor.

Gesture script schema:
  steps:
    - begin: resize          # move | resize | rotate
      pointer: [100, 50]
      handle: e              # resize only
    - move: [140, 50]
    - move: [150, 60]
      snap: true             # snap modifier (rotation rounds to 15 deg)
    - up: true
"""

from pathlib import Path

import yaml

from .common import as_number
from .geometry import GESTURE_KINDS, HANDLES


def _parse_point(value, prefix: str) -> tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{prefix}: pointer must be an [x, y] pair, got {value!r}")
    x, y = as_number(value[0]), as_number(value[1])
    if x is None or y is None:
        raise ValueError(f"{prefix}: pointer coordinates must be numbers, got {value!r}")
    return x, y


def load_gesture_script(script_path: str | Path) -> list[dict]:
    """Load and validate a gesture script.

    Returns:
        List of normalized steps, each one of:
          {"action": "begin", "kind": str, "pointer": (x, y), "handle": str | None}
          {"action": "move", "pointer": (x, y), "snap": bool}
          {"action": "up"}

    Raises:
        ValueError: Malformed steps.
    """
    with open(script_path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict) or not isinstance(raw.get("steps"), list):
        raise ValueError("Gesture script: missing required 'steps' list")

    steps = []
    for i, step in enumerate(raw["steps"]):
        prefix = f"Gesture step {i}"
        if not isinstance(step, dict):
            raise ValueError(f"{prefix}: must be a mapping")

        if "begin" in step:
            kind = step["begin"]
            if kind not in GESTURE_KINDS:
                raise ValueError(
                    f"{prefix}: invalid gesture '{kind}'. Valid: {sorted(GESTURE_KINDS)}"
                )
            handle = step.get("handle")
            if kind == "resize" and handle not in HANDLES:
                raise ValueError(
                    f"{prefix}: resize needs a handle. Valid: {sorted(HANDLES)}"
                )
            steps.append({
                "action": "begin",
                "kind": kind,
                "pointer": _parse_point(step.get("pointer"), prefix),
                "handle": handle if kind == "resize" else None,
            })
        elif "move" in step:
            steps.append({
                "action": "move",
                "pointer": _parse_point(step["move"], prefix),
                "snap": bool(step.get("snap", False)),
            })
        elif "up" in step:
            steps.append({"action": "up"})
        else:
            raise ValueError(f"{prefix}: expected one of 'begin', 'move', 'up'")

    return steps
