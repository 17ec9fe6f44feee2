"""CLI for replaying gesture scripts against a scene element.

Usage:
    stagecraft gesture --manifest scene.yaml --clip title --script drag.yaml
"""

import argparse

from .geometry import TransformController
from .gesture_script import load_gesture_script
from .manifest import load_manifest
from .snapping import make_snap_resolver


def _fmt_geometry(g: dict) -> str:
    return (
        f"x={g['x']:.1f} y={g['y']:.1f} w={g['width']:.1f} h={g['height']:.1f} "
        f"rot={g['rotation']:.1f} scale={g['scale']:.3f}"
    )


def replay(controller: TransformController, steps: list[dict]) -> list[dict]:
    """Run gesture steps through a controller.

    Returns one record per step: {"action", "geometry", "guides", "patch"}.
    """
    records = []
    for step in steps:
        action = step["action"]
        patch = None
        if action == "begin":
            if step["kind"] == "move":
                controller.begin_move(step["pointer"])
            elif step["kind"] == "resize":
                controller.begin_resize(step["pointer"], step["handle"])
            else:
                controller.begin_rotate(step["pointer"])
        elif action == "move":
            patch = controller.on_pointer_move(step["pointer"], snap=step["snap"])
        else:
            patch = controller.on_pointer_up()
        records.append({
            "action": action,
            "geometry": controller.geometry,
            "guides": dict(controller.guides),
            "patch": patch,
        })
    return records


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Replay a YAML gesture script against one clip's geometry.",
    )
    parser.add_argument(
        "--manifest", required=True,
        help="Path to YAML scene manifest",
    )
    parser.add_argument(
        "--clip", required=True,
        help="Id of the clip to transform",
    )
    parser.add_argument(
        "--script", required=True,
        help="Path to YAML gesture script",
    )
    parsed = parser.parse_args(args)

    config = load_manifest(parsed.manifest)
    clip = next((c for c in config["clips"] if c["id"] == parsed.clip), None)
    if clip is None:
        parser.error(f"no clip with id '{parsed.clip}' in manifest")
    steps = load_gesture_script(parsed.script)

    canvas = config["canvas"]
    committed = []
    controller = TransformController(
        clip["geometry"],
        canvas_size=(canvas["width"], canvas["height"]),
        element_id=clip["id"],
        snap_resolver=make_snap_resolver(canvas["snap_threshold"]),
        on_commit=lambda element_id, patch: committed.append(patch),
    )

    print(f"Start:  {_fmt_geometry(controller.geometry)}")
    for i, record in enumerate(replay(controller, steps)):
        guides = record["guides"]
        guide_str = ""
        if guides:
            guide_str = "  guides: " + ", ".join(
                f"{axis}={pos:g}" for axis, pos in sorted(guides.items())
            )
        print(f"  [{i}] {record['action']:<5} {_fmt_geometry(record['geometry'])}{guide_str}")

    print(f"\nDone: {len(committed)} gesture(s) committed")
    for patch in committed:
        fields = ", ".join(f"{k}={v:.2f}" for k, v in sorted(patch.items()))
        print(f"  {clip['id']}: {fields}")


if __name__ == "__main__":
    main()
