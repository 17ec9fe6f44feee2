"""CLI for frame evaluation.

Reads a YAML scene manifest and prints the composed style of every
clip visible at a playhead time, or the sampled animation curve of one
clip.

Usage:
    # Styles of all visible clips at t=0.5s
    stagecraft evaluate --manifest scene.yaml --time 0.5

    # One clip, machine-readable
    stagecraft evaluate --manifest scene.yaml --time 0.5 --clip title --json

    # Animation curve of one clip at 10fps
    stagecraft evaluate --manifest scene.yaml --clip title --sample --fps 10

    # Validate only
    stagecraft evaluate --manifest scene.yaml --validate
"""

import argparse
import json

from .animation import ANIMATION_TYPES, DIRECTIONS, sample_timeline
from .compose import render_scene
from .easing import EASINGS
from .manifest import load_manifest


def _find_clip(config: dict, clip_id: str) -> dict:
    for clip in config["clips"]:
        if clip["id"] == clip_id:
            return clip
    raise ValueError(f"No clip with id '{clip_id}' in manifest")


def _animation_warnings(clip: dict) -> list[str]:
    """Names the loader accepted but the evaluator will ignore."""
    def known(value, names):
        return isinstance(value, str) and value in names

    warnings = []
    for phase, cfg in clip["animation"].items():
        if not known(cfg["type"], ANIMATION_TYPES):
            warnings.append(f"{phase}: unknown type '{cfg['type']}' (no animation)")
        if not known(cfg["easing"], EASINGS):
            warnings.append(f"{phase}: unknown easing '{cfg['easing']}' (using ease-out)")
        direction = cfg["direction"]
        if (known(cfg["type"], {"slide", "wipe"}) and direction is not None
                and not known(direction, DIRECTIONS)):
            warnings.append(f"{phase}: unknown direction '{direction}' (no offset)")
    return warnings


def _print_validation(config: dict) -> None:
    canvas = config["canvas"]
    print(f"Manifest valid: {len(config['clips'])} clips")
    print(f"Canvas: {canvas['width']:g}x{canvas['height']:g}")
    for i, clip in enumerate(config["clips"]):
        phases = ", ".join(
            f"{phase}={cfg['type']}" for phase, cfg in clip["animation"].items()
        )
        tag = f" [{phases}]" if phases else ""
        print(
            f"  {i}: {clip['id']} ({clip['type']}) "
            f"{clip['start']:g}s — {clip['end']:g}s{tag}"
        )
        for warning in _animation_warnings(clip):
            print(f"     WARNING {warning}")


def _print_styles(styles: list[dict], t: float) -> None:
    if not styles:
        print(f"No clips visible at t={t:g}s")
        return
    print(f"t={t:g}s: {len(styles)} visible clip(s)")
    for style in styles:
        print(f"  {style['id']}")
        print(f"    transform: {style['transform']}")
        print(f"    opacity:   {style['opacity']:.3f}")
        if style["filter"]:
            print(f"    filter:    {style['filter']}")
        if style["clip_path"]:
            print(f"    clip-path: {style['clip_path']}")
        if style["mix_blend_mode"] and style["mix_blend_mode"] != "normal":
            print(f"    blend:     {style['mix_blend_mode']}")
        for hint in style["hints"]:
            print(f"    hint:      {hint['kind']}")
        if style["text"] is not None:
            print(f"    text:      {style['text']!r}")


def main(args=None):
    parser = argparse.ArgumentParser(
        description="Evaluate scene styles at a playhead time.",
    )
    parser.add_argument(
        "--manifest", required=True,
        help="Path to YAML scene manifest",
    )
    parser.add_argument(
        "--time", type=float, default=None,
        help="Playhead time in seconds",
    )
    parser.add_argument(
        "--clip", default=None,
        help="Only report this clip id",
    )
    parser.add_argument(
        "--sample", action="store_true",
        help="Print the animation curve of --clip over its whole window",
    )
    parser.add_argument(
        "--fps", type=float, default=30,
        help="Sampling rate for --sample (default: 30)",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Emit JSON instead of text",
    )
    parser.add_argument(
        "--validate", action="store_true",
        help="Validate manifest only",
    )
    args = parser.parse_args(args)

    config = load_manifest(args.manifest)

    if args.validate:
        _print_validation(config)
        return

    if args.sample:
        if not args.clip:
            parser.error("--sample requires --clip")
        if args.fps <= 0:
            parser.error("--fps must be > 0")
        samples = sample_timeline(_find_clip(config, args.clip), fps=args.fps)
        if args.json:
            print(json.dumps([{"t": t, **d.to_dict()} for t, d in samples], indent=2))
            return
        print(f"{args.clip}: {len(samples)} samples at {args.fps:g}fps")
        for t, delta in samples:
            print(
                f"  {t:7.3f}s  opacity={delta.opacity:.3f}  scale={delta.scale:.3f}  "
                f"tx={delta.translate_x:.1f}%  ty={delta.translate_y:.1f}%"
            )
        return

    if args.time is None:
        parser.error("--time is required (unless using --validate or --sample)")

    styles = render_scene(config, args.time)
    if args.clip:
        _find_clip(config, args.clip)
        styles = [s for s in styles if s["id"] == args.clip]

    if args.json:
        print(json.dumps(styles, indent=2))
    else:
        _print_styles(styles, args.time)


if __name__ == "__main__":
    main()
