"""Final style composition for one frame.

Merges a clip's committed geometry, its animation delta at time t and
its composed effects into the style description handed to the
rendering surface. Nothing here paints pixels.

The transform pivots about the element's top-left corner (see the frame
convention in geometry.py), so every style carries transform_origin
"0 0". Animation slide offsets are appended in percent of the element's
own size; bounce offsets in pixels.
"""

from .animation import evaluate, is_visible
from .common import fmt_num
from .effects import compose_effects
from .geometry import normalize_geometry


def build_transform(geometry: dict, delta) -> str:
    """CSS-style transform string for geometry plus an animation delta.

    Animation offsets come before the animation scale so a bounce lifts
    the element by its full pixel height whatever the animation scale.
    """
    parts = [
        f"translate({fmt_num(geometry['x'])}px, {fmt_num(geometry['y'])}px)",
        f"rotate({fmt_num(geometry['rotation'])}deg)",
        f"scale({fmt_num(geometry['scale'])})",
    ]
    if delta.translate_x or delta.translate_y:
        parts.append(
            f"translate({fmt_num(delta.translate_x)}%, {fmt_num(delta.translate_y)}%)"
        )
    if delta.offset_y:
        parts.append(f"translateY({fmt_num(delta.offset_y)}px)")
    if delta.scale != 1:
        parts.append(f"scale({fmt_num(delta.scale)})")
    return " ".join(parts)


def compose_clip_style(clip: dict, t: float) -> dict:
    """Compose the full render style of one clip at playhead time t.

    Returns:
        Dict with transform, transform_origin, opacity, width, height,
        filter, clip_path, mix_blend_mode, hints, svg_filters,
        background and text. text is None for non-text clips;
        background is the shape fill (None for other types).
    """
    geometry = normalize_geometry(clip.get("geometry"))
    delta, text = evaluate(clip, t)

    extra_filters = []
    if delta.blur:
        extra_filters.append(f"blur({fmt_num(delta.blur)}px)")
    fragment = compose_effects(
        clip.get("filter"),
        clip.get("effects"),
        clip.get("blend_mode"),
        extra_filters=extra_filters,
    )

    clip_type = clip.get("type")
    return {
        "transform": build_transform(geometry, delta),
        "transform_origin": "0 0",
        "opacity": geometry["opacity"] * delta.opacity,
        "width": geometry["width"],
        "height": geometry["height"],
        "filter": fragment["filter"],
        "clip_path": delta.clip_path,
        "mix_blend_mode": fragment["mix_blend_mode"],
        "hints": fragment["hints"],
        "svg_filters": fragment["svg_filters"],
        "background": clip.get("fill") if clip_type == "shape" else None,
        "text": text if clip_type == "text" else None,
    }


def render_scene(scene: dict, t: float) -> list[dict]:
    """Styles for every clip visible at time t, in z-order (manifest order).

    Each entry is the compose_clip_style() dict plus the clip's "id".
    """
    styles = []
    for clip in scene.get("clips", []):
        if not is_visible(clip, t):
            continue
        style = compose_clip_style(clip, t)
        style["id"] = clip.get("id")
        styles.append(style)
    return styles
