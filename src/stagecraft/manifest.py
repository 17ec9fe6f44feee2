"""Scene manifest loader.

Parses YAML scene manifests, resolves ${path} variables, converts hex
colors, fills geometry defaults, assigns stable effect kinds and
validates clip windows.

Scene manifest schema:
  canvas:
    width: 1080
    height: 1920
    background: "#111111"       # optional
    snap_threshold: 10          # optional
  paths:
    media: "/data/media"
  clips:
    - id: title
      type: text                # text | image | shape
      text: "Hello"
      start: 0
      end: 5
      geometry: {x: 0, y: 0, width: 300, height: 120, rotation: 0, scale: 1, opacity: 1}
      filter: {brightness: 1.2}
      effects:
        - {kind: hue_rotate, params: {degree: 45}}
        - {name: Sepia, enabled: false}
      blend_mode: multiply
      animation:
        enter: {type: fade, duration: 1, easing: ease-out}
        exit: {type: slide, duration: 0.5, direction: left}

Animation type, easing and direction names are not checked here:
unknown names degrade to "no change" / ease-out at evaluation time.
"""

from pathlib import Path

import yaml

from .common import as_number, parse_hex_color, resolve_path_vars, rgb_to_css
from .easing import DEFAULT_EASING
from .effects import BLEND_MODES, make_effect, resolve_kind
from .geometry import DEFAULT_GEOMETRY, MIN_SCALE, MIN_SIZE, normalize_rotation
from .snapping import DEFAULT_SNAP_THRESHOLD


VALID_CLIP_TYPES = {"text", "image", "shape"}

ANIMATION_PHASES = ("enter", "exit")

LEGACY_FILTER_KEYS = {"brightness", "contrast", "saturate", "grayscale", "blur"}

DEFAULT_BACKGROUND = "#000000"


# ── Manifest loading ──────────────────────────────────────────────


def load_manifest(manifest_path: str | Path) -> dict:
    """Load, validate, and normalize a scene manifest.

    Processing pipeline:
      1. Parse YAML.
      2. Validate canvas settings, parse background as RGB.
      3. Resolve ${path} variables in clip src values.
      4. Validate and normalize each clip (window, geometry, effects,
         blend mode, animation phases).
      5. Check clip ids are unique.

    Args:
        manifest_path: Path to the YAML scene manifest.

    Returns:
        Normalized config dict: {"canvas": {...}, "clips": [...]}.

    Raises:
        ValueError: Missing/invalid fields.
        FileNotFoundError: Missing manifest file.
    """
    with open(manifest_path) as f:
        raw = yaml.safe_load(f)
    return normalize_scene(raw)


def normalize_scene(raw) -> dict:
    """Validate and normalize an already-parsed manifest dict."""
    if not isinstance(raw, dict):
        raise ValueError("Scene manifest: top level must be a mapping")
    if "canvas" not in raw:
        raise ValueError("Scene manifest: missing required 'canvas' section")

    config = {"canvas": _normalize_canvas(raw["canvas"])}

    paths = raw.get("paths", {}) or {}

    clips_raw = raw.get("clips", []) or []
    if not isinstance(clips_raw, list):
        raise ValueError("Scene manifest: 'clips' must be a list")

    clips = []
    ids_seen = {}
    for i, clip in enumerate(clips_raw):
        normalized = _normalize_clip(clip, i, paths)
        clip_id = normalized["id"]
        if clip_id in ids_seen:
            raise ValueError(
                f"Clip {i}: duplicate id '{clip_id}' "
                f"(also used by clip {ids_seen[clip_id]})"
            )
        ids_seen[clip_id] = i
        clips.append(normalized)
    config["clips"] = clips

    return config


def _normalize_canvas(canvas) -> dict:
    if not isinstance(canvas, dict):
        raise ValueError("Scene manifest: 'canvas' must be a mapping")
    for key in ("width", "height"):
        value = as_number(canvas.get(key))
        if value is None or value <= 0:
            raise ValueError(
                f"Scene manifest: canvas.{key} must be a positive number, "
                f"got {canvas.get(key)!r}"
            )

    threshold = canvas.get("snap_threshold", DEFAULT_SNAP_THRESHOLD)
    if as_number(threshold) is None or threshold < 0:
        raise ValueError(
            f"Scene manifest: canvas.snap_threshold must be >= 0, got {threshold!r}"
        )

    return {
        "width": float(canvas["width"]),
        "height": float(canvas["height"]),
        "background": parse_hex_color(str(canvas.get("background", DEFAULT_BACKGROUND))),
        "snap_threshold": float(threshold),
    }


# ── Clip validation ──────────────────────────────────────────────


def _normalize_clip(clip, index: int, paths: dict) -> dict:
    """Validate one clip and return its normalized copy."""
    if not isinstance(clip, dict):
        raise ValueError(f"Clip {index}: must be a mapping")

    clip_type = clip.get("type")
    if not isinstance(clip_type, str) or clip_type not in VALID_CLIP_TYPES:
        raise ValueError(
            f"Clip {index}: invalid type '{clip_type}'. "
            f"Valid: {sorted(VALID_CLIP_TYPES)}"
        )
    prefix = f"Clip {index} ({clip_type})"

    clip_id = clip.get("id")
    if not isinstance(clip_id, str) or not clip_id.strip():
        raise ValueError(f"{prefix}: 'id' must be a non-empty string")

    start = as_number(clip.get("start"))
    end = as_number(clip.get("end"))
    if start is None or end is None:
        raise ValueError(f"{prefix}: 'start' and 'end' are required numbers")
    if start < 0:
        raise ValueError(f"{prefix}: start must be >= 0, got {start}")
    if end <= start:
        raise ValueError(f"{prefix}: end ({end}) must be > start ({start})")

    normalized = {
        "id": clip_id,
        "type": clip_type,
        "name": clip.get("name", clip_id),
        "start": start,
        "end": end,
        "geometry": _normalize_geometry(clip.get("geometry"), prefix),
        "filter": _normalize_filter(clip.get("filter"), prefix),
        "effects": _normalize_effects(clip.get("effects"), prefix),
        "blend_mode": _normalize_blend_mode(clip.get("blend_mode"), prefix),
        "animation": _normalize_animation(clip.get("animation"), prefix),
    }

    if clip_type == "text":
        text = clip.get("text", normalized["name"])
        if not isinstance(text, str):
            raise ValueError(f"{prefix}: 'text' must be a string")
        normalized["text"] = text
    elif clip_type == "image" and clip.get("src") is not None:
        normalized["src"] = resolve_path_vars(str(clip["src"]), paths)
    elif clip_type == "shape" and clip.get("fill") is not None:
        try:
            normalized["fill"] = rgb_to_css(parse_hex_color(str(clip["fill"])))
        except ValueError as e:
            raise ValueError(f"{prefix}: {e}") from e

    return normalized


def _normalize_geometry(geometry, prefix: str) -> dict:
    """Fill geometry defaults and clamp to the model floors."""
    if geometry is None:
        geometry = {}
    if not isinstance(geometry, dict):
        raise ValueError(f"{prefix}: 'geometry' must be a mapping")

    result = dict(DEFAULT_GEOMETRY)
    for key, value in geometry.items():
        if key not in DEFAULT_GEOMETRY:
            raise ValueError(
                f"{prefix}: unknown geometry field '{key}'. "
                f"Valid: {sorted(DEFAULT_GEOMETRY)}"
            )
        number = as_number(value)
        if number is None:
            raise ValueError(f"{prefix}: geometry.{key} must be a number, got {value!r}")
        result[key] = number

    result["width"] = max(MIN_SIZE, result["width"])
    result["height"] = max(MIN_SIZE, result["height"])
    result["scale"] = max(MIN_SCALE, result["scale"])
    result["rotation"] = normalize_rotation(result["rotation"])
    result["opacity"] = min(1.0, max(0.0, result["opacity"]))
    return result


def _normalize_filter(legacy_filter, prefix: str) -> dict | None:
    if legacy_filter is None:
        return None
    if not isinstance(legacy_filter, dict):
        raise ValueError(f"{prefix}: 'filter' must be a mapping")
    unknown = set(legacy_filter) - LEGACY_FILTER_KEYS
    if unknown:
        raise ValueError(
            f"{prefix}: unknown filter field(s) {sorted(unknown)}. "
            f"Valid: {sorted(LEGACY_FILTER_KEYS)}"
        )
    return dict(legacy_filter)


def _normalize_effects(effects, prefix: str) -> list[dict]:
    """Give every effect a stable kind and default params.

    Param values are kept as written; non-numeric ones are skipped at
    composition time rather than rejected here.
    """
    if effects is None:
        return []
    if not isinstance(effects, list):
        raise ValueError(f"{prefix}: 'effects' must be a list")

    result = []
    for j, effect in enumerate(effects):
        item_prefix = f"{prefix}, effect {j}"
        if not isinstance(effect, dict):
            raise ValueError(f"{item_prefix}: must be a mapping")
        kind = resolve_kind(effect)
        if kind is None:
            raise ValueError(
                f"{item_prefix}: unknown effect "
                f"(kind={effect.get('kind')!r}, name={effect.get('name')!r})"
            )
        params = effect.get("params") or {}
        if not isinstance(params, dict):
            raise ValueError(f"{item_prefix}: 'params' must be a mapping")
        enabled = effect.get("enabled", effect.get("isEnabled", True))
        try:
            result.append(make_effect(
                kind,
                params=params,
                enabled=enabled is True,
                effect_id=effect.get("id"),
                name=effect.get("name"),
            ))
        except ValueError as e:
            raise ValueError(f"{item_prefix}: {e}") from e
    return result


def _normalize_blend_mode(blend_mode, prefix: str) -> str:
    if blend_mode is None:
        return "normal"
    if not isinstance(blend_mode, str) or blend_mode not in BLEND_MODES:
        raise ValueError(
            f"{prefix}: invalid blend_mode '{blend_mode}'. "
            f"Valid: {sorted(BLEND_MODES)}"
        )
    return blend_mode


def _normalize_animation(animation, prefix: str) -> dict:
    """Validate enter/exit phase configs (structure and duration only)."""
    if animation is None:
        return {}
    if not isinstance(animation, dict):
        raise ValueError(f"{prefix}: 'animation' must be a mapping")

    result = {}
    for phase in ANIMATION_PHASES:
        config = animation.get(phase)
        if config is None:
            continue
        if not isinstance(config, dict):
            raise ValueError(f"{prefix}: animation.{phase} must be a mapping")
        duration = as_number(config.get("duration"))
        if duration is None or duration <= 0:
            raise ValueError(
                f"{prefix}: animation.{phase}.duration must be a positive number, "
                f"got {config.get('duration')!r}"
            )
        result[phase] = {
            "type": config.get("type"),
            "duration": duration,
            "direction": config.get("direction"),
            "easing": config.get("easing", DEFAULT_EASING),
        }
    return result
