"""Effects composition pipeline.

Merges three inputs into one style fragment:
  - a legacy scalar filter dict (brightness, contrast, saturate,
    grayscale, blur), appended first in that fixed order;
  - an ordered effect stack, appended after in list order;
  - a blend mode, passed through unchanged.

Every effect carries a stable `kind` tag assigned at creation time
(make_effect) and independent of its display label. Effects saved
before kinds existed are recognized by their label via LEGACY_LABELS.

Effects that cannot be expressed as a single filter primitive (true
pixelation, overlay duplication, texture overlays) are returned as
rendering hints instead of being appended to the filter chain.

Composition never raises: disabled effects, unknown kinds and
missing or non-numeric params are skipped.
"""

import uuid

from .common import as_number, fmt_num


# ── Effect kinds ─────────────────────────────────────────────────
# kind -> (category type, display label, default params). The default
# params define the fixed field set each kind accepts.

EFFECT_KINDS = {
    "hue_rotate": ("color", "Hue Rotate", {"degree": 90}),
    "sepia": ("color", "Sepia", {"amount": 1}),
    "invert": ("color", "Invert", {"amount": 1}),
    "gaussian_blur": ("blur", "Gaussian Blur", {"radius": 10}),
    "chromatic_aberration": ("distortion", "Chromatic Aberration", {}),
    "pixelate": ("distortion", "Pixelate", {"size": 10}),
    "vignette": ("color", "Vignette", {"amount": 1}),
    "glitch": ("distortion", "Glitch", {"intensity": 1}),
    "vhs": ("retro", "VHS", {"intensity": 0.5}),
    "film_grain": ("retro", "Film Grain", {"intensity": 0.5}),
    "halftone": ("retro", "Halftone", {"dot_size": 4}),
}

EFFECT_TYPES = {"color", "blur", "distortion", "retro"}

LEGACY_LABELS = {label: kind for kind, (_, label, _) in EFFECT_KINDS.items()}

# Param names used by older saves.
LEGACY_PARAM_NAMES = {"dotSize": "dot_size"}
_LEGACY_BY_CURRENT = {v: k for k, v in LEGACY_PARAM_NAMES.items()}

BLEND_MODES = {
    "normal", "multiply", "screen", "overlay", "darken", "lighten",
    "difference", "exclusion", "color-dodge", "color-burn",
}

# (field, neutral value, format). Order is the emitted order.
LEGACY_FILTER_FIELDS = [
    ("brightness", 1, "brightness({})"),
    ("contrast", 1, "contrast({})"),
    ("saturate", 1, "saturate({})"),
    ("grayscale", 0, "grayscale({})"),
    ("blur", 0, "blur({}px)"),
]

CHROMATIC_ABERRATION_FILTER = {
    "id": "chromatic-aberration",
    "primitives": [
        {"op": "offset", "channel": "red", "dx": 2, "dy": 0},
        {"op": "offset", "channel": "blue", "dx": -2, "dy": 0},
        {"op": "blend", "mode": "screen", "inputs": ["red", "blue"]},
    ],
}


# ── Effect creation ──────────────────────────────────────────────


def make_effect(
    kind: str,
    params: dict | None = None,
    enabled: bool = True,
    effect_id: str | None = None,
    name: str | None = None,
) -> dict:
    """Create an effect dict for `kind` with default params filled in.

    Raises:
        ValueError: Unknown kind or a param the kind doesn't accept.
    """
    if kind not in EFFECT_KINDS:
        raise ValueError(
            f"Unknown effect kind '{kind}'. Valid: {sorted(EFFECT_KINDS)}"
        )
    effect_type, label, defaults = EFFECT_KINDS[kind]

    merged = dict(defaults)
    for key, value in (params or {}).items():
        key = LEGACY_PARAM_NAMES.get(key, key)
        if key not in defaults:
            raise ValueError(
                f"Effect '{kind}': unknown param '{key}'. "
                f"Valid: {sorted(defaults)}"
            )
        merged[key] = value

    return {
        "id": effect_id or uuid.uuid4().hex,
        "kind": kind,
        "type": effect_type,
        "name": name or label,
        "enabled": bool(enabled),
        "params": merged,
    }


def resolve_kind(effect: dict) -> str | None:
    """Return the effect's stable kind, migrating from its label if needed."""
    kind = effect.get("kind")
    if isinstance(kind, str) and kind in EFFECT_KINDS:
        return kind
    name = effect.get("name")
    if isinstance(name, str):
        return LEGACY_LABELS.get(name)
    return None


def is_enabled(effect: dict) -> bool:
    # Older saves spell the flag isEnabled.
    return effect.get("enabled", effect.get("isEnabled")) is True


# ── Primitive builders ───────────────────────────────────────────
# Each returns (filter_string | None, hint | None) for one effect.


def _param(effect: dict, name: str) -> float | None:
    params = effect.get("params")
    if not isinstance(params, dict):
        return None
    value = params.get(name)
    if value is None and name in _LEGACY_BY_CURRENT:
        value = params.get(_LEGACY_BY_CURRENT[name])
    return as_number(value)


def _scalar_filter(param: str, template: str):
    def build(effect):
        value = _param(effect, param)
        if value is None:
            return None, None
        return template.format(fmt_num(value)), None
    return build


def _chromatic_aberration(effect):
    return f"url(#{CHROMATIC_ABERRATION_FILTER['id']})", None


def _pixelate(effect):
    size = _param(effect, "size")
    if size is None or size <= 1:
        return None, None
    return None, {"kind": "pixelate", "size": size}


def _glitch(effect):
    intensity = _param(effect, "intensity")
    if intensity is None:
        return None, None
    return None, {"kind": "glitch", "intensity": intensity, "offset_px": intensity * 2}


def _overlay_hint(kind: str, param: str):
    def build(effect):
        value = _param(effect, param)
        if value is None:
            return None, None
        return None, {"kind": kind, param: value}
    return build


EFFECT_BUILDERS = {
    "hue_rotate": _scalar_filter("degree", "hue-rotate({}deg)"),
    "sepia": _scalar_filter("amount", "sepia({})"),
    "invert": _scalar_filter("amount", "invert({})"),
    "gaussian_blur": _scalar_filter("radius", "blur({}px)"),
    "chromatic_aberration": _chromatic_aberration,
    "pixelate": _pixelate,
    "vignette": _overlay_hint("vignette", "amount"),
    "glitch": _glitch,
    "vhs": _overlay_hint("vhs", "intensity"),
    "film_grain": _overlay_hint("film_grain", "intensity"),
    "halftone": _overlay_hint("halftone", "dot_size"),
}


# ── Composition ──────────────────────────────────────────────────


def legacy_filter_chain(legacy_filter: dict | None) -> list[str]:
    """Filter primitives for the legacy scalar fields that are off neutral."""
    if not isinstance(legacy_filter, dict):
        return []
    chain = []
    for field, neutral, template in LEGACY_FILTER_FIELDS:
        value = as_number(legacy_filter.get(field))
        if value is None or value == neutral:
            continue
        chain.append(template.format(fmt_num(value)))
    return chain


def compose_effects(
    legacy_filter: dict | None = None,
    effects: list[dict] | None = None,
    blend_mode: str | None = None,
    extra_filters: list[str] | tuple = (),
) -> dict:
    """Compose legacy filter, effect stack and blend mode into one fragment.

    Args:
        legacy_filter: Scalar filter dict, or None.
        effects: Ordered effect dicts. Only enabled ones contribute.
        blend_mode: Passed through unchanged; empty/None means unset.
        extra_filters: Filter primitives placed before everything else
            (the animation blur, when composing a full clip style).

    Returns:
        {"filter": str, "mix_blend_mode": str | None,
         "hints": [dict, ...], "svg_filters": [dict, ...]}
    """
    chain = [f for f in extra_filters if f]
    chain.extend(legacy_filter_chain(legacy_filter))

    hints = []
    svg_filters = []
    for effect in effects or []:
        if not isinstance(effect, dict) or not is_enabled(effect):
            continue
        kind = resolve_kind(effect)
        if kind is None:
            continue
        primitive, hint = EFFECT_BUILDERS[kind](effect)
        if primitive:
            chain.append(primitive)
        if hint:
            hints.append(hint)
        if kind == "chromatic_aberration" and CHROMATIC_ABERRATION_FILTER not in svg_filters:
            svg_filters.append(CHROMATIC_ABERRATION_FILTER)

    return {
        "filter": " ".join(chain),
        "mix_blend_mode": blend_mode or None,
        "hints": hints,
        "svg_filters": svg_filters,
    }
