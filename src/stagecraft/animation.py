"""Timeline animation evaluator.

Turns a playhead time plus a clip's enter/exit animation config into a
per-frame style delta. The evaluator is a pure function of (clip, t):
safe to call every frame for every visible clip, and it never raises.

Both phases are reduced to one "visibility" parameter t_vis in [0, 1]:
  - 1 means fully shown / settled.
  - 0 means hidden / at the initial pose.
Enter ramps t_vis up from 0 at clip start; exit ramps it down to 0 at
clip end. One formula per animation type therefore serves both phases.

Clip dict fields read here (as normalized by manifest.load_manifest):
  - type: "text", "image" or "shape".
  - start, end: timeline window in seconds, end > start.
  - text: source text for text clips (falls back to "name").
  - animation: {"enter": config?, "exit": config?}, each config being
    {type, duration, direction?, easing?}.

Overlapping phases (enter_duration + exit_duration > clip length) are
folded enter-then-exit. Opacity and scale multiply, translations add,
and single-valued channels (blur radius, clip-path, typewriter text)
take the exit phase's value.
"""

import math
from dataclasses import asdict, dataclass

import numpy as np

from .common import as_number, fmt_num
from .easing import get_easing


ANIMATION_TYPES = {"fade", "slide", "zoom", "bounce", "wipe", "blur", "typewriter"}

DIRECTIONS = {"left", "right", "top", "bottom"}

DEFAULT_DIRECTION = "left"

SLIDE_DISTANCE_PCT = 100.0   # slide travel, percent of the element's own size
BOUNCE_HEIGHT_PX = 20.0
MAX_BLUR_PX = 20.0
TYPEWRITER_CURSOR = "|"


# ── Delta type ───────────────────────────────────────────────────


@dataclass(frozen=True)
class AnimationDelta:
    """Style changes an animation contributes at one instant.

    opacity and scale are multipliers. translate_x/translate_y are in
    percent of the element's own size; offset_y is in pixels (negative
    is up). blur, clip_path and text are None when untouched.
    """

    opacity: float = 1.0
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0
    offset_y: float = 0.0
    blur: float | None = None
    clip_path: str | None = None
    text: str | None = None

    def merge(self, other: "AnimationDelta") -> "AnimationDelta":
        """Fold another delta on top of this one (other wins on single values)."""
        return AnimationDelta(
            opacity=self.opacity * other.opacity,
            scale=self.scale * other.scale,
            translate_x=self.translate_x + other.translate_x,
            translate_y=self.translate_y + other.translate_y,
            offset_y=self.offset_y + other.offset_y,
            blur=other.blur if other.blur is not None else self.blur,
            clip_path=other.clip_path if other.clip_path is not None else self.clip_path,
            text=other.text if other.text is not None else self.text,
        )

    @property
    def is_identity(self) -> bool:
        return self == IDENTITY

    def to_dict(self) -> dict:
        return asdict(self)


IDENTITY = AnimationDelta()


# ── Phase progress ───────────────────────────────────────────────


def _phase_config(clip: dict, phase: str) -> dict | None:
    animation = clip.get("animation")
    if not isinstance(animation, dict):
        return None
    config = animation.get(phase)
    return config if isinstance(config, dict) else None


def _phase_duration(config) -> float | None:
    if config is None:
        return None
    duration = as_number(config.get("duration"))
    if duration is None or duration <= 0:
        return None
    return duration


def enter_progress(clip: dict, t: float) -> float | None:
    """Raw enter progress in [0, 1), or None when the enter phase is inactive."""
    config = _phase_config(clip, "enter")
    duration = _phase_duration(config)
    start = as_number(clip.get("start"))
    if duration is None or start is None:
        return None
    elapsed = t - start
    if elapsed >= duration:
        return None
    return max(0.0, elapsed / duration)


def exit_progress(clip: dict, t: float) -> float | None:
    """Raw exit progress in [0, 1], or None when the exit phase is inactive."""
    config = _phase_config(clip, "exit")
    duration = _phase_duration(config)
    end = as_number(clip.get("end"))
    if duration is None or end is None:
        return None
    remaining = end - t
    if remaining >= duration:
        return None
    return min(1.0, 1 - remaining / duration)


# ── Per-type formulas ────────────────────────────────────────────


def _slide(t_vis: float, direction: str) -> AnimationDelta:
    offset = (1 - t_vis) * SLIDE_DISTANCE_PCT
    dx = dy = 0.0
    if direction == "left":
        dx = -offset
    elif direction == "right":
        dx = offset
    elif direction == "top":
        dy = -offset
    elif direction == "bottom":
        dy = offset
    return AnimationDelta(opacity=t_vis, translate_x=dx, translate_y=dy)


def _wipe(t_vis: float, direction: str) -> AnimationDelta:
    # Reveal travels toward `direction`, so the inset sits on the far side.
    pct = f"{fmt_num((1 - t_vis) * 100)}%"
    insets = {
        "left": f"inset(0 {pct} 0 0)",
        "right": f"inset(0 0 0 {pct})",
        "top": f"inset(0 0 {pct} 0)",
        "bottom": f"inset({pct} 0 0 0)",
    }
    return AnimationDelta(clip_path=insets.get(direction))


def _bounce(t_vis: float) -> AnimationDelta:
    lift = abs(math.sin(t_vis * 2 * math.pi)) * BOUNCE_HEIGHT_PX * (1 - t_vis)
    return AnimationDelta(opacity=t_vis, scale=t_vis, offset_y=-lift)


def _typewriter(t_vis: float, clip: dict) -> AnimationDelta:
    if clip.get("type") != "text":
        return AnimationDelta(opacity=t_vis)
    source = source_text(clip)
    count = max(0, math.floor(t_vis * len(source)))
    text = source[:count]
    if t_vis < 1:
        text += TYPEWRITER_CURSOR
    return AnimationDelta(text=text)


def delta_for(anim_type, t_vis: float, config: dict, clip: dict) -> AnimationDelta:
    """Style delta for one animation type at visibility t_vis.

    Unknown types contribute nothing.
    """
    direction = config.get("direction")
    if not isinstance(direction, str) or not direction:
        direction = DEFAULT_DIRECTION
    if anim_type == "fade":
        return AnimationDelta(opacity=t_vis)
    if anim_type == "slide":
        return _slide(t_vis, direction)
    if anim_type == "zoom":
        return AnimationDelta(opacity=t_vis, scale=t_vis)
    if anim_type == "bounce":
        return _bounce(t_vis)
    if anim_type == "wipe":
        return _wipe(t_vis, direction)
    if anim_type == "blur":
        return AnimationDelta(opacity=t_vis, blur=(1 - t_vis) * MAX_BLUR_PX)
    if anim_type == "typewriter":
        return _typewriter(t_vis, clip)
    return IDENTITY


# ── Phase evaluation ─────────────────────────────────────────────


def enter_delta(clip: dict, t: float) -> AnimationDelta:
    """Delta contributed by the enter phase at time t."""
    progress = enter_progress(clip, t)
    if progress is None:
        return IDENTITY
    config = _phase_config(clip, "enter")
    t_vis = get_easing(config.get("easing"))(progress)
    return delta_for(config.get("type"), t_vis, config, clip)


def exit_delta(clip: dict, t: float) -> AnimationDelta:
    """Delta contributed by the exit phase at time t."""
    progress = exit_progress(clip, t)
    if progress is None:
        return IDENTITY
    config = _phase_config(clip, "exit")
    t_vis = get_easing(config.get("easing"))(1 - progress)
    return delta_for(config.get("type"), t_vis, config, clip)


def source_text(clip: dict) -> str:
    """The clip's unanimated text content."""
    text = clip.get("text")
    if text is None:
        text = clip.get("name", "")
    return str(text)


def evaluate(clip: dict, t: float) -> tuple[AnimationDelta, str]:
    """Evaluate a clip's animations at playhead time t.

    Returns:
        (delta, resolved_text). resolved_text is the typewriter-truncated
        text while a typewriter phase is active, else the source text.
    """
    if not isinstance(clip, dict) or as_number(t) is None:
        return IDENTITY, ""
    delta = enter_delta(clip, t).merge(exit_delta(clip, t))
    text = delta.text if delta.text is not None else source_text(clip)
    return delta, text


# ── Timeline helpers ─────────────────────────────────────────────


def is_visible(clip: dict, t: float) -> bool:
    """True when t falls inside the clip's [start, end) window."""
    start = as_number(clip.get("start"))
    end = as_number(clip.get("end"))
    if start is None or end is None:
        return False
    return start <= t < end


def sample_timeline(clip: dict, fps: float = 30) -> list[tuple[float, AnimationDelta]]:
    """Evaluate a clip on a regular frame grid across its window.

    Used for scrub previews and for checking animation curves offline.
    Returns a list of (t, delta) for t in [start, end) stepped by 1/fps.
    """
    if fps <= 0:
        raise ValueError(f"fps must be > 0, got {fps!r}")
    start, end = clip["start"], clip["end"]
    # Integer frame indices; a float step can land on or past `end`.
    frames = math.ceil((end - start) * fps)
    times = start + np.arange(max(0, frames)) / fps
    return [(float(t), evaluate(clip, float(t))[0]) for t in times if t < end]

