"""Geometry transform controller — pointer drags to move/resize/rotate.

Element frame convention: a point p in the element's local frame (top-left
at the origin, x right, y down) lands on screen at

    origin + (x, y) + R(rotation) · (scale · p)

where R is the clockwise (y-down) rotation matrix and `origin` is the
canvas' screen offset. Width and height are layout units; scale is a
uniform multiplier set by corner handles.

A gesture is an explicit GestureSession value returned by begin_move,
begin_resize or begin_rotate and passed back into pointer_move. The
functions never mutate their inputs and pointer_move never raises.
TransformController wraps them for one element: it owns at most one
open session, keeps the live geometry and snap guides, and reports the
committed patch when the gesture ends.

Handles:
  - corners (ne, nw, se, sw): uniform scale from the pointer's distance
    to the element center. Width/height are untouched.
  - edges (n, s, e, w): one-axis resize in the element's local frame.
    Dragging w or n shifts the origin so the opposite edge stays put.

Rotation turns the element about its visual center: the rotate patch
moves x, y to compensate for the top-left pivot.
"""

import math
from dataclasses import dataclass, field

import numpy as np

from .common import as_number
from .snapping import snap_position


EDGE_HANDLES = {"n", "s", "e", "w"}
CORNER_HANDLES = {"ne", "nw", "se", "sw"}
HANDLES = EDGE_HANDLES | CORNER_HANDLES

GESTURE_KINDS = {"move", "resize", "rotate"}

MIN_SIZE = 20.0
MIN_SCALE = 0.1
ROTATION_SNAP_DEG = 15.0

DEFAULT_GEOMETRY = {
    "x": 0.0, "y": 0.0,
    "width": 100.0, "height": 100.0,
    "rotation": 0.0, "scale": 1.0, "opacity": 1.0,
}


class GestureError(RuntimeError):
    """A gesture was started while another one is still open."""


@dataclass(frozen=True)
class GestureSession:
    """State captured when a gesture starts. Lives until pointer up."""

    kind: str
    pointer_start: tuple[float, float]
    initial: dict = field(default_factory=dict)
    handle: str | None = None
    center: tuple[float, float] | None = None
    start_distance: float = 0.0
    start_angle: float = 0.0

    @property
    def is_corner(self) -> bool:
        return self.handle in CORNER_HANDLES


# ── Frame math ───────────────────────────────────────────────────


def normalize_rotation(degrees: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = degrees % 360.0
    # -1e-17 % 360 rounds up to exactly 360.0.
    return 0.0 if wrapped >= 360.0 else wrapped


def snap_rotation(degrees: float, step: float = ROTATION_SNAP_DEG) -> float:
    """Round to the nearest multiple of `step` (halves round up) and wrap."""
    return normalize_rotation(math.floor(degrees / step + 0.5) * step)


def rotation_matrix(degrees: float) -> np.ndarray:
    """2x2 rotation for the y-down screen frame (positive = clockwise)."""
    rad = math.radians(degrees)
    cos, sin = math.cos(rad), math.sin(rad)
    return np.array([[cos, -sin], [sin, cos]])


def to_local(dx: float, dy: float, rotation: float) -> tuple[float, float]:
    """Rotate a screen-space delta into the element's local frame."""
    local = rotation_matrix(rotation).T @ np.array([dx, dy])
    return float(local[0]), float(local[1])


def to_screen(lx: float, ly: float, rotation: float) -> tuple[float, float]:
    """Rotate a local-frame delta back into screen space."""
    screen = rotation_matrix(rotation) @ np.array([lx, ly])
    return float(screen[0]), float(screen[1])


def normalize_geometry(geometry: dict | None) -> dict:
    """Fill defaults and coerce numeric fields; non-numeric values fall back."""
    result = dict(DEFAULT_GEOMETRY)
    for key in DEFAULT_GEOMETRY:
        value = as_number((geometry or {}).get(key))
        if value is not None:
            result[key] = value
    return result


def element_corners(geometry: dict, origin: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    """Screen positions of the nw, ne, se, sw corners, shape (4, 2)."""
    g = normalize_geometry(geometry)
    w, h, s = g["width"], g["height"], g["scale"]
    local = np.array([[0, 0], [w, 0], [w, h], [0, h]], dtype=float) * s
    screen = local @ rotation_matrix(g["rotation"]).T
    return screen + np.array([origin[0] + g["x"], origin[1] + g["y"]])


def element_center(geometry: dict, origin: tuple[float, float] = (0.0, 0.0)) -> tuple[float, float]:
    """Screen-space center of the element's visual box."""
    center = element_corners(geometry, origin).mean(axis=0)
    return float(center[0]), float(center[1])


def edge_midpoint(geometry: dict, edge: str, origin: tuple[float, float] = (0.0, 0.0)) -> tuple[float, float]:
    """Screen-space midpoint of one edge ('n', 's', 'e' or 'w')."""
    corners = element_corners(geometry, origin)
    pairs = {"n": (0, 1), "e": (1, 2), "s": (2, 3), "w": (3, 0)}
    a, b = pairs[edge]
    mid = (corners[a] + corners[b]) / 2
    return float(mid[0]), float(mid[1])


# ── Gesture start ────────────────────────────────────────────────


def _point(pointer) -> tuple[float, float]:
    return float(pointer[0]), float(pointer[1])


def begin_move(geometry: dict, pointer) -> GestureSession:
    """Open a move gesture; snapshots the initial position."""
    return GestureSession(
        kind="move",
        pointer_start=_point(pointer),
        initial=normalize_geometry(geometry),
    )


def begin_resize(
    geometry: dict,
    pointer,
    handle: str,
    origin: tuple[float, float] = (0.0, 0.0),
) -> GestureSession:
    """Open a resize gesture from `handle`.

    Corner handles also record the element center and the initial
    pointer-to-center distance used as the scale reference.

    Raises:
        ValueError: Unknown handle name.
    """
    if handle not in HANDLES:
        raise ValueError(
            f"Unknown resize handle '{handle}'. Valid: {sorted(HANDLES)}"
        )
    initial = normalize_geometry(geometry)
    start = _point(pointer)
    if handle in EDGE_HANDLES:
        return GestureSession(
            kind="resize", pointer_start=start, initial=initial, handle=handle,
        )

    center = element_center(initial, origin)
    return GestureSession(
        kind="resize",
        pointer_start=start,
        initial=initial,
        handle=handle,
        center=center,
        start_distance=math.hypot(start[0] - center[0], start[1] - center[1]),
    )


def begin_rotate(
    geometry: dict,
    pointer,
    origin: tuple[float, float] = (0.0, 0.0),
) -> GestureSession:
    """Open a rotate gesture; records the center and starting pointer angle."""
    initial = normalize_geometry(geometry)
    start = _point(pointer)
    center = element_center(initial, origin)
    return GestureSession(
        kind="rotate",
        pointer_start=start,
        initial=initial,
        center=center,
        start_angle=math.degrees(math.atan2(start[1] - center[1], start[0] - center[0])),
    )


# ── Pointer move ─────────────────────────────────────────────────


def _move(session, px, py, snap_resolver, canvas_size):
    g = session.initial
    sx, sy = session.pointer_start
    new_x = g["x"] + (px - sx)
    new_y = g["y"] + (py - sy)
    guides = {}
    if snap_resolver is not None and canvas_size is not None:
        # Snap the on-screen box, not the layout box.
        snapped = snap_resolver(
            new_x, new_y, g["width"] * g["scale"], g["height"] * g["scale"],
            canvas_size[0], canvas_size[1],
        )
        new_x, new_y = snapped["x"], snapped["y"]
        guides = dict(snapped.get("guides") or {})
    return {"x": new_x, "y": new_y}, guides


def _rotate(session, px, py, snap):
    g = session.initial
    cx, cy = session.center
    angle = math.degrees(math.atan2(py - cy, px - cx))
    rotation = normalize_rotation(g["rotation"] + angle - session.start_angle)
    if snap:
        rotation = snap_rotation(rotation)

    # The element turns about its top-left corner; move that corner so
    # the visual center stays under the rotate handle's pivot.
    half_w = g["width"] * g["scale"] / 2
    half_h = g["height"] * g["scale"] / 2
    old_dx, old_dy = to_screen(half_w, half_h, g["rotation"])
    new_dx, new_dy = to_screen(half_w, half_h, rotation)
    return {
        "rotation": rotation,
        "x": g["x"] + old_dx - new_dx,
        "y": g["y"] + old_dy - new_dy,
    }


def _scale_from_corner(session, px, py):
    if session.start_distance <= 0:
        return {"scale": session.initial["scale"]}
    cx, cy = session.center
    factor = math.hypot(px - cx, py - cy) / session.start_distance
    return {"scale": max(MIN_SCALE, session.initial["scale"] * factor)}


def resize_edge(initial: dict, handle: str, dx: float, dy: float) -> dict:
    """Resize one axis from an edge handle given a screen-space pointer delta.

    The delta is divided by the element's scale so the dragged edge
    follows the pointer; width and height stay in layout units.

    Returns a patch with width, height, x and y.
    """
    rotation = initial["rotation"]
    scale = max(MIN_SCALE, initial["scale"])
    local_dx, local_dy = to_local(dx / scale, dy / scale, rotation)
    width, height = initial["width"], initial["height"]

    d_width = d_height = 0.0
    if handle == "e":
        d_width = local_dx
    elif handle == "w":
        d_width = -local_dx
    elif handle == "s":
        d_height = local_dy
    elif handle == "n":
        d_height = -local_dy

    # Clamp the delta itself so the origin shift below stays consistent.
    if width + d_width < MIN_SIZE:
        d_width = MIN_SIZE - width
    if height + d_height < MIN_SIZE:
        d_height = MIN_SIZE - height

    shift_x = -d_width if handle == "w" else 0.0
    shift_y = -d_height if handle == "n" else 0.0
    screen_dx, screen_dy = to_screen(shift_x * scale, shift_y * scale, rotation)

    return {
        "width": width + d_width,
        "height": height + d_height,
        "x": initial["x"] + screen_dx,
        "y": initial["y"] + screen_dy,
    }


def pointer_move(
    session: GestureSession | None,
    pointer,
    snap: bool = False,
    snap_resolver=None,
    canvas_size: tuple[float, float] | None = None,
) -> tuple[dict, dict]:
    """Turn the current pointer position into a geometry patch.

    Args:
        session: The open gesture, or None (no-op).
        pointer: Current (x, y) pointer position in screen space.
        snap: Snap modifier held. Rotations round to 15 degrees.
        snap_resolver: Called as resolver(x, y, w, h, canvas_w, canvas_h)
            during moves; must return {"x", "y", "guides"}.
        canvas_size: (width, height) passed to the snap resolver.

    Returns:
        (patch, guides). patch holds only the keys this gesture changes;
        guides is non-empty only for snapped moves. Both are empty when
        there is no session or the pointer isn't a numeric pair.
    """
    if session is None:
        return {}, {}
    try:
        px, py = pointer
    except (TypeError, ValueError):
        return {}, {}
    px, py = as_number(px), as_number(py)
    if px is None or py is None:
        return {}, {}

    if session.kind == "move":
        return _move(session, px, py, snap_resolver, canvas_size)
    if session.kind == "rotate":
        return _rotate(session, px, py, snap), {}
    if session.kind == "resize":
        if session.is_corner:
            return _scale_from_corner(session, px, py), {}
        sx, sy = session.pointer_start
        return resize_edge(session.initial, session.handle, px - sx, py - sy), {}
    return {}, {}


# ── Controller ───────────────────────────────────────────────────


class TransformController:
    """Per-element gesture controller.

    Holds the element's live geometry and at most one open gesture.
    Geometry changes during the gesture; on pointer up the changed
    fields are reported once through `on_commit(element_id, patch)`.
    Partial changes are not rolled back when a gesture is abandoned.
    """

    def __init__(
        self,
        geometry: dict | None = None,
        canvas_size: tuple[float, float] = (1080, 1920),
        element_id: str | None = None,
        snap_resolver=snap_position,
        origin: tuple[float, float] = (0.0, 0.0),
        on_commit=None,
    ):
        self.element_id = element_id
        self.canvas_size = canvas_size
        self.snap_resolver = snap_resolver
        self.origin = origin
        self.on_commit = on_commit
        self._geometry = normalize_geometry(geometry)
        self.session: GestureSession | None = None
        self.guides: dict = {}

    @property
    def geometry(self) -> dict:
        return dict(self._geometry)

    @property
    def is_active(self) -> bool:
        return self.session is not None

    def _open(self, session: GestureSession) -> GestureSession:
        if self.session is not None:
            raise GestureError(
                f"Cannot start {session.kind}: a {self.session.kind} gesture is still open"
            )
        self.session = session
        return session

    def begin_move(self, pointer) -> GestureSession:
        return self._open(begin_move(self._geometry, pointer))

    def begin_resize(self, pointer, handle: str) -> GestureSession:
        return self._open(begin_resize(self._geometry, pointer, handle, self.origin))

    def begin_rotate(self, pointer) -> GestureSession:
        return self._open(begin_rotate(self._geometry, pointer, self.origin))

    def on_pointer_move(self, pointer, snap: bool = False) -> dict | None:
        """Apply the pointer position to the live geometry.

        Returns the applied patch, or None when no gesture is open.
        """
        if self.session is None:
            return None
        patch, guides = pointer_move(
            self.session, pointer, snap=snap,
            snap_resolver=self.snap_resolver, canvas_size=self.canvas_size,
        )
        self._geometry.update(patch)
        if self.session.kind == "move":
            self.guides = guides
        return patch

    def on_pointer_up(self) -> dict | None:
        """Close the open gesture and clear guides.

        Returns the committed patch (fields that differ from the gesture
        start), or None when no gesture was open.
        """
        if self.session is None:
            return None
        initial = self.session.initial
        patch = {
            key: value for key, value in self._geometry.items()
            if initial.get(key) != value
        }
        self.session = None
        self.guides = {}
        if patch and self.on_commit is not None:
            self.on_commit(self.element_id, patch)
        return patch
