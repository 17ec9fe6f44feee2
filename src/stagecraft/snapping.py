"""Default snap resolver for move gestures.

Snaps an element's box to the canvas center lines and edges when it
comes within `threshold` pixels, and reports which guide lines to
draw. Center alignment is tried first, then the near edge, then the
far edge; each axis is resolved independently.

Any callable with the signature of snap_position() can be passed to the
transform controller instead.
"""

DEFAULT_SNAP_THRESHOLD = 10


def _snap_axis(
    pos: float, size: float, extent: float, threshold: float,
) -> tuple[float, float | None]:
    """Snap one axis. Returns (new_pos, guide_position_or_None)."""
    center = pos + size / 2
    if abs(center - extent / 2) < threshold:
        return extent / 2 - size / 2, extent / 2
    if abs(pos) < threshold:
        return 0.0, 0.0
    if abs(pos + size - extent) < threshold:
        return extent - size, extent
    return pos, None


def snap_position(
    x: float,
    y: float,
    width: float,
    height: float,
    canvas_width: float,
    canvas_height: float,
    threshold: float = DEFAULT_SNAP_THRESHOLD,
) -> dict:
    """Snap a box to canvas alignment lines.

    Args:
        x, y: Proposed top-left position.
        width, height: Box size.
        canvas_width, canvas_height: Canvas extent.
        threshold: Snap distance in pixels.

    Returns:
        {"x": float, "y": float, "guides": {"vertical"?: float,
        "horizontal"?: float}}. A vertical guide is an x position,
        a horizontal guide a y position.
    """
    new_x, vertical = _snap_axis(x, width, canvas_width, threshold)
    new_y, horizontal = _snap_axis(y, height, canvas_height, threshold)

    guides = {}
    if vertical is not None:
        guides["vertical"] = vertical
    if horizontal is not None:
        guides["horizontal"] = horizontal
    return {"x": new_x, "y": new_y, "guides": guides}


def make_snap_resolver(threshold: float = DEFAULT_SNAP_THRESHOLD):
    """Bind a threshold, returning a resolver with the 6-argument signature."""
    def resolve(x, y, width, height, canvas_width, canvas_height):
        return snap_position(
            x, y, width, height, canvas_width, canvas_height, threshold=threshold,
        )
    return resolve
