"""stagecraft.common — shared utilities for scene composition.

Contains: color parsing, path variable resolution, numeric coercion
and small formatting helpers shared by the style composers.
"""

import math
import re
from numbers import Real


# ── Color utilities ────────────────────────────────────────────────

def parse_hex_color(hex_str: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' or 'RRGGBB' string to (R, G, B) tuple."""
    hex_str = hex_str.lstrip("#")
    if len(hex_str) != 6 or not all(c in "0123456789abcdefABCDEF" for c in hex_str):
        raise ValueError(f"Invalid hex color: '#{hex_str}'")
    return (int(hex_str[0:2], 16), int(hex_str[2:4], 16), int(hex_str[4:6], 16))


def rgb_to_css(rgb: tuple[int, int, int]) -> str:
    """Format an (R, G, B) tuple as a CSS rgb() value."""
    return f"rgb({rgb[0]}, {rgb[1]}, {rgb[2]})"


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return paths[key]
    return re.sub(r"\$\{(\w+)\}", _replace, text)


# ── Numbers ────────────────────────────────────────────────────────

def as_number(value) -> float | None:
    """Return value as a finite float, or None if it isn't one.

    Booleans are rejected even though they subclass int: a param of
    `True` is a malformed value, not 1.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


def fmt_num(value: float) -> str:
    """Format a number for style strings: integers without '.0', floats trimmed.

    Fixed-point only (style parsers differ on exponents), 6 decimals.
    Values that round to zero print as '0', never '-0'.
    """
    value = float(value)
    if value == int(value):
        return str(int(value))
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text
