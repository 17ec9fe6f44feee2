"""Easing functions for timeline animations.

Each easing maps linear progress in [0, 1] to shaped progress. All of
them satisfy f(0) == 0 and f(1) == 1; elastic overshoots in between.
"""

import math


def linear(x: float) -> float:
    return x


def ease_out(x: float) -> float:
    """Cubic ease-out: fast start, gentle settle."""
    return 1 - (1 - x) ** 3


def ease_in_out(x: float) -> float:
    """Cubic ease-in-out, symmetric around x = 0.5."""
    if x < 0.5:
        return 4 * x * x * x
    return 1 - (-2 * x + 2) ** 3 / 2


def elastic(x: float) -> float:
    """Elastic ease-out. Pinned to exactly 0 and 1 at the endpoints."""
    if x == 0:
        return 0.0
    if x == 1:
        return 1.0
    c4 = (2 * math.pi) / 3
    return 2 ** (-10 * x) * math.sin((x * 10 - 0.75) * c4) + 1


# Names as they appear in animation configs.
EASINGS = {
    "linear": linear,
    "ease-out": ease_out,
    "ease-in-out": ease_in_out,
    "elastic": elastic,
}

DEFAULT_EASING = "ease-out"


def get_easing(name):
    """Look up an easing by name, falling back to ease-out for unknown names."""
    if isinstance(name, str) and name in EASINGS:
        return EASINGS[name]
    return EASINGS[DEFAULT_EASING]
