"""
Easing curves on [0, 1].

All curves map 0 -> 0 and 1 -> 1 and accept floats or numpy arrays.
"""

import math
from typing import Callable

import numpy as np


def linear(t):
    return t


def ease_out_cubic(t):
    """Fast start, gentle landing. Drives force attenuation while converging."""
    return 1 - (1 - t) ** 3


def ease_in_out_cubic(t):
    t = np.asarray(t, dtype=np.float64)
    out = np.where(t < 0.5, 4 * t ** 3, 1 - (-2 * t + 2) ** 3 / 2)
    return float(out) if out.ndim == 0 else out


def ease_in_out_quad(t):
    t = np.asarray(t, dtype=np.float64)
    out = np.where(t < 0.5, 2 * t ** 2, 1 - (-2 * t + 2) ** 2 / 2)
    return float(out) if out.ndim == 0 else out


def ease_out_elastic(t):
    """Overshoots and settles; exact at both endpoints."""
    c4 = (2 * math.pi) / 3
    t = np.asarray(t, dtype=np.float64)
    body = 2.0 ** (-10 * t) * np.sin((t * 10 - 0.75) * c4) + 1
    out = np.where(t <= 0, 0.0, np.where(t >= 1, 1.0, body))
    return float(out) if out.ndim == 0 else out


EASINGS: dict[str, Callable] = {
    "linear": linear,
    "ease_out_cubic": ease_out_cubic,
    "ease_in_out_cubic": ease_in_out_cubic,
    "ease_in_out_quad": ease_in_out_quad,
    "ease_out_elastic": ease_out_elastic,
}


def get_easing(name: str) -> Callable:
    try:
        return EASINGS[name]
    except KeyError:
        raise ValueError(f"Unknown easing: {name!r} (expected one of {sorted(EASINGS)})") from None
