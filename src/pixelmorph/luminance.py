"""
Luminance weights used as the sole brightness key for rank matching.

Two weight sets are kept on purpose: the batch mosaic was tuned with the
Rec. 601 weights and the particle animation with Rec. 709. Both sum to 1.
"""

import numpy as np

REC601 = (0.299, 0.587, 0.114)
REC709 = (0.2126, 0.7152, 0.0722)

WEIGHTS = {
    "rec601": REC601,
    "rec709": REC709,
}


def get_weights(name: str) -> tuple[float, float, float]:
    """Look up a weight set by name ("rec601" or "rec709")."""
    try:
        return WEIGHTS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown luminance weights: {name!r} (expected one of {sorted(WEIGHTS)})"
        ) from None


def brightness(rgb: np.ndarray, weights: tuple[float, float, float] = REC601) -> np.ndarray:
    """
    Compute brightness for an array of RGB(A) colours.

    Args:
        rgb: (..., 3) or (..., 4) array; alpha is ignored.
        weights: R, G, B weights.

    Returns:
        float64 array with the trailing channel axis removed, in [0, 255].
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    wr, wg, wb = weights
    return wr * rgb[..., 0] + wg * rgb[..., 1] + wb * rgb[..., 2]
