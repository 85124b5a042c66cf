"""
Color Sampling
Representative color of a layer's pixels
"""

from typing import Optional, Tuple

import numpy as np


def mean_visible_color(pixels: np.ndarray, mask: Optional[np.ndarray] = None) -> Optional[Tuple[int, int, int]]:
    """
    Average the RGB values of the pixels that are actually visible

    Pixels are weighted by their alpha and, when given, by the mask value.

    Args:
        pixels: H x W x 4 uint8 RGBA array
        mask: Optional H x W uint8 mask

    Returns:
        (r, g, b) rounded to integers, or None if nothing is visible
    """
    if pixels is None or pixels.ndim != 3 or pixels.shape[2] < 4:
        return None

    weights = pixels[..., 3].astype(np.float64) / 255.0
    if mask is not None:
        if mask.shape != weights.shape:
            return None
        weights = weights * (mask.astype(np.float64) / 255.0)

    total = float(weights.sum())
    if total <= 0.0:
        return None

    rgb = pixels[..., :3].astype(np.float64)
    mean = (rgb * weights[..., None]).sum(axis=(0, 1)) / total
    r, g, b = (int(round(float(channel))) for channel in np.clip(mean, 0, 255))
    return (r, g, b)
