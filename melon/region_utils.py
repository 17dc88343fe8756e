"""
Shared guards used by every heuristic.

This module handles:
- Clipping regions to image bounds
- Zero-division and NaN protection
- Score clamping and half-up rounding
"""

import math
from typing import Any, Optional, Tuple

import numpy as np

from .models import Region


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (round() would go to even)."""
    return int(math.floor(value + 0.5))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning `default` when the denominator is zero or the result is not finite."""
    if denominator == 0:
        return default
    result = numerator / denominator
    if not math.isfinite(result):
        return default
    return result


def safe_score(score: Any) -> float:
    """Map None/NaN/non-numeric scores to 0."""
    if score is None:
        return 0.0
    try:
        value = float(score)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return value


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_score(value: float) -> int:
    """Round a raw score and clip it to [0, 100]."""
    return int(clamp(round_half_up(safe_score(value)), 0, 100))


def clamp_region(region: Optional[Region], image_shape: Tuple[int, ...]) -> Region:
    """
    Clip a region to image bounds.

    Fractional coordinates are floored. The returned region may have zero
    width or height when it lies outside the image; check `is_valid`.

    Args:
        region: Region to clip, or None for the whole image
        image_shape: numpy shape of the image (height, width, ...)

    Returns:
        Clipped region
    """
    height, width = image_shape[:2]
    if region is None:
        return Region(0, 0, int(width), int(height))

    x0 = int(math.floor(region.x))
    y0 = int(math.floor(region.y))
    x1 = x0 + int(math.floor(region.width))
    y1 = y0 + int(math.floor(region.height))

    x0 = int(clamp(x0, 0, width))
    y0 = int(clamp(y0, 0, height))
    x1 = int(clamp(x1, 0, width))
    y1 = int(clamp(y1, 0, height))

    return Region(x0, y0, max(0, x1 - x0), max(0, y1 - y0))


def sample_grid(image: np.ndarray, region: Region, step: int) -> np.ndarray:
    """
    Return RGB samples on a regular grid starting at the region's top-left corner.

    Args:
        image: RGBA image buffer
        region: Already clamped region
        step: Sampling stride in both axes

    Returns:
        (N, 3) int32 array of samples, row-major order
    """
    if not region.is_valid:
        return np.empty((0, 3), dtype=np.int32)
    patch = image[region.y:region.y + region.height:step,
                  region.x:region.x + region.width:step, :3]
    return patch.reshape(-1, 3).astype(np.int32)
