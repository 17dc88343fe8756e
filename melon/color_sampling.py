"""
Color sampling utilities.

This module handles:
- Dominant color extraction over a region (coarse and fine sampling)
- Per-channel color histograms
"""

import logging
import math
from typing import Dict, Any, List, Literal, Optional

import numpy as np

from .heuristic_constants import (
    COLOR_QUANTIZATION_STEP,
    COARSE_SAMPLING_DIVISOR,
    COARSE_SAMPLING_MIN_STEP,
    FINE_SAMPLING_DIVISOR,
    FINE_SAMPLING_MIN_STEP,
    DEFAULT_NUM_COLORS,
)
from .models import ColorSample, Region
from .region_utils import clamp_region, safe_divide, sample_grid

logger = logging.getLogger(__name__)

SamplingDetail = Literal["coarse", "fine"]


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def sampling_step(region: Region, detail: SamplingDetail = "coarse") -> int:
    """
    Sampling stride proportional to the region size.

    Fine sampling uses a smaller stride (more samples) and is used for
    field spot detection.
    """
    side = math.sqrt(region.area)
    if detail == "fine":
        return max(FINE_SAMPLING_MIN_STEP, int(side // FINE_SAMPLING_DIVISOR))
    return max(COARSE_SAMPLING_MIN_STEP, int(side // COARSE_SAMPLING_DIVISOR))


def get_dominant_colors(
    image: np.ndarray,
    region: Optional[Region] = None,
    num_colors: int = DEFAULT_NUM_COLORS,
    detail: SamplingDetail = "coarse",
) -> List[ColorSample]:
    """
    Find the most frequent quantized colors in a region.

    Each channel is floored to a multiple of COLOR_QUANTIZATION_STEP, so the
    color space collapses to 8x8x8 buckets.

    Args:
        image: RGBA image buffer
        region: Region to sample (default: whole image)
        num_colors: Number of colors to return
        detail: "coarse" or "fine" sampling stride

    Returns:
        Up to num_colors ColorSamples ordered by descending frequency.
        Percentages are relative to all sampled pixels. Empty when the
        region is invalid or yields no samples.
    """
    roi = clamp_region(region, image.shape)
    if not roi.is_valid:
        logger.debug(f"Empty sampling region {region}")
        return []

    step = sampling_step(roi, detail)
    samples = sample_grid(image, roi, step)
    total = len(samples)
    if total == 0:
        return []

    quantized = (samples // COLOR_QUANTIZATION_STEP) * COLOR_QUANTIZATION_STEP
    keys = (quantized[:, 0] << 16) | (quantized[:, 1] << 8) | quantized[:, 2]
    unique_keys, first_index, counts = np.unique(keys, return_index=True, return_counts=True)

    # Most frequent first; ties resolved by first appearance
    order = sorted(range(len(unique_keys)), key=lambda i: (-counts[i], first_index[i]))

    colors = []
    for i in order[:num_colors]:
        key = int(unique_keys[i])
        r, g, b = (key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF
        colors.append(ColorSample(
            rgb=(r, g, b),
            hex=rgb_to_hex(r, g, b),
            percentage=safe_divide(int(counts[i]), total) * 100,
        ))

    logger.debug(f"Dominant colors ({detail}, step={step}, samples={total}): "
                 f"{[(c.hex, round(c.percentage, 1)) for c in colors]}")
    return colors


def extract_color_histogram(
    image: np.ndarray,
    region: Optional[Region] = None,
) -> Dict[str, Any]:
    """
    Compute normalized per-channel histograms over a region.

    Args:
        image: RGBA image buffer
        region: Region to analyze (default: whole image)

    Returns:
        Dictionary containing:
        - red, green, blue: 256-bin histograms summing to 1 (all zeros when empty)
        - pixel_count: Number of pixels counted
    """
    roi = clamp_region(region, image.shape)
    if not roi.is_valid:
        zeros = [0.0] * 256
        return {"red": list(zeros), "green": list(zeros), "blue": list(zeros), "pixel_count": 0}

    patch = image[roi.y:roi.y + roi.height, roi.x:roi.x + roi.width, :3]
    pixel_count = int(patch.shape[0] * patch.shape[1])

    histograms = {}
    for name, channel in (("red", 0), ("green", 1), ("blue", 2)):
        counts = np.bincount(patch[:, :, channel].ravel(), minlength=256)
        histograms[name] = [safe_divide(float(c), pixel_count) for c in counts]

    histograms["pixel_count"] = pixel_count
    return histograms
