"""
Skin dullness heuristic.

A ripe watermelon has a matte rind; an underripe one is glossy. Glossiness
shows up as brightness variation (specular highlights) in the center of the
fruit.
"""

import logging
import math
from typing import Optional

import numpy as np

from .contour import find_watermelon_contour
from .heuristic_constants import (
    DULLNESS_SAMPLE_STEP,
    DULLNESS_REGION_FRACTION,
    DULLNESS_MIN_SAMPLES,
    DULLNESS_STD_MULTIPLIER,
    DULLNESS_IDEAL_BRIGHTNESS,
    DULLNESS_VARIATION_WEIGHT,
    DULLNESS_BRIGHTNESS_WEIGHT,
    DULLNESS_EXCELLENT_THRESHOLD,
    DULLNESS_GOOD_THRESHOLD,
    DULLNESS_MODERATE_THRESHOLD,
    DULLNESS_SOMEWHAT_SHINY_THRESHOLD,
    DULLNESS_DEFAULT_SCORE,
)
from .models import Contour, FeatureResult
from .region_utils import clamp, clamp_score, round_half_up

logger = logging.getLogger(__name__)


def sample_center_brightness(image: np.ndarray, contour: Contour) -> dict:
    """
    Sample brightness on a grid over a square centered on the bounding box.

    Returns:
        Dictionary containing:
        - values: 1D array of per-sample brightness (mean of r, g, b)
        - center_x, center_y: Grid center
        - region_size: Side of the sampled square
    """
    height, width = image.shape[:2]
    box = contour.bounding_box
    center_x = int(math.floor(box.x + box.width / 2))
    center_y = int(math.floor(box.y + box.height / 2))
    region_size = min(box.width, box.height) * DULLNESS_REGION_FRACTION

    half = region_size / 2
    xs = np.floor(np.arange(center_x - half, center_x + half, DULLNESS_SAMPLE_STEP)).astype(int)
    ys = np.floor(np.arange(center_y - half, center_y + half, DULLNESS_SAMPLE_STEP)).astype(int)
    xs = xs[(xs >= 0) & (xs < width)]
    ys = ys[(ys >= 0) & (ys < height)]

    if len(xs) == 0 or len(ys) == 0:
        values = np.empty(0, dtype=np.float64)
    else:
        grid = image[np.ix_(ys, xs)][:, :, :3].astype(np.float64)
        values = grid.mean(axis=2).ravel()

    return {
        "values": values,
        "center_x": center_x,
        "center_y": center_y,
        "region_size": region_size,
    }


def describe_dullness(score: int) -> str:
    if score > DULLNESS_EXCELLENT_THRESHOLD:
        return "Excellent dull skin - indicates maturity"
    if score > DULLNESS_GOOD_THRESHOLD:
        return "Good skin dullness"
    if score > DULLNESS_MODERATE_THRESHOLD:
        return "Moderate skin dullness"
    if score > DULLNESS_SOMEWHAT_SHINY_THRESHOLD:
        return "Somewhat shiny skin - may be underripe"
    return "Shiny skin detected - likely underripe"


def analyze_skin_dullness(
    image: np.ndarray,
    contour: Optional[Contour] = None,
) -> FeatureResult:
    """
    Score rind dullness from brightness consistency in the center of the fruit.

    Low brightness variation means a matte rind and a high score; mid-range
    brightness is preferred over very dark or very bright.

    Args:
        image: RGBA image buffer
        contour: Precomputed contour (located on demand if None)

    Returns:
        FeatureResult; score 50 with details["error"] if fewer than
        DULLNESS_MIN_SAMPLES samples are available
    """
    try:
        if contour is None:
            contour = find_watermelon_contour(image)

        sampled = sample_center_brightness(image, contour)
        values = sampled["values"]

        if len(values) < DULLNESS_MIN_SAMPLES:
            raise ValueError("Insufficient pixel data for analysis")

        avg_brightness = float(np.mean(values))
        std_dev = float(np.std(values))

        # Lower variation = more matte = higher score
        variation_score = clamp(100 - std_dev * DULLNESS_STD_MULTIPLIER, 0, 100)
        brightness_score = clamp(
            100 - abs(avg_brightness - DULLNESS_IDEAL_BRIGHTNESS) / DULLNESS_IDEAL_BRIGHTNESS * 100,
            0, 100,
        )

        dullness_score = (variation_score * DULLNESS_VARIATION_WEIGHT
                          + brightness_score * DULLNESS_BRIGHTNESS_WEIGHT)
        final_score = clamp_score(dullness_score)

        logger.debug(f"Dullness: samples={len(values)}, mean={avg_brightness:.1f}, "
                     f"std={std_dev:.1f}, score={final_score}")

        return FeatureResult(
            score=final_score,
            description=describe_dullness(final_score),
            details={
                "pixel_count": int(len(values)),
                "avg_brightness": round(avg_brightness, 1),
                "std_dev": round(std_dev, 1),
                "variation_score": clamp_score(variation_score),
                "brightness_score": clamp_score(brightness_score),
                "center_x": sampled["center_x"],
                "center_y": sampled["center_y"],
                "region_size": round_half_up(sampled["region_size"]),
            },
        )

    except Exception as e:
        logger.warning(f"Skin dullness analysis failed: {e}")
        return FeatureResult(
            score=DULLNESS_DEFAULT_SCORE,
            description=f"Skin analysis unavailable - {e}",
            details={"error": str(e)},
        )
