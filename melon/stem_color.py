"""
Stem color heuristic.

A brown, dry stem means the melon ripened on the vine; a green stem means
it was cut early. Many photos do not show the stem at all, in which case a
neutral score is reported and the aggregator shifts the stem weight to other
features.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .color_sampling import get_dominant_colors
from .contour import find_watermelon_contour
from .heuristic_constants import (
    STEM_REGION_LEFT_FRACTION,
    STEM_REGION_WIDTH_FRACTION,
    STEM_REGION_HEIGHT_FRACTION,
    STEM_BROWNNESS_G_FACTOR,
    STEM_BROWNNESS_B_FACTOR,
    STEM_DRY_R_RANGE,
    STEM_DRY_G_RANGE,
    STEM_DRY_B_RANGE,
    STEM_DRY_MAX_RG_DIFF,
    STEM_BROWN_BROWNNESS_DIVISOR,
    STEM_BROWN_BROWNNESS_WEIGHT,
    STEM_BROWN_PERCENTAGE_DIVISOR,
    STEM_BROWN_PERCENTAGE_WEIGHT,
    STEM_GREENNESS_MIN,
    STEM_GREEN_MIN_G,
    STEM_GREEN_PENALTY_WEIGHT,
    STEM_NOT_VISIBLE_THRESHOLD,
    STEM_NEUTRAL_SCORE,
    STEM_EXCELLENT_THRESHOLD,
    STEM_MODERATE_THRESHOLD,
    STEM_GREEN_DESCRIPTION_PENALTY,
    STEM_PARTIAL_THRESHOLD,
    STEM_UNCLEAR_THRESHOLD,
    STEM_POOR_FLOOR_SCORE,
    STEM_DEFAULT_SCORE,
)
from .models import ColorSample, Contour, FeatureResult, Region
from .region_utils import clamp, clamp_region, clamp_score

logger = logging.getLogger(__name__)


def stem_region(contour: Contour, image_shape: Tuple[int, ...]) -> Region:
    """Top-center of the bounding box (x 30%-70%, top 30%), clipped to the image."""
    box = contour.bounding_box
    region = Region(
        x=int(box.x + box.width * STEM_REGION_LEFT_FRACTION),
        y=box.y,
        width=int(box.width * STEM_REGION_WIDTH_FRACTION),
        height=int(box.height * STEM_REGION_HEIGHT_FRACTION),
    )
    return clamp_region(region, image_shape)


def is_dry_brown(r: int, g: int, b: int) -> bool:
    return (
        STEM_DRY_R_RANGE[0] < r < STEM_DRY_R_RANGE[1]
        and STEM_DRY_G_RANGE[0] < g < STEM_DRY_G_RANGE[1]
        and STEM_DRY_B_RANGE[0] < b < STEM_DRY_B_RANGE[1]
        and abs(r - g) < STEM_DRY_MAX_RG_DIFF
        and r > b
    )


def brown_color_score(color: ColorSample) -> float:
    """Brown match score for one color, 0 if it is not dry brown."""
    r, g, b = color.rgb
    if not is_dry_brown(r, g, b):
        return 0.0
    brownness = min(r, g * STEM_BROWNNESS_G_FACTOR, b * STEM_BROWNNESS_B_FACTOR)
    return min(100.0,
               brownness / STEM_BROWN_BROWNNESS_DIVISOR * STEM_BROWN_BROWNNESS_WEIGHT
               + color.percentage / STEM_BROWN_PERCENTAGE_DIVISOR * STEM_BROWN_PERCENTAGE_WEIGHT)


def green_penalty(color: ColorSample) -> float:
    """Penalty contributed by a green color, proportional to its frequency."""
    r, g, b = color.rgb
    greenness = g - (r + b) / 2
    if greenness > STEM_GREENNESS_MIN and g > STEM_GREEN_MIN_G:
        return color.percentage / 100 * STEM_GREEN_PENALTY_WEIGHT
    return 0.0


def analyze_stem_color(
    image: np.ndarray,
    contour: Optional[Contour] = None,
) -> FeatureResult:
    """
    Score stem dryness from the colors in the top-center of the fruit.

    Args:
        image: RGBA image buffer
        contour: Precomputed contour (located on demand if None)

    Returns:
        FeatureResult with details["stem_visible"]; score 50 with
        details["error"] if analysis fails
    """
    try:
        if contour is None:
            contour = find_watermelon_contour(image)

        search_region = stem_region(contour, image.shape)
        dominant_colors = get_dominant_colors(image, search_region, 5)

        brown_score = 0.0
        total_green_penalty = 0.0
        best_stem_color = None

        for color in dominant_colors:
            color_score = brown_color_score(color)
            if color_score > brown_score:
                brown_score = color_score
                best_stem_color = color
            total_green_penalty += green_penalty(color)

        final_score = clamp(brown_score - total_green_penalty, 0, 100)
        stem_visible = True

        if brown_score < STEM_NOT_VISIBLE_THRESHOLD and total_green_penalty < STEM_NOT_VISIBLE_THRESHOLD:
            final_score = STEM_NEUTRAL_SCORE
            description = "Stem not visible in image - neutral score applied"
            stem_visible = False
        elif final_score > STEM_EXCELLENT_THRESHOLD:
            description = "Excellent brown/dry stem - vine ripened"
        elif final_score > STEM_MODERATE_THRESHOLD:
            description = "Moderate stem dryness"
        elif total_green_penalty > STEM_GREEN_DESCRIPTION_PENALTY:
            description = "Green stem detected - may be picked early"
        elif final_score > STEM_PARTIAL_THRESHOLD:
            description = "Stem appears partially dry"
        elif final_score > STEM_UNCLEAR_THRESHOLD:
            description = "Stem condition unclear"
        else:
            final_score = max(final_score, STEM_POOR_FLOOR_SCORE)
            description = "Stem condition poor but partially visible"

        logger.debug(f"Stem: brown={brown_score:.1f}, green_penalty={total_green_penalty:.1f}, "
                     f"visible={stem_visible}, score={final_score:.1f}")

        return FeatureResult(
            score=clamp_score(final_score),
            description=description,
            details={
                "dominant_colors": dominant_colors,
                "best_stem_color": best_stem_color,
                "brown_score": round(brown_score, 2),
                "green_penalty": round(total_green_penalty, 2),
                "search_region": search_region,
                "stem_visible": stem_visible,
            },
        )

    except Exception as e:
        logger.warning(f"Stem color analysis failed: {e}")
        return FeatureResult(
            score=STEM_DEFAULT_SCORE,
            description="Stem analysis unavailable",
            details={"error": str(e)},
        )
