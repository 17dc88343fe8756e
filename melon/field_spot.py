"""
Field spot color heuristic.

The field spot is where the melon rested on the ground. A deep yellow or
cream spot indicates a long time on the vine; a white or missing spot
suggests the melon was picked early.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .color_sampling import get_dominant_colors
from .contour import find_watermelon_contour
from .heuristic_constants import (
    FIELD_SPOT_REGION_TOP_FRACTION,
    FIELD_SPOT_REGION_HEIGHT_FRACTION,
    YELLOWISH_TRADITIONAL_MIN_BRIGHTNESS,
    YELLOWISH_CREAM_MIN_BRIGHTNESS,
    YELLOWISH_CREAM_GB_RATIO,
    YELLOWISH_LIGHT_BROWN_MIN_BRIGHTNESS,
    YELLOWISH_LIGHT_BROWN_RB_RATIO,
    YELLOWISH_BEIGE_MIN_BRIGHTNESS,
    YELLOWISH_BEIGE_MAX_RG_DIFF,
    YELLOWISH_BEIGE_RB_RATIO,
    FIELD_SPOT_TIER_STRONG,
    FIELD_SPOT_TIER_MODERATE,
    FIELD_SPOT_TIER_PALE,
    FIELD_SPOT_TIER_VERY_PALE,
    FIELD_SPOT_VERY_PALE_MIN_BRIGHTNESS,
    FIELD_SPOT_TAN_RB_RATIO,
    FIELD_SPOT_TAN_MIN_BRIGHTNESS,
    FIELD_SPOT_TAN_MAX_BRIGHTNESS,
    FIELD_SPOT_TAN_RB_DIVISOR,
    FIELD_SPOT_TAN_PERCENTAGE_DIVISOR,
    FIELD_SPOT_TAN_PERCENTAGE_WEIGHT,
    FIELD_SPOT_TAN_CAP,
    FIELD_SPOT_EXCELLENT_THRESHOLD,
    FIELD_SPOT_GOOD_THRESHOLD,
    FIELD_SPOT_MODERATE_THRESHOLD,
    FIELD_SPOT_FAINT_THRESHOLD,
    FIELD_SPOT_VERY_FAINT_THRESHOLD,
    FIELD_SPOT_DEFAULT_SCORE,
)
from .models import ColorSample, Contour, FeatureResult, Region
from .region_utils import clamp_region, clamp_score

logger = logging.getLogger(__name__)


def field_spot_region(contour: Contour, image_shape: Tuple[int, ...]) -> Region:
    """Lower half of the bounding box, clipped to the image."""
    box = contour.bounding_box
    region = Region(
        x=box.x,
        y=int(box.y + box.height * FIELD_SPOT_REGION_TOP_FRACTION),
        width=box.width,
        height=int(box.height * FIELD_SPOT_REGION_HEIGHT_FRACTION),
    )
    return clamp_region(region, image_shape)


def is_yellowish(r: int, g: int, b: int) -> bool:
    """Check the increasingly lenient yellow / cream / light brown / beige rules."""
    brightness = (r + g + b) / 3
    return (
        (r > g > b and brightness > YELLOWISH_TRADITIONAL_MIN_BRIGHTNESS)
        or (r > g and r > b and g > b * YELLOWISH_CREAM_GB_RATIO
            and brightness > YELLOWISH_CREAM_MIN_BRIGHTNESS)
        or (r >= g >= b and r > b * YELLOWISH_LIGHT_BROWN_RB_RATIO
            and brightness > YELLOWISH_LIGHT_BROWN_MIN_BRIGHTNESS)
        or (abs(r - g) < YELLOWISH_BEIGE_MAX_RG_DIFF and r > b * YELLOWISH_BEIGE_RB_RATIO
            and brightness > YELLOWISH_BEIGE_MIN_BRIGHTNESS)
    )


def score_yellow_color(color: ColorSample) -> float:
    """
    Score one dominant color as field spot evidence.

    The first matching tier wins; weaker tiers are capped lower
    (100 / 70 / 50 / 35 / 25).

    Returns:
        Raw tier score, 0 when the color is not yellowish or matches no tier
    """
    r, g, b = color.rgb
    if not is_yellowish(r, g, b):
        return 0.0

    yellowness = (r + g) / 2 - b
    brightness = (r + g + b) / 3
    pct = color.percentage

    tiers = (FIELD_SPOT_TIER_STRONG, FIELD_SPOT_TIER_MODERATE,
             FIELD_SPOT_TIER_PALE, FIELD_SPOT_TIER_VERY_PALE)
    for i, tier in enumerate(tiers):
        min_yellow, min_r, min_g, max_b, cap, y_div, y_weight, p_div, p_weight = tier
        if not (yellowness > min_yellow and r > min_r and g > min_g and b < max_b):
            continue
        if tier is FIELD_SPOT_TIER_VERY_PALE and brightness <= FIELD_SPOT_VERY_PALE_MIN_BRIGHTNESS:
            continue
        return min(cap, yellowness / y_div * y_weight + pct / p_div * p_weight)

    if (r >= g >= b and r > b * FIELD_SPOT_TAN_RB_RATIO
            and FIELD_SPOT_TAN_MIN_BRIGHTNESS < brightness < FIELD_SPOT_TAN_MAX_BRIGHTNESS):
        tan_score = ((r - b) / FIELD_SPOT_TAN_RB_DIVISOR
                     + pct / FIELD_SPOT_TAN_PERCENTAGE_DIVISOR * FIELD_SPOT_TAN_PERCENTAGE_WEIGHT)
        return min(FIELD_SPOT_TAN_CAP, tan_score)

    return 0.0


def describe_field_spot(score: float) -> str:
    if score > FIELD_SPOT_EXCELLENT_THRESHOLD:
        return "Excellent yellow field spot - indicates good ripeness"
    if score > FIELD_SPOT_GOOD_THRESHOLD:
        return "Good field spot coloring"
    if score > FIELD_SPOT_MODERATE_THRESHOLD:
        return "Moderate field spot - some ripeness indicators"
    if score >= FIELD_SPOT_FAINT_THRESHOLD:
        return "Faint field spot - minimal ripeness indicators"
    if score > FIELD_SPOT_VERY_FAINT_THRESHOLD:
        return "Very faint field spot - likely underripe"
    return "No clear field spot detected"


def analyze_field_spot_color(
    image: np.ndarray,
    contour: Optional[Contour] = None,
) -> FeatureResult:
    """
    Score the field spot from yellow/cream coloration in the lower half of the fruit.

    Args:
        image: RGBA image buffer
        contour: Precomputed contour (located on demand if None)

    Returns:
        FeatureResult; score 50 with details["error"] if analysis fails
    """
    try:
        if contour is None:
            contour = find_watermelon_contour(image)

        search_region = field_spot_region(contour, image.shape)
        dominant_colors = get_dominant_colors(image, search_region, 5, detail="fine")

        yellow_score = 0.0
        best_yellow_color = None
        for color in dominant_colors:
            color_score = score_yellow_color(color)
            if color_score > yellow_score:
                yellow_score = color_score
                best_yellow_color = color

        final_score = min(100.0, yellow_score)
        logger.debug(f"Field spot: region={search_region.as_tuple()}, best={best_yellow_color}, "
                     f"score={final_score:.1f}")

        return FeatureResult(
            score=clamp_score(final_score),
            description=describe_field_spot(final_score),
            details={
                "dominant_colors": dominant_colors,
                "best_yellow_color": best_yellow_color,
                "search_region": search_region,
            },
        )

    except Exception as e:
        logger.warning(f"Field spot analysis failed: {e}")
        return FeatureResult(
            score=FIELD_SPOT_DEFAULT_SCORE,
            description="Field spot analysis unavailable",
            details={"error": str(e)},
        )
