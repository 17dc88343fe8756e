"""
Shape ratio heuristic.

Round melons tend to be sweeter; elongated ones more watery. Uses the
bounding box aspect ratio (width / height).
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .contour import find_watermelon_contour
from .heuristic_constants import (
    SHAPE_IDEAL_RATIO,
    SHAPE_ROUND_RANGE,
    SHAPE_ROUND_MULTIPLIER,
    SHAPE_SLIGHTLY_WIDE_RANGE,
    SHAPE_SLIGHTLY_WIDE_MULTIPLIER,
    SHAPE_ELONGATED_DEVIATION,
    SHAPE_ELONGATED_MULTIPLIER,
    SHAPE_VERY_TALL_MAX,
    SHAPE_TALL_MAX,
    SHAPE_SLIGHTLY_TALL_MAX,
    SHAPE_ROUND_MAX,
    SHAPE_SLIGHTLY_WIDE_MAX,
    SHAPE_WIDE_MAX,
    SHAPE_DEFAULT_SCORE,
)
from .models import Contour, FeatureResult
from .region_utils import clamp_score

logger = logging.getLogger(__name__)


def score_aspect_ratio(aspect_ratio: float) -> float:
    """
    Raw shape score for an aspect ratio.

    Linear penalty for deviation from 1.0, boosted for round and slightly
    wide shapes and reduced further for strongly elongated ones.
    """
    deviation = abs(aspect_ratio - SHAPE_IDEAL_RATIO)
    score = max(0.0, 100 - deviation * 100)

    if SHAPE_ROUND_RANGE[0] <= aspect_ratio <= SHAPE_ROUND_RANGE[1]:
        score = min(100.0, score * SHAPE_ROUND_MULTIPLIER)
    elif SHAPE_SLIGHTLY_WIDE_RANGE[0] <= aspect_ratio <= SHAPE_SLIGHTLY_WIDE_RANGE[1]:
        score = min(100.0, score * SHAPE_SLIGHTLY_WIDE_MULTIPLIER)
    elif deviation > SHAPE_ELONGATED_DEVIATION:
        score = max(0.0, score * SHAPE_ELONGATED_MULTIPLIER)

    return score


def classify_shape(aspect_ratio: float) -> Tuple[str, str]:
    """Return (shape_type, description) for an aspect ratio."""
    if aspect_ratio < SHAPE_VERY_TALL_MAX:
        return "very tall/narrow", "Very elongated shape - likely watery"
    if aspect_ratio < SHAPE_TALL_MAX:
        return "tall/oval", "Tall oval shape - may be watery"
    if aspect_ratio < SHAPE_SLIGHTLY_TALL_MAX:
        return "slightly tall", "Slightly elongated - moderate sweetness"
    if aspect_ratio <= SHAPE_ROUND_MAX:
        return "round", "Excellent round shape - indicates sweetness"
    if aspect_ratio <= SHAPE_SLIGHTLY_WIDE_MAX:
        return "slightly wide", "Slightly wide - good sweetness potential"
    if aspect_ratio <= SHAPE_WIDE_MAX:
        return "wide/oval", "Wide oval shape - moderate sweetness"
    return "very wide", "Very wide shape - may be watery"


def analyze_shape_ratio(
    image: np.ndarray,
    contour: Optional[Contour] = None,
) -> FeatureResult:
    """
    Score the fruit shape from the bounding box aspect ratio.

    Args:
        image: RGBA image buffer
        contour: Precomputed contour (located on demand if None)

    Returns:
        FeatureResult; score 50 with details["error"] if the box is degenerate
    """
    try:
        if contour is None:
            contour = find_watermelon_contour(image)

        width = contour.bounding_box.width
        height = contour.bounding_box.height
        if width <= 0 or height <= 0:
            raise ValueError("Could not detect watermelon shape")

        aspect_ratio = width / height
        deviation = abs(aspect_ratio - SHAPE_IDEAL_RATIO)
        shape_score = score_aspect_ratio(aspect_ratio)
        shape_type, description = classify_shape(aspect_ratio)

        logger.debug(f"Shape: {width}x{height}, ratio={aspect_ratio:.3f} ({shape_type}), "
                     f"score={shape_score:.1f}")

        return FeatureResult(
            score=clamp_score(shape_score),
            description=description,
            details={
                "aspect_ratio": round(aspect_ratio, 2),
                "width": width,
                "height": height,
                "shape_type": shape_type,
                "ratio_deviation": round(deviation, 2),
            },
        )

    except Exception as e:
        logger.warning(f"Shape analysis failed: {e}")
        return FeatureResult(
            score=SHAPE_DEFAULT_SCORE,
            description="Shape analysis unavailable",
            details={"error": str(e)},
        )
