"""
Score aggregation utilities.

This module handles:
- Adaptive feature weights (stem weight redistribution)
- Weighted overall score
- Consistency-based confidence
- Recommendation text
- Letter grade

All thresholds and weights are imported from aggregation_constants.py.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .aggregation_constants import (
    FEATURE_WEIGHTS,
    STEM_REDISTRIBUTION,
    CONFIDENCE_VARIANCE_NORMALIZER,
    CONFIDENCE_FLOOR,
    CONFIDENCE_CEILING,
    RECOMMENDATION_SCORE_THRESHOLD,
    OVERALL_EXCELLENT_THRESHOLD,
    OVERALL_GOOD_THRESHOLD,
    GRADE_BANDS,
    GRADE_FALLBACK,
)
from .models import FeatureResult
from .region_utils import round_half_up, safe_divide, safe_score

logger = logging.getLogger(__name__)

FEATURE_NAMES = tuple(FEATURE_WEIGHTS.keys())


def is_stem_hidden(stem_result: Optional[FeatureResult]) -> bool:
    """True only when the stem heuristic explicitly reported the stem as not visible."""
    if stem_result is None:
        return False
    return stem_result.details.get("stem_visible") is False


def compute_feature_weights(stem_result: FeatureResult) -> Dict[str, float]:
    """
    Compute effective feature weights.

    Starts from the nominal weights. When the stem is not visible its weight
    is set to 0 and split between field spot (60%) and dullness (40%), so
    the total is unchanged.

    Args:
        stem_result: Output of analyze_stem_color()

    Returns:
        Mapping of feature name to weight
    """
    weights = {name: float(weight) for name, weight in FEATURE_WEIGHTS.items()}

    if is_stem_hidden(stem_result):
        stem_weight = weights["stem_color"]
        weights["stem_color"] = 0.0
        for name, share in STEM_REDISTRIBUTION.items():
            weights[name] += stem_weight * share
        logger.debug(f"Stem not visible - redistributed weights: {weights}")

    return weights


def compute_overall_score(
    results: Mapping[str, FeatureResult],
    weights: Mapping[str, float],
) -> int:
    """
    Weighted mean of the feature scores, rounded.

    Missing or NaN scores count as 0.

    Args:
        results: Feature name to FeatureResult
        weights: Feature name to weight

    Returns:
        Overall score 0-100
    """
    total_weight = sum(weights.values())
    weighted_sum = 0.0
    for name, weight in weights.items():
        result = results.get(name)
        score = safe_score(result.score if result is not None else None)
        weighted_sum += score * weight

    return int(max(0, min(100, round_half_up(safe_divide(weighted_sum, total_weight)))))


def compute_confidence(scores: Sequence[float]) -> float:
    """
    Consistency-based confidence.

    confidence = max(0.5, 1 - variance / 1000), where variance is the
    population variance of the sub-scores. This is a consistency proxy,
    not a statistical confidence interval.

    Args:
        scores: Feature sub-scores (NaN/None treated as 0)

    Returns:
        Confidence in [0.5, 1.0]
    """
    values = np.array([safe_score(s) for s in scores], dtype=np.float64)
    if len(values) == 0:
        return CONFIDENCE_CEILING

    variance = float(np.var(values))
    confidence = max(CONFIDENCE_FLOOR, 1.0 - variance / CONFIDENCE_VARIANCE_NORMALIZER)
    return float(min(CONFIDENCE_CEILING, confidence))


def generate_recommendations(
    results: Mapping[str, FeatureResult],
    overall_score: int,
) -> List[str]:
    """
    Build improvement tips for weak features plus one closing remark.

    Missing or NaN scores count as 0, so they always get a tip.

    Args:
        results: Feature name to FeatureResult
        overall_score: Aggregated score

    Returns:
        Ordered list of recommendation strings
    """
    recommendations = []
    threshold = RECOMMENDATION_SCORE_THRESHOLD

    def below(name: str) -> bool:
        return safe_score(getattr(results.get(name), "score", None)) < threshold

    if below("field_spot_color"):
        recommendations.append("Look for a more pronounced yellow field spot for better sweetness")

    if is_stem_hidden(results.get("stem_color")):
        recommendations.append("Stem not visible in image - other quality indicators evaluated")
    elif below("stem_color"):
        recommendations.append("Choose watermelons with brown, dry stems indicating vine ripeness")

    if below("skin_dullness"):
        recommendations.append("Select melons with duller skin rather than shiny appearance")

    if below("shape_ratio"):
        recommendations.append("Rounder watermelons tend to be sweeter than elongated ones")

    if below("webbing_density"):
        recommendations.append("Look for more pronounced webbing patterns on the skin")

    if overall_score >= OVERALL_EXCELLENT_THRESHOLD:
        recommendations.append("This watermelon shows excellent quality indicators!")
    elif overall_score >= OVERALL_GOOD_THRESHOLD:
        recommendations.append("This watermelon shows good quality with room for improvement")
    else:
        recommendations.append("Consider looking for a different watermelon with better quality indicators")

    return recommendations


def grade_score(overall_score: float) -> Tuple[str, str]:
    """Map an overall score to (letter grade, description)."""
    score = safe_score(overall_score)
    for minimum, grade, description in GRADE_BANDS:
        if score >= minimum:
            return grade, description
    return GRADE_FALLBACK
