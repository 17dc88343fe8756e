"""
Constants for score aggregation.

This module contains the nominal feature weights, the stem weight
redistribution split, the confidence normalization and the recommendation
and grade bands.
"""

# =============================================================================
# Feature Weights
# =============================================================================

# Nominal weights (sum to 100)
WEIGHT_FIELD_SPOT = 30
WEIGHT_STEM = 25
WEIGHT_DULLNESS = 25
WEIGHT_SHAPE = 10
WEIGHT_WEBBING = 10

FEATURE_WEIGHTS = {
    "field_spot_color": WEIGHT_FIELD_SPOT,
    "stem_color": WEIGHT_STEM,
    "skin_dullness": WEIGHT_DULLNESS,
    "shape_ratio": WEIGHT_SHAPE,
    "webbing_density": WEIGHT_WEBBING,
}

# When the stem is not visible its weight moves to these features
STEM_REDISTRIBUTION = {
    "field_spot_color": 0.6,  # 60%
    "skin_dullness": 0.4,     # 40%
}


# =============================================================================
# Confidence Constants
# =============================================================================

# confidence = max(FLOOR, 1 - variance / NORMALIZER)
CONFIDENCE_VARIANCE_NORMALIZER = 1000.0
CONFIDENCE_FLOOR = 0.5
CONFIDENCE_CEILING = 1.0


# =============================================================================
# Recommendation Constants
# =============================================================================

# Sub-scores below this trigger an improvement tip
RECOMMENDATION_SCORE_THRESHOLD = 60

# Closing remark bands
OVERALL_EXCELLENT_THRESHOLD = 80  # >= 80
OVERALL_GOOD_THRESHOLD = 60       # >= 60


# =============================================================================
# Grade Constants
# =============================================================================

# (minimum overall score, grade, description), checked in order
GRADE_BANDS = (
    (90, "A+", "Excellent"),
    (80, "A", "Very Good"),
    (70, "B", "Good"),
    (60, "C", "Fair"),
)
GRADE_FALLBACK = ("D", "Poor")
