#!/usr/bin/env python3
"""
Test weight redistribution, overall score, confidence, recommendations and grading.
"""

import os
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from melon.models import FeatureResult
from melon.aggregation import (
    FEATURE_NAMES,
    compute_confidence,
    compute_feature_weights,
    compute_overall_score,
    generate_recommendations,
    grade_score,
)


def make_results(field_spot=80, stem=65, dullness=60, shape=100, webbing=20, stem_visible=True):
    return {
        "field_spot_color": FeatureResult(field_spot, "field spot"),
        "stem_color": FeatureResult(stem, "stem", {"stem_visible": stem_visible}),
        "skin_dullness": FeatureResult(dullness, "dullness"),
        "shape_ratio": FeatureResult(shape, "shape"),
        "webbing_density": FeatureResult(webbing, "webbing"),
    }


def test_nominal_weights():
    weights = compute_feature_weights(FeatureResult(70, "stem", {"stem_visible": True}))

    assert weights == {
        "field_spot_color": 30,
        "stem_color": 25,
        "skin_dullness": 25,
        "shape_ratio": 10,
        "webbing_density": 10,
    }
    assert tuple(weights) == FEATURE_NAMES


def test_hidden_stem_weight_is_redistributed():
    """Stem weight moves 60/40 to field spot and dullness; total stays 100."""
    weights = compute_feature_weights(FeatureResult(65, "stem", {"stem_visible": False}))

    assert weights["stem_color"] == 0
    assert weights["field_spot_color"] == pytest.approx(45)
    assert weights["skin_dullness"] == pytest.approx(35)
    assert sum(weights.values()) == pytest.approx(100)


def test_stem_without_visibility_flag_keeps_weights():
    """A failed stem analysis (no flag) is not treated as hidden."""
    weights = compute_feature_weights(FeatureResult(50, "Stem analysis unavailable", {"error": "x"}))
    assert weights["stem_color"] == 25


def test_overall_score_weighted_mean():
    results = make_results()
    weights = compute_feature_weights(results["stem_color"])
    # (80*30 + 65*25 + 60*25 + 100*10 + 20*10) / 100 = 67.25
    assert compute_overall_score(results, weights) == 67


def test_overall_score_ignores_hidden_stem():
    results = make_results(stem_visible=False)
    weights = compute_feature_weights(results["stem_color"])
    # (80*45 + 60*35 + 100*10 + 20*10) / 100 = 69
    assert compute_overall_score(results, weights) == 69


def test_overall_score_treats_nan_as_zero():
    results = make_results(field_spot=float("nan"), stem=100, dullness=100, shape=100, webbing=100)
    weights = compute_feature_weights(results["stem_color"])
    assert compute_overall_score(results, weights) == 70


def test_overall_score_missing_feature_counts_as_zero():
    results = make_results(field_spot=100, stem=100, dullness=100, shape=100, webbing=100)
    del results["webbing_density"]
    weights = compute_feature_weights(results["stem_color"])
    assert compute_overall_score(results, weights) == 90


def test_recommendations_missing_feature_counts_as_zero():
    """A missing sub-score gets its tip, consistent with the overall score."""
    results = make_results(field_spot=100, stem=100, dullness=100, shape=100, webbing=100)
    del results["webbing_density"]
    weights = compute_feature_weights(results["stem_color"])
    overall = compute_overall_score(results, weights)
    recommendations = generate_recommendations(results, overall)

    assert recommendations == [
        "Look for more pronounced webbing patterns on the skin",
        "This watermelon shows excellent quality indicators!",
    ]


def test_recommendations_missing_stem_is_not_hidden():
    results = make_results(field_spot=90, stem=90, dullness=90, shape=90, webbing=90)
    del results["stem_color"]
    recommendations = generate_recommendations(results, 70)

    assert recommendations[0] == "Choose watermelons with brown, dry stems indicating vine ripeness"
    assert "Stem not visible in image - other quality indicators evaluated" not in recommendations


def test_confidence_bounds():
    assert compute_confidence([70, 70, 70, 70, 70]) == 1.0
    assert compute_confidence([0, 100, 0, 100, 0]) == 0.5
    # population variance of 50..90 step 10 is 200
    assert compute_confidence([50, 60, 70, 80, 90]) == pytest.approx(0.8)


def test_confidence_handles_nan():
    confidence = compute_confidence([float("nan"), 50, 50, 50, 50])
    assert 0.5 <= confidence <= 1.0


def test_recommendations_for_weak_features():
    results = make_results(field_spot=10, stem=20, dullness=30, shape=40, webbing=50)
    recommendations = generate_recommendations(results, 25)

    assert recommendations == [
        "Look for a more pronounced yellow field spot for better sweetness",
        "Choose watermelons with brown, dry stems indicating vine ripeness",
        "Select melons with duller skin rather than shiny appearance",
        "Rounder watermelons tend to be sweeter than elongated ones",
        "Look for more pronounced webbing patterns on the skin",
        "Consider looking for a different watermelon with better quality indicators",
    ]


def test_hidden_stem_recommendation():
    results = make_results(field_spot=90, stem=65, dullness=90, shape=90, webbing=90, stem_visible=False)
    recommendations = generate_recommendations(results, 90)

    assert recommendations == [
        "Stem not visible in image - other quality indicators evaluated",
        "This watermelon shows excellent quality indicators!",
    ]


def test_closing_remark_bands():
    results = make_results(field_spot=90, stem=90, dullness=90, shape=90, webbing=90)

    assert generate_recommendations(results, 80)[-1] == "This watermelon shows excellent quality indicators!"
    assert generate_recommendations(results, 60)[-1] == \
        "This watermelon shows good quality with room for improvement"
    assert len(generate_recommendations(results, 79)) == 1


@pytest.mark.parametrize("score,grade", [
    (100, ("A+", "Excellent")),
    (90, ("A+", "Excellent")),
    (80, ("A", "Very Good")),
    (79, ("B", "Good")),
    (60, ("C", "Fair")),
    (59, ("D", "Poor")),
    (0, ("D", "Poor")),
])
def test_grade_score(score, grade):
    assert grade_score(score) == grade
