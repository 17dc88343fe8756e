#!/usr/bin/env python3
"""
Test the field spot, stem, skin dullness and shape heuristics, and the
score range shared by all five heuristics.

Images are synthetic: a white background with a solid-color "melon"
rectangle, optionally repainted in places to plant a field spot or stem.
"""

import os
import sys

import numpy as np
import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from melon.models import ColorSample, Contour, Point, Region
from melon.image_buffer import to_rgba_buffer
from melon.field_spot import analyze_field_spot_color, field_spot_region, is_yellowish, score_yellow_color
from melon.stem_color import analyze_stem_color, is_dry_brown
from melon.skin_dullness import analyze_skin_dullness
from melon.shape_ratio import analyze_shape_ratio, classify_shape, score_aspect_ratio
from melon.webbing import analyze_webbing_density

RIND_GREEN = (40, 140, 40)


def melon_image(rind=RIND_GREEN, size=200, top=40, bottom=160):
    """White canvas with a square melon covering rows/cols top..bottom-1."""
    image = np.full((size, size, 3), 255, dtype=np.uint8)
    image[top:bottom, top:bottom] = rind
    return image


def box_contour(width, height, x=0, y=0):
    return Contour(
        bounding_box=Region(x, y, width, height),
        center=Point(x + width / 2, y + height / 2),
        area=1,
    )


# --- Field spot ---

def test_yellow_lower_half_scores_high():
    """A saturated yellow lower half is an excellent field spot."""
    image = melon_image()
    image[100:160, 40:160] = (230, 200, 60)
    result = analyze_field_spot_color(to_rgba_buffer(image))

    assert result.score > 60
    assert result.score == 100
    assert result.description.startswith("Excellent")
    assert result.details["best_yellow_color"].rgb == (224, 192, 32)
    assert result.details["search_region"] == Region(42, 100, 117, 58)


def test_green_lower_half_has_no_field_spot():
    result = analyze_field_spot_color(to_rgba_buffer(melon_image()))

    assert result.score == 0
    assert result.description == "No clear field spot detected"
    assert result.details["best_yellow_color"] is None


def test_field_spot_region_is_lower_half():
    contour = box_contour(100, 80, x=10, y=20)
    assert field_spot_region(contour, (200, 200, 4)) == Region(10, 60, 100, 40)


def test_yellow_tiers():
    """Stronger yellows score higher; non-yellow colors score 0."""
    strong = score_yellow_color(ColorSample((224, 192, 32), "#e0c020", 5.0))
    pale = score_yellow_color(ColorSample((160, 128, 96), "#a08060", 5.0))
    green = score_yellow_color(ColorSample((32, 128, 32), "#208020", 50.0))

    assert strong == 100
    assert 0 < pale < strong
    assert green == 0
    assert is_yellowish(224, 192, 32)
    assert not is_yellowish(32, 128, 32)


# --- Stem ---

def test_brown_stem_scores_high():
    image = melon_image()
    image[40:80, 40:160] = (130, 100, 70)
    result = analyze_stem_color(to_rgba_buffer(image))

    assert result.score == 100
    assert result.details["stem_visible"] is True
    assert result.description == "Excellent brown/dry stem - vine ripened"


def test_green_stem_is_penalized():
    result = analyze_stem_color(to_rgba_buffer(melon_image(rind=(60, 180, 60))))

    assert result.score == 0
    assert result.details["stem_visible"] is True
    assert result.details["green_penalty"] == 40
    assert result.description.startswith("Green stem detected")


def test_stem_not_visible_gives_neutral_score():
    """No brown and no strong green in the stem region: neutral 65."""
    result = analyze_stem_color(to_rgba_buffer(melon_image(rind=(40, 90, 40))))

    assert result.score == 65
    assert result.details["stem_visible"] is False
    assert "not visible" in result.description


def test_dry_brown_classification():
    assert is_dry_brown(128, 96, 64)
    assert not is_dry_brown(32, 160, 32)
    # r and g too far apart
    assert not is_dry_brown(170, 100, 60)


# --- Skin dullness ---

def test_uniform_skin_is_dull():
    image = melon_image(rind=(128, 128, 128), size=100, top=20, bottom=80)
    result = analyze_skin_dullness(to_rgba_buffer(image))

    assert result.score == 100
    assert result.description == "Excellent dull skin - indicates maturity"
    assert result.details["pixel_count"] == 9
    assert result.details["std_dev"] == 0


def test_high_contrast_skin_is_shiny():
    image = np.zeros((100, 100, 3), dtype=np.uint8)
    image[:, :50] = (60, 60, 60)
    image[:, 50:] = (200, 200, 200)
    result = analyze_skin_dullness(to_rgba_buffer(image), box_contour(100, 100))

    assert result.score < 45
    assert "shiny" in result.description.lower()
    assert result.details["pixel_count"] == 16


def test_dullness_needs_enough_samples():
    """Tiny fruit: fewer than 5 samples falls back to 50."""
    image = np.full((10, 10, 3), 120, dtype=np.uint8)
    result = analyze_skin_dullness(to_rgba_buffer(image))

    assert result.score == 50
    assert result.description == "Skin analysis unavailable - Insufficient pixel data for analysis"
    assert "error" in result.details


# --- Shape ---

def test_square_box_is_round():
    image = to_rgba_buffer(melon_image())
    result = analyze_shape_ratio(image, box_contour(100, 100))

    assert result.score == 100
    assert result.details["shape_type"] == "round"
    assert result.details["aspect_ratio"] == 1.0


@pytest.mark.parametrize("width,expected", [
    (110, 99),
    (120, 80),
    (200, 0),
    (50, 35),
])
def test_shape_scores(width, expected):
    image = to_rgba_buffer(melon_image())
    result = analyze_shape_ratio(image, box_contour(width, 100))
    assert result.score == expected


def test_shape_score_peaks_at_round():
    """Moving the ratio away from 1 never increases the score."""
    wide = [score_aspect_ratio(r) for r in (1.0, 1.1, 1.2, 1.4, 1.8, 2.5)]
    tall = [score_aspect_ratio(r) for r in (1.0, 0.9, 0.8, 0.6, 0.3)]

    assert wide == sorted(wide, reverse=True)
    assert tall == sorted(tall, reverse=True)
    assert all(0 <= s <= 100 for s in wide + tall)


def test_shape_classification():
    assert classify_shape(0.5)[0] == "very tall/narrow"
    assert classify_shape(0.8)[0] == "tall/oval"
    assert classify_shape(0.9)[0] == "slightly tall"
    assert classify_shape(1.05)[0] == "round"
    assert classify_shape(1.2)[0] == "slightly wide"
    assert classify_shape(1.3)[0] == "wide/oval"
    assert classify_shape(2.0)[0] == "very wide"


@pytest.mark.parametrize("width,height", [(10, 0), (0, 10), (-5, 10)])
def test_degenerate_box_falls_back(width, height):
    image = to_rgba_buffer(melon_image())
    result = analyze_shape_ratio(image, box_contour(width, height))

    assert result.score == 50
    assert result.description == "Shape analysis unavailable"


# --- Shared contract ---

@pytest.mark.parametrize("analyzer", [
    analyze_field_spot_color,
    analyze_stem_color,
    analyze_skin_dullness,
    analyze_shape_ratio,
    analyze_webbing_density,
])
@pytest.mark.parametrize("seed", [0, 1, 2])
def test_scores_stay_in_range_on_noise(analyzer, seed):
    rng = np.random.default_rng(seed)
    image = to_rgba_buffer(rng.integers(0, 256, size=(90, 120, 3), dtype=np.uint8))
    result = analyzer(image)

    assert isinstance(result.score, int)
    assert 0 <= result.score <= 100
    assert result.description
    assert "error" not in result.details
