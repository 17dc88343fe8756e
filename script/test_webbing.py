#!/usr/bin/env python3
"""
Test webbing pixel classification, clustering and the webbing score.
"""

import math
import os
import sys

import numpy as np

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from melon.models import Contour, Point, Region, WebbingPixel
from melon.image_buffer import to_rgba_buffer
from melon.webbing import (
    analyze_webbing_cluster,
    analyze_webbing_density,
    detect_brown_webbing,
    find_webbing_clusters,
    webbing_region,
)

RIND_GREEN = (80, 120, 60)
WEB_BROWN = (120, 80, 40)


def striped_melon(stripe_every=None):
    """Green melon on white with optional 4px brown horizontal stripes."""
    image = np.full((200, 200, 3), 255, dtype=np.uint8)
    image[20:180, 20:180] = RIND_GREEN
    if stripe_every:
        for y in range(20, 180, stripe_every):
            image[y:y + 4, 20:180] = WEB_BROWN
    return to_rgba_buffer(image)


def brown_pixel(x, y):
    return WebbingPixel(x=x, y=y, brownness=50.0, contrast=60.0)


def test_detect_brown_webbing():
    """Dark reddish brown is webbing; rind green is not."""
    brown = detect_brown_webbing(*WEB_BROWN)
    assert brown["is_brown"]
    assert brown["brownness"] == 50
    assert math.isclose(brown["contrast"], 60.0)
    assert math.isclose(brown["brightness"], 80.0)

    green = detect_brown_webbing(*RIND_GREEN)
    assert not green["is_brown"]
    assert green["brownness"] == 0
    assert green["contrast"] == 0


def test_bright_pixels_are_not_webbing():
    assert not detect_brown_webbing(250, 240, 230)["is_brown"]
    assert not detect_brown_webbing(0, 0, 0)["is_brown"]


def test_clusters_grow_from_centroid():
    """Nearby pixels merge; clusters below 3 pixels are dropped."""
    pixels = [
        brown_pixel(0, 0), brown_pixel(2, 0), brown_pixel(4, 0),
        brown_pixel(100, 100), brown_pixel(102, 100),
    ]
    clusters = find_webbing_clusters(pixels, cluster_radius=6)

    assert len(clusters) == 1
    assert len(clusters[0].pixels) == 3
    assert clusters[0].center == Point(2.0, 0.0)
    assert clusters[0].total_brownness == 150.0


def test_clusters_sorted_largest_first():
    pixels = [brown_pixel(x, 0) for x in (0, 1, 2)] + [brown_pixel(x, 50) for x in (0, 1, 2, 3, 4)]
    clusters = find_webbing_clusters(pixels, cluster_radius=6)

    assert [len(c.pixels) for c in clusters] == [5, 3]
    assert find_webbing_clusters([], cluster_radius=6) == []


def test_cluster_score():
    cluster = find_webbing_clusters(
        [brown_pixel(0, 0), brown_pixel(2, 0), brown_pixel(4, 0)], cluster_radius=6)[0]
    stats = analyze_webbing_cluster(cluster)

    # brownness 30 + contrast 12 + size 6 + line width 2/3
    assert math.isclose(stats["score"], 48 + 2 / 3)
    assert stats["avg_brownness"] == 50
    assert stats["avg_contrast"] == 60
    assert stats["max_line_width"] == 2.0
    assert stats["density"] == round(3 / (math.pi * 4), 2)


def test_webbing_region_is_central_80_percent():
    contour = Contour(Region(10, 20, 100, 50), Point(60, 45), 1)
    assert webbing_region(contour) == Region(20, 25, 80, 40)


def test_striped_melon_has_strong_webbing():
    result = analyze_webbing_density(striped_melon(stripe_every=20))

    assert result.score >= 80
    assert result.details["total_clusters"] >= 2
    assert result.details["brown_line_pixels"] > 0
    assert len(result.details["webbing_clusters"]) <= 5
    assert result.details["base_score"] == 58


def test_plain_rind_has_no_webbing():
    result = analyze_webbing_density(striped_melon())

    assert result.score == 0
    assert result.details["total_clusters"] == 0
    assert result.description == "No significant brown webbing patterns detected"


def test_zero_width_box_is_invalid_region():
    contour = Contour(Region(0, 0, 0, 50), Point(0, 25), 0)
    result = analyze_webbing_density(striped_melon(), contour)

    assert result.score == 30
    assert result.description == "Unable to analyze webbing - invalid region"
