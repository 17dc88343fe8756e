"""
Webbing density heuristic.

Webbing is the net of brown, corky lines left where bees pollinated the
flower. Dense webbing correlates with good pollination and higher sugar.

This module handles:
- Brown pixel classification (brownness and contrast against rind green)
- Spatial clustering of brown samples
- Per-cluster scoring
- Aggregate webbing score
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .contour import find_watermelon_contour
from .heuristic_constants import (
    WEBBING_REGION_MARGIN_FRACTION,
    WEBBING_REGION_SIZE_FRACTION,
    WEBBING_SAMPLING_DIVISOR,
    WEBBING_SAMPLING_MIN_STEP,
    WEBBING_CLUSTER_RADIUS_FACTOR,
    WEBBING_MIN_CLUSTER_SIZE,
    WEBBING_YELLOWISH_GB_RATIO,
    WEBBING_STRONG_TIER,
    WEBBING_MEDIUM_TIER,
    WEBBING_LIGHT_TIER,
    WEBBING_BROWNNESS_THRESHOLD,
    WATERMELON_GREEN_RGB,
    CLUSTER_BROWNNESS_WEIGHT,
    CLUSTER_BROWNNESS_CAP,
    CLUSTER_CONTRAST_WEIGHT,
    CLUSTER_CONTRAST_CAP,
    CLUSTER_SIZE_WEIGHT,
    CLUSTER_SIZE_CAP,
    CLUSTER_LINE_WIDTH_WEIGHT,
    CLUSTER_LINE_WIDTH_CAP,
    WEBBING_BASE_RATIO_WEIGHT,
    WEBBING_BASE_CAP,
    WEBBING_CLUSTER_SCORE_WEIGHT,
    WEBBING_CLUSTER_DENSITY_WEIGHT,
    WEBBING_CLUSTER_BONUS_CAP,
    WEBBING_DENSITY_AREA_UNIT,
    WEBBING_DISTRIBUTION_MIN_CLUSTERS,
    WEBBING_DISTRIBUTION_PER_CLUSTER,
    WEBBING_DISTRIBUTION_CAP,
    WEBBING_EXCELLENT_THRESHOLD,
    WEBBING_VERY_GOOD_THRESHOLD,
    WEBBING_GOOD_THRESHOLD,
    WEBBING_MODERATE_THRESHOLD,
    WEBBING_MINIMAL_THRESHOLD,
    WEBBING_REPORTED_CLUSTERS,
    WEBBING_DEFAULT_SCORE,
)
from .models import Contour, FeatureResult, Point, Region, WebbingCluster, WebbingPixel
from .region_utils import clamp_region, clamp_score, round_half_up, safe_divide, sample_grid

logger = logging.getLogger(__name__)


def webbing_region(contour: Contour) -> Region:
    """Central 80% of the bounding box (not yet clipped)."""
    box = contour.bounding_box
    return Region(
        x=max(0, int(math.floor(box.x + box.width * WEBBING_REGION_MARGIN_FRACTION))),
        y=max(0, int(math.floor(box.y + box.height * WEBBING_REGION_MARGIN_FRACTION))),
        width=int(math.floor(box.width * WEBBING_REGION_SIZE_FRACTION)),
        height=int(math.floor(box.height * WEBBING_REGION_SIZE_FRACTION)),
    )


def detect_brown_webbing(r: int, g: int, b: int) -> Dict[str, Any]:
    """
    Classify one pixel as brown webbing.

    Args:
        r, g, b: Channel values 0-255

    Returns:
        Dictionary containing:
        - is_brown: True if brownness exceeds WEBBING_BROWNNESS_THRESHOLD
        - brownness: Heuristic brown strength 0-100
        - contrast: RGB distance from typical rind green
        - brightness: Mean of r, g, b
    """
    r, g, b = int(r), int(g), int(b)
    brightness = (r + g + b) / 3

    is_reddish_brown = r >= g >= b and r > b
    is_yellowish_brown = r >= g and r >= b and g > b * WEBBING_YELLOWISH_GB_RATIO

    brownness = 0.0
    if is_reddish_brown or is_yellowish_brown:
        max_bright, rg_ratio, second_ratio, cap, rb_div, rg_div = WEBBING_STRONG_TIER
        if brightness < max_bright and r > g * rg_ratio and r > b * second_ratio:
            brownness = min(cap, (r - b) / rb_div + (r - g) / rg_div)
        else:
            max_bright, rg_ratio, second_ratio, cap, rb_div, rg_div = WEBBING_MEDIUM_TIER
            # medium tier compares g against b rather than r against b
            if brightness < max_bright and r > g * rg_ratio and g > b * second_ratio:
                brownness = min(cap, (r - b) / rb_div + (r - g) / rg_div)
            else:
                max_bright, rg_ratio, second_ratio, cap, rb_div, rg_div = WEBBING_LIGHT_TIER
                if brightness < max_bright and r > g * rg_ratio and r > b * second_ratio:
                    brownness = min(cap, (r - b) / rb_div + (r - g) / rg_div)

    gr, gg, gb = WATERMELON_GREEN_RGB
    contrast = math.sqrt((r - gr) ** 2 + (g - gg) ** 2 + (b - gb) ** 2)

    return {
        "is_brown": brownness > WEBBING_BROWNNESS_THRESHOLD,
        "brownness": brownness,
        "contrast": contrast,
        "brightness": brightness,
    }


def find_webbing_clusters(
    pixels: List[WebbingPixel],
    cluster_radius: float,
) -> List[WebbingCluster]:
    """
    Group brown samples into spatial clusters.

    Each cluster starts from the first unvisited pixel and repeatedly absorbs
    the first unvisited pixel (in scan order) lying within cluster_radius of
    the cluster centroid, recomputing the centroid after every addition,
    until no pixel is in reach.

    Args:
        pixels: Brown samples in scan order
        cluster_radius: Absorption distance from the centroid

    Returns:
        Clusters with at least WEBBING_MIN_CLUSTER_SIZE pixels, largest first
    """
    if not pixels:
        return []

    xs = np.array([p.x for p in pixels], dtype=np.float64)
    ys = np.array([p.y for p in pixels], dtype=np.float64)
    unvisited = np.ones(len(pixels), dtype=bool)
    clusters = []

    for seed_index, seed in enumerate(pixels):
        if not unvisited[seed_index]:
            continue
        unvisited[seed_index] = False

        members = [seed]
        sum_x, sum_y = float(seed.x), float(seed.y)
        center_x, center_y = sum_x, sum_y

        while True:
            candidates = np.flatnonzero(unvisited)
            if len(candidates) == 0:
                break
            distances = np.hypot(xs[candidates] - center_x, ys[candidates] - center_y)
            in_reach = candidates[distances <= cluster_radius]
            if len(in_reach) == 0:
                break

            index = int(in_reach[0])
            unvisited[index] = False
            members.append(pixels[index])
            sum_x += xs[index]
            sum_y += ys[index]
            center_x = sum_x / len(members)
            center_y = sum_y / len(members)

        if len(members) >= WEBBING_MIN_CLUSTER_SIZE:
            clusters.append(WebbingCluster(
                center=Point(center_x, center_y),
                pixels=members,
                total_brownness=sum(p.brownness for p in members),
                total_contrast=sum(p.contrast for p in members),
            ))

    # sorted() is stable, so equal-size clusters keep discovery order
    return sorted(clusters, key=lambda c: len(c.pixels), reverse=True)


def analyze_webbing_cluster(cluster: WebbingCluster) -> Dict[str, float]:
    """
    Score one webbing cluster.

    Line width is estimated as the mean distance of members from the
    centroid; density as members per disk of the maximum distance.

    Returns:
        Dictionary containing score (0-100), avg_brownness, avg_contrast,
        avg_line_width, max_line_width and density
    """
    n = len(cluster.pixels)
    avg_brownness = safe_divide(cluster.total_brownness, n)
    avg_contrast = safe_divide(cluster.total_contrast, n)

    distances = [math.hypot(p.x - cluster.center.x, p.y - cluster.center.y) for p in cluster.pixels]
    avg_line_width = safe_divide(sum(distances), len(distances))
    max_line_width = max(distances) if distances else 0.0
    density = safe_divide(n, math.pi * max_line_width ** 2)

    score = (
        min(CLUSTER_BROWNNESS_CAP, avg_brownness * CLUSTER_BROWNNESS_WEIGHT)
        + min(CLUSTER_CONTRAST_CAP, avg_contrast * CLUSTER_CONTRAST_WEIGHT)
        + min(CLUSTER_SIZE_CAP, n * CLUSTER_SIZE_WEIGHT)
        + min(CLUSTER_LINE_WIDTH_CAP, avg_line_width * CLUSTER_LINE_WIDTH_WEIGHT)
    )

    return {
        "score": min(100.0, score),
        "avg_brownness": round_half_up(avg_brownness),
        "avg_contrast": round_half_up(avg_contrast),
        "avg_line_width": round(avg_line_width, 1),
        "max_line_width": round(max_line_width, 1),
        "density": round(density, 2),
    }


def describe_webbing(score: int) -> str:
    if score > WEBBING_EXCELLENT_THRESHOLD:
        return "Excellent webbing density with concentrated regions - superior pollination"
    if score > WEBBING_VERY_GOOD_THRESHOLD:
        return "Very good webbing patterns with clear brown lines"
    if score > WEBBING_GOOD_THRESHOLD:
        return "Good webbing - some brown line patterns detected"
    if score > WEBBING_MODERATE_THRESHOLD:
        return "Moderate webbing - limited brown line patterns"
    if score > WEBBING_MINIMAL_THRESHOLD:
        return "Minimal webbing - few brown lines detected"
    return "No significant brown webbing patterns detected"


def collect_brown_pixels(
    image: np.ndarray,
    region: Region,
    step: int,
) -> Tuple[List[WebbingPixel], int]:
    """
    Sample the region on a grid and keep the brown samples.

    Returns:
        Tuple of (brown pixels in scan order, total sample count)
    """
    roi = clamp_region(region, image.shape)
    samples = sample_grid(image, roi, step)
    if len(samples) == 0:
        return [], 0

    cols = len(range(roi.x, roi.x + roi.width, step))
    brown_pixels = []
    for i, (r, g, b) in enumerate(samples):
        result = detect_brown_webbing(r, g, b)
        if result["is_brown"]:
            brown_pixels.append(WebbingPixel(
                x=roi.x + (i % cols) * step,
                y=roi.y + (i // cols) * step,
                brownness=result["brownness"],
                contrast=result["contrast"],
            ))

    return brown_pixels, len(samples)


def analyze_webbing_density(
    image: np.ndarray,
    contour: Optional[Contour] = None,
) -> FeatureResult:
    """
    Score webbing from brown line samples over the central 80% of the fruit.

    Args:
        image: RGBA image buffer
        contour: Precomputed contour (located on demand if None)

    Returns:
        FeatureResult; score 30 with details["error"] if the search region
        is invalid or analysis fails
    """
    try:
        if contour is None:
            contour = find_watermelon_contour(image)

        search_region = webbing_region(contour)
        if not search_region.is_valid:
            logger.warning("Invalid search region for webbing analysis")
            return FeatureResult(
                score=WEBBING_DEFAULT_SCORE,
                description="Unable to analyze webbing - invalid region",
                details={"error": "Invalid search region"},
            )

        step = max(WEBBING_SAMPLING_MIN_STEP,
                   int(math.sqrt(search_region.area) // WEBBING_SAMPLING_DIVISOR))
        brown_pixels, sample_count = collect_brown_pixels(image, search_region, step)

        clusters = find_webbing_clusters(brown_pixels, step * WEBBING_CLUSTER_RADIUS_FACTOR)

        cluster_summaries = []
        max_cluster_score = 0.0
        for cluster in clusters:
            stats = analyze_webbing_cluster(cluster)
            max_cluster_score = max(max_cluster_score, stats["score"])
            cluster_summaries.append({
                "center": (round(cluster.center.x, 1), round(cluster.center.y, 1)),
                "size": len(cluster.pixels),
                "score": round(stats["score"], 1),
                "avg_brownness": stats["avg_brownness"],
                "avg_line_width": stats["avg_line_width"],
                "density": stats["density"],
            })

        brown_pixel_ratio = safe_divide(len(brown_pixels), sample_count)
        cluster_density = safe_divide(len(clusters), search_region.area / WEBBING_DENSITY_AREA_UNIT)

        base_score = min(WEBBING_BASE_CAP, brown_pixel_ratio * WEBBING_BASE_RATIO_WEIGHT)

        cluster_bonus = 0.0
        if clusters:
            cluster_bonus = min(WEBBING_CLUSTER_BONUS_CAP,
                                max_cluster_score * WEBBING_CLUSTER_SCORE_WEIGHT
                                + cluster_density * WEBBING_CLUSTER_DENSITY_WEIGHT)

        distribution_bonus = 0.0
        if len(clusters) >= WEBBING_DISTRIBUTION_MIN_CLUSTERS:
            distribution_bonus = min(WEBBING_DISTRIBUTION_CAP,
                                     len(clusters) * WEBBING_DISTRIBUTION_PER_CLUSTER)

        final_score = clamp_score(base_score + cluster_bonus + distribution_bonus)

        logger.debug(f"Webbing: step={step}, samples={sample_count}, brown={len(brown_pixels)}, "
                     f"clusters={len(clusters)}, score={final_score}")

        return FeatureResult(
            score=final_score,
            description=describe_webbing(final_score),
            details={
                "brown_pixel_ratio": round(brown_pixel_ratio, 3),
                "brown_line_pixels": len(brown_pixels),
                "total_clusters": len(clusters),
                "cluster_density": round(cluster_density, 2),
                "max_cluster_score": round_half_up(max_cluster_score),
                "base_score": round_half_up(base_score),
                "cluster_bonus": round_half_up(cluster_bonus),
                "distribution_bonus": round_half_up(distribution_bonus),
                "webbing_clusters": cluster_summaries[:WEBBING_REPORTED_CLUSTERS],
                "sample_count": sample_count,
                "search_region": search_region,
            },
        )

    except Exception as e:
        logger.warning(f"Webbing analysis failed: {e}")
        return FeatureResult(
            score=WEBBING_DEFAULT_SCORE,
            description=f"Webbing analysis unavailable - {e}",
            details={"error": str(e)},
        )
