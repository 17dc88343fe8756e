"""
Debug visualization utilities.

This module handles:
- Bounding box and centroid overlay
- Search region outlines for each heuristic
- Result annotation panel
"""

from typing import Dict, Optional

import cv2
import numpy as np

from .field_spot import field_spot_region
from .heuristic_constants import DULLNESS_REGION_FRACTION
from .image_buffer import to_bgr
from .models import AnalysisResult, Contour, Region
from .region_utils import clamp_region
from .stem_color import stem_region
from .viz_constants import (
    FONT_FACE,
    Color,
    FontScale,
    FontThickness,
    Size,
    Layout,
    REFERENCE_HEIGHT,
    get_scaled_font_size,
    score_color,
)
from .webbing import webbing_region


def get_scaled_params(image_height: int) -> Dict[str, float]:
    """Scale line widths and text layout to the image height."""
    factor = max(0.5, image_height / REFERENCE_HEIGHT)
    return {
        "font_scale": get_scaled_font_size(FontScale.BODY, image_height),
        "title_scale": get_scaled_font_size(FontScale.TITLE, image_height),
        "small_scale": get_scaled_font_size(FontScale.SMALL, image_height),
        "text_thickness": max(1, int(FontThickness.BODY * factor)),
        "box_thickness": max(1, int(Size.BOX_THICK * factor)),
        "region_thickness": max(1, int(Size.REGION_THICK * factor)),
        "center_radius": max(2, int(Size.CENTER_RADIUS * factor)),
        "line_height": int(Layout.LINE_HEIGHT * factor),
        "y_start": int(Layout.TEXT_Y_START * factor),
        "x_offset": int(Layout.TEXT_X_OFFSET * factor),
    }


def search_regions(contour: Contour, image_shape) -> Dict[str, Region]:
    """Regions each heuristic inspects, clipped to the image."""
    box = contour.bounding_box
    size = min(box.width, box.height) * DULLNESS_REGION_FRACTION
    cx = box.x + box.width / 2
    cy = box.y + box.height / 2
    dullness = Region(int(cx - size / 2), int(cy - size / 2), int(size), int(size))

    return {
        "field_spot": field_spot_region(contour, image_shape),
        "stem": stem_region(contour, image_shape),
        "dullness": clamp_region(dullness, image_shape),
        "webbing": clamp_region(webbing_region(contour), image_shape),
    }


def draw_region(
    image: np.ndarray,
    region: Region,
    color,
    label: str,
    params: Dict[str, float],
) -> np.ndarray:
    """Outline a region and label it at its top-left corner."""
    if not region.is_valid:
        return image
    top_left = (region.x, region.y)
    bottom_right = (region.x + region.width - 1, region.y + region.height - 1)
    cv2.rectangle(image, top_left, bottom_right, color, params["region_thickness"])
    cv2.putText(
        image,
        label,
        (region.x + Layout.LABEL_OFFSET, region.y + int(params["line_height"] * 0.7)),
        FONT_FACE,
        params["small_scale"],
        color,
        max(1, params["text_thickness"] - 1),
        cv2.LINE_AA,
    )
    return image


def draw_contour(image: np.ndarray, contour: Contour) -> np.ndarray:
    """Draw the bounding box and centroid."""
    params = get_scaled_params(image.shape[0])
    box = contour.bounding_box
    if box.is_valid:
        cv2.rectangle(image, (box.x, box.y), (box.x + box.width, box.y + box.height),
                      Color.BOUNDING_BOX, params["box_thickness"])
    center = (int(contour.center.x), int(contour.center.y))
    cv2.circle(image, center, params["center_radius"], Color.CENTER, -1)
    return image


def add_result_text(image: np.ndarray, result: AnalysisResult) -> np.ndarray:
    """Add a semi-transparent panel with the overall and per-feature scores."""
    params = get_scaled_params(image.shape[0])

    lines = [
        (f"Score: {result.overall_score} ({result.grade} - {result.grade_description})",
         score_color(result.overall_score), params["title_scale"]),
        (f"Confidence: {result.confidence:.2f}", Color.TEXT_PRIMARY, params["font_scale"]),
    ]
    for name, feature in result.features().items():
        label = name.replace("_", " ").title()
        weight = result.weights.get(name, 0)
        lines.append((f"{label}: {feature.score} (w={weight:g})",
                      score_color(feature.score), params["font_scale"]))

    panel_height = params["y_start"] + len(lines) * params["line_height"]
    panel_width = min(image.shape[1] - Layout.PANEL_MARGIN, int(520 * params["font_scale"] / FontScale.BODY))

    overlay = image.copy()
    cv2.rectangle(overlay, (Layout.PANEL_MARGIN, Layout.PANEL_MARGIN),
                  (panel_width, panel_height), Color.BLACK, -1)
    cv2.addWeighted(overlay, Layout.PANEL_ALPHA, image, 1 - Layout.PANEL_ALPHA, 0, image)

    for i, (text, color, scale) in enumerate(lines):
        cv2.putText(
            image,
            text,
            (params["x_offset"], params["y_start"] + i * params["line_height"]),
            FONT_FACE,
            scale,
            color,
            params["text_thickness"],
            cv2.LINE_AA,
        )

    return image


def create_debug_visualization(
    image: np.ndarray,
    contour: Contour,
    result: Optional[AnalysisResult] = None,
) -> np.ndarray:
    """
    Create debug overlay on the analyzed image.

    Args:
        image: RGBA image buffer
        contour: Contour used for the analysis
        result: Analysis result to annotate (optional)

    Returns:
        Annotated BGR image
    """
    vis = to_bgr(image)
    params = get_scaled_params(vis.shape[0])

    regions = search_regions(contour, image.shape)
    draw_region(vis, regions["webbing"], Color.WEBBING, "Webbing", params)
    draw_region(vis, regions["field_spot"], Color.FIELD_SPOT, "Field spot", params)
    draw_region(vis, regions["stem"], Color.STEM, "Stem", params)
    draw_region(vis, regions["dullness"], Color.DULLNESS, "Dullness", params)

    vis = draw_contour(vis, contour)

    if result is not None:
        vis = add_result_text(vis, result)

    return vis
