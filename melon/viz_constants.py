"""
Shared visualization constants for the debug overlay.

Used by:
- visualization.py - Bounding box, search regions and result panel

Example usage:
    from .viz_constants import Color, FontScale, FontThickness, FONT_FACE

    cv2.putText(img, "Score: 82", (20, 60), FONT_FACE,
                FontScale.BODY, Color.TEXT_PRIMARY,
                FontThickness.BODY, cv2.LINE_AA)
"""

import cv2
from typing import Tuple

# ============================================================================
# FONT SETTINGS
# ============================================================================

FONT_FACE = cv2.FONT_HERSHEY_SIMPLEX


class FontScale:
    """Font scales at the reference image height (see get_scaled_font_size)."""
    TITLE = 1.2
    BODY = 0.8
    SMALL = 0.6


class FontThickness:
    TITLE = 3
    BODY = 2
    SMALL = 1


# ============================================================================
# COLORS (BGR format for OpenCV)
# ============================================================================

class Color:
    """
    Standard colors used in the overlay.

    All colors in BGR format (Blue, Green, Red) as required by OpenCV.
    """
    WHITE = (255, 255, 255)
    BLACK = (0, 0, 0)
    RED = (0, 0, 255)
    GREEN = (0, 255, 0)
    BLUE = (255, 0, 0)
    CYAN = (255, 255, 0)
    YELLOW = (0, 255, 255)
    MAGENTA = (255, 0, 255)
    ORANGE = (0, 128, 255)

    # What each color marks
    BOUNDING_BOX = GREEN
    CENTER = RED
    FIELD_SPOT = YELLOW
    STEM = ORANGE
    DULLNESS = CYAN
    WEBBING = MAGENTA

    TEXT_PRIMARY = WHITE
    TEXT_SUCCESS = GREEN
    TEXT_WARNING = YELLOW
    TEXT_ERROR = RED


# ============================================================================
# DRAWING SIZES
# ============================================================================

class Size:
    """Line thicknesses and radii in pixels at the reference height."""
    BOX_THICK = 3
    REGION_THICK = 2
    CENTER_RADIUS = 6


class Layout:
    """Result panel placement in pixels from the top-left corner."""
    PANEL_MARGIN = 10
    TEXT_X_OFFSET = 20
    TEXT_Y_START = 35
    LINE_HEIGHT = 30
    LABEL_OFFSET = 5
    PANEL_ALPHA = 0.6


REFERENCE_HEIGHT = 800


def get_scaled_font_size(base_scale: float, image_height: int,
                         reference_height: int = REFERENCE_HEIGHT,
                         min_scale: float = 0.4) -> float:
    """
    Scale font size based on image height for consistent appearance.

    Example:
        # For a 1600px tall image, double the font size
        scale = get_scaled_font_size(FontScale.BODY, 1600)
        # scale = 0.8 * 2 = 1.6
    """
    scaled = base_scale * image_height / reference_height
    return max(scaled, min_scale)


def score_color(score: float) -> Tuple[int, int, int]:
    """Green for >= 80, yellow for >= 60, red below."""
    if score >= 80:
        return Color.TEXT_SUCCESS
    if score >= 60:
        return Color.TEXT_WARNING
    return Color.TEXT_ERROR
