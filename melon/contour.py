"""
Coarse fruit localization.

Finds the approximate bounding box of the watermelon by sparse sampling and
background thresholding. This is not a segmentation: downstream heuristics
must tolerate an inaccurate box.
"""

import logging

import numpy as np

from .heuristic_constants import (
    CONTOUR_SAMPLE_STRIDE,
    BACKGROUND_WHITE_MIN,
    BACKGROUND_BLACK_MAX,
)
from .models import Contour, Point, Region

logger = logging.getLogger(__name__)


def background_mask(rgb: np.ndarray) -> np.ndarray:
    """
    Classify pixels as background.

    Args:
        rgb: (..., 3) array of RGB values

    Returns:
        Boolean array, True where the pixel is near-white or near-black
    """
    near_white = np.all(rgb > BACKGROUND_WHITE_MIN, axis=-1)
    near_black = np.all(rgb < BACKGROUND_BLACK_MAX, axis=-1)
    return near_white | near_black


def find_watermelon_contour(image: np.ndarray) -> Contour:
    """
    Locate the fruit against a light or dark background.

    Samples every CONTOUR_SAMPLE_STRIDE-th pixel in each axis and accumulates
    the extent and centroid of the non-background samples.

    Args:
        image: RGBA image buffer

    Returns:
        Contour with bounding box, center and sampled area. When no
        foreground is found the box covers the whole image and area is 0.
    """
    height, width = image.shape[:2]
    step = CONTOUR_SAMPLE_STRIDE

    samples = image[::step, ::step, :3]
    foreground = ~background_mask(samples)
    rows, cols = np.nonzero(foreground)

    if len(rows) == 0:
        logger.debug(f"No foreground found in {width}x{height} image, using full frame")
        return Contour(
            bounding_box=Region(0, 0, width, height),
            center=Point(width / 2, height / 2),
            area=0,
        )

    xs = cols * step
    ys = rows * step
    min_x, max_x = int(xs.min()), int(xs.max())
    min_y, max_y = int(ys.min()), int(ys.max())

    contour = Contour(
        bounding_box=Region(min_x, min_y, max_x - min_x, max_y - min_y),
        center=Point(float(xs.mean()), float(ys.mean())),
        area=int(len(rows)),
    )
    logger.debug(f"Contour box={contour.bounding_box.as_tuple()}, area={contour.area}")
    return contour
