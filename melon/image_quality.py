"""
Image exposure metrics.

This module handles:
- Perceived brightness and contrast of the whole photo
- Under/over-exposure and low-contrast flags

The metrics are reported alongside the scores; they do not change them.
"""

from typing import Dict, Any

import cv2
import numpy as np

# Exposure thresholds (perceived brightness, 0-255)
MIN_BRIGHTNESS = 40   # Mean brightness below this is underexposed
MAX_BRIGHTNESS = 220  # Mean brightness above this is overexposed
MIN_CONTRAST = 30     # Std dev below this indicates low contrast

# Normalization divisors
BRIGHTNESS_NORMALIZER = 255.0
CONTRAST_NORMALIZER = 128.0


def compute_image_metrics(image: np.ndarray) -> Dict[str, Any]:
    """
    Compute perceived brightness and contrast.

    Brightness uses the ITU-R 601 luma weights (0.299 R + 0.587 G + 0.114 B)
    via OpenCV's grayscale conversion; contrast is the standard deviation of
    that brightness.

    Args:
        image: RGBA image buffer

    Returns:
        Dictionary containing:
        - brightness: Mean perceived brightness (0-255)
        - contrast: Standard deviation of brightness
        - normalized: {"brightness": brightness / 255, "contrast": contrast / 128}
        - is_underexposed: True if image is too dark
        - is_overexposed: True if image is too bright
        - has_good_contrast: True if contrast is sufficient
    """
    if image.size == 0:
        brightness = 0.0
        contrast = 0.0
    else:
        gray = cv2.cvtColor(np.ascontiguousarray(image), cv2.COLOR_RGBA2GRAY)
        brightness = float(np.mean(gray))
        contrast = float(np.std(gray))

    return {
        "brightness": round(brightness, 2),
        "contrast": round(contrast, 2),
        "normalized": {
            "brightness": round(brightness / BRIGHTNESS_NORMALIZER, 4),
            "contrast": round(contrast / CONTRAST_NORMALIZER, 4),
        },
        "is_underexposed": brightness < MIN_BRIGHTNESS,
        "is_overexposed": brightness > MAX_BRIGHTNESS,
        "has_good_contrast": contrast >= MIN_CONTRAST,
    }
