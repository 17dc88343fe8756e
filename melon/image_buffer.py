"""
Image buffer normalization and loading.

The pipeline works on a single layout: (height, width, 4) uint8 RGBA.
Everything entering the pipeline goes through `to_rgba_buffer` first.
"""

from pathlib import Path
from typing import Union

import cv2
import numpy as np

from .models import AnalysisError

SUPPORTED_EXTENSIONS = (".jpg", ".jpeg", ".png")


def to_rgba_buffer(image: np.ndarray) -> np.ndarray:
    """
    Convert an in-memory image to a read-only RGBA uint8 buffer.

    Args:
        image: (H, W) grayscale, (H, W, 3) RGB or (H, W, 4) RGBA array

    Returns:
        Read-only (H, W, 4) uint8 copy

    Raises:
        AnalysisError: if the input is not a decodable pixel grid
    """
    if not isinstance(image, np.ndarray):
        raise AnalysisError(f"Expected a numpy array, got {type(image).__name__}")

    if image.ndim not in (2, 3):
        raise AnalysisError(f"Expected a 2D or 3D pixel array, got shape {image.shape}")

    height, width = image.shape[:2]
    if height == 0 or width == 0:
        raise AnalysisError(f"Image is empty ({width}x{height})")

    if image.ndim == 3 and image.shape[2] not in (1, 3, 4):
        raise AnalysisError(f"Unsupported channel count: {image.shape[2]}")

    if image.dtype != np.uint8:
        if np.issubdtype(image.dtype, np.floating) and not np.all(np.isfinite(image)):
            raise AnalysisError("Image contains non-finite pixel values")
        if not np.issubdtype(image.dtype, np.number):
            raise AnalysisError(f"Unsupported pixel dtype: {image.dtype}")
        image = np.clip(image, 0, 255).astype(np.uint8)

    if image.ndim == 3 and image.shape[2] == 1:
        image = image[:, :, 0]

    image = np.ascontiguousarray(image)

    if image.ndim == 2:
        rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    elif image.shape[2] == 3:
        rgba = cv2.cvtColor(image, cv2.COLOR_RGB2RGBA)
    else:
        rgba = image.copy()

    rgba.setflags(write=False)
    return rgba


def load_image(input_path: Union[str, Path]) -> np.ndarray:
    """
    Load an image file as an RGBA buffer.

    Args:
        input_path: Path to a JPG or PNG file

    Returns:
        Read-only (H, W, 4) uint8 RGBA buffer

    Raises:
        AnalysisError: if the file cannot be decoded
    """
    image = cv2.imread(str(input_path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise AnalysisError(f"Failed to load image: {input_path}")

    # OpenCV decodes to BGR(A)
    if image.ndim == 3 and image.shape[2] == 3:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    elif image.ndim == 3 and image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)

    return to_rgba_buffer(image)


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Convert an RGBA buffer to a writable BGR image for OpenCV drawing and saving."""
    return cv2.cvtColor(np.ascontiguousarray(image), cv2.COLOR_RGBA2BGR)
