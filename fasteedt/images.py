"""Mask construction and image helpers around the distance transform."""

from typing import Optional

import numpy as np
from PIL import Image


# ============================================================================
# MASKS
# ============================================================================

def roi_to_mask(fov_w: int, fov_h: int, roi_x: int, roi_y: int,
                roi_w: int, roi_h: int) -> np.ndarray:
    """Binary mask of a rectangular region of interest inside a field of view.

    The field of view origin is (1, 1). The ROI is clipped to the field of
    view, so a ROI lying completely outside yields an all-zero mask.

    Args:
        fov_w, fov_h: Field of view width and height in pixels
        roi_x, roi_y: ROI origin (1-based) relative to the field of view
        roi_w, roi_h: ROI width and height in pixels

    Returns:
        uint8 array of shape (fov_h, fov_w) with ones inside the ROI
    """
    params = {
        "fov_w": fov_w, "fov_h": fov_h,
        "roi_x": roi_x, "roi_y": roi_y,
        "roi_w": roi_w, "roi_h": roi_h,
    }
    for name, value in params.items():
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise ValueError(f"{name} must be an integer, got {value!r}")
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")

    bw = np.zeros((fov_h, fov_w), dtype=np.uint8)
    x0 = max(1, roi_x)
    x1 = min(fov_w, roi_x + roi_w - 1)
    y0 = max(1, roi_y)
    y1 = min(fov_h, roi_y + roi_h - 1)

    # Slices are empty when the ROI starts past the field of view
    bw[y0 - 1:y1, x0 - 1:x1] = 1
    return bw


def binarize_image(img: np.ndarray, threshold: Optional[float] = None,
                   invert: bool = False) -> np.ndarray:
    """Binarize an image into a {0, 1} mask.

    Args:
        img: Input image (grayscale or RGB)
        threshold: Binarization threshold (default: mean intensity)
        invert: Mark pixels at or below the threshold as foreground instead

    Returns:
        uint8 mask, 1 where the pixel is foreground
    """
    if len(img.shape) == 3:
        img = np.mean(img, axis=2)
    if threshold is None:
        threshold = np.mean(img)
    fg = img > threshold
    if invert:
        fg = ~fg
    return fg.astype(np.uint8)


# ============================================================================
# IMAGE I/O
# ============================================================================

def load_image(filepath: str) -> np.ndarray:
    """Load an image from any format Pillow reads and return it as an array.

    Palette and RGBA images are converted to RGB.
    """
    img = Image.open(filepath)
    if img.mode in ('P', 'RGBA'):
        img = img.convert('RGB')
    return np.array(img)


def save_image(img: np.ndarray, filepath: str) -> None:
    """Save a uint8 image, format chosen from the file extension."""
    pil_img = Image.fromarray(img)

    ext = filepath.lower().split('.')[-1]
    if ext in ('jpg', 'jpeg'):
        # JPEG doesn't support palette or RGBA
        if pil_img.mode not in ('RGB', 'L'):
            pil_img = pil_img.convert('L')

    pil_img.save(filepath)


def distance_to_image(dist: np.ndarray) -> np.ndarray:
    """Scale a squared distance field linearly to 0..255 for previews."""
    dist = np.asarray(dist, dtype=np.float64)
    top = dist.max()
    if top <= 0:
        return np.zeros(dist.shape, dtype=np.uint8)
    return np.rint(dist * (255.0 / top)).astype(np.uint8)
