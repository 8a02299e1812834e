"""
Fast exact squared Euclidean distance transform for 2D binary masks.

    >>> import numpy as np
    >>> from fasteedt import squared_distance_transform
    >>> squared_distance_transform(np.array([[0, 0, 1, 0, 0]]))
    array([[4, 1, 0, 1, 4]])
"""

from .edt import (
    InvalidMaskError,
    sentinel_distance,
    squared_distance_transform,
    validate_mask,
)
from .images import (
    binarize_image,
    distance_to_image,
    load_image,
    roi_to_mask,
    save_image,
)

__version__ = "1.0.0"

__all__ = [
    "InvalidMaskError",
    "sentinel_distance",
    "squared_distance_transform",
    "validate_mask",
    "binarize_image",
    "distance_to_image",
    "load_image",
    "roi_to_mask",
    "save_image",
]
