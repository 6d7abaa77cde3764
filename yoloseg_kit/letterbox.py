from typing import Tuple

import numpy as np

from .geometry import div_stride
from .types import ScaleFactors


def letterbox(
    image: np.ndarray,
    stride: int = 32,
    color: Tuple[int, int, int] = (0, 0, 0),
) -> Tuple[np.ndarray, ScaleFactors]:
    """
    Stride-align an image and pad it to a square, bottom/right only.

    Returns:
        padded: (S, S, C) image, S = max side after stride rounding
        scale: ratios mapping model-canvas coordinates to the padded square
    """
    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for letterbox(). Install with `pip install opencv-python`.") from e

    h, w = image.shape[:2]
    new_w, new_h = div_stride(stride, w, h)

    if (w, h) != (new_w, new_h):
        image = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_LINEAR)

    max_size = max(new_w, new_h)
    x_pad, y_pad = max_size - new_w, max_size - new_h
    scale = ScaleFactors(x_ratio=max_size / new_w, y_ratio=max_size / new_h)

    padded = cv2.copyMakeBorder(image, 0, y_pad, 0, x_pad, cv2.BORDER_CONSTANT, value=color)
    return padded, scale
