from __future__ import annotations

import logging

import numpy as np

from .errors import PreprocessError
from .letterbox import letterbox
from .types import PreprocessResult

LOGGER = logging.getLogger(__name__)

# Conversion codes are looked up lazily so importing this module never needs cv2.
_TO_BGR = {
    "RGBA": "COLOR_RGBA2BGR",
    "BGRA": "COLOR_BGRA2BGR",
    "RGB": "COLOR_RGB2BGR",
    "GRAY": "COLOR_GRAY2BGR",
}


class Preprocessor:
    """
    Image -> (1, 3, H, W) float32 blob for a YOLO segmentation model.

    Steps: convert to BGR, stride-align, pad to a square (bottom/right, black),
    then `cv2.dnn.blobFromImage` resizes to the model size, scales to [0, 1]
    and swaps B/R so the model sees RGB.
    """

    def __init__(self, model_width: int, model_height: int, stride: int = 32, color_order: str = "RGBA") -> None:
        order = color_order.upper()
        if order not in _TO_BGR and order != "BGR":
            raise ValueError(f"Unsupported color_order {color_order!r}; expected one of RGBA/BGRA/RGB/BGR/GRAY")
        self.model_width = int(model_width)
        self.model_height = int(model_height)
        self.stride = int(stride)
        self.color_order = order

    def _to_bgr(self, image: np.ndarray) -> np.ndarray:
        import cv2  # type: ignore

        channels = 1 if image.ndim == 2 else image.shape[2]
        expected = {"RGBA": 4, "BGRA": 4, "RGB": 3, "BGR": 3, "GRAY": 1}[self.color_order]
        if channels != expected:
            raise PreprocessError(
                f"Expected {expected}-channel {self.color_order} image, got shape {image.shape}"
            )
        if self.color_order == "BGR":
            return image
        return cv2.cvtColor(image, getattr(cv2, _TO_BGR[self.color_order]))

    def __call__(self, image: np.ndarray) -> PreprocessResult:
        try:
            import cv2  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError("OpenCV is required for preprocessing. Install with `pip install opencv-python`.") from e

        if image is None or not hasattr(image, "shape"):
            raise PreprocessError("image must be a NumPy array")
        if image.ndim not in (2, 3) or image.shape[0] == 0 or image.shape[1] == 0:
            raise PreprocessError(f"Cannot preprocess image of shape {getattr(image, 'shape', None)}")
        if image.dtype != np.uint8:
            raise PreprocessError(f"Expected uint8 pixels, got {image.dtype}")

        src_h, src_w = image.shape[:2]
        bgr = self._to_bgr(image)
        padded, scale = letterbox(bgr, stride=self.stride)

        blob = cv2.dnn.blobFromImage(
            padded,
            1 / 255.0,
            (self.model_width, self.model_height),
            (0, 0, 0),
            swapRB=True,
            crop=False,
        )
        LOGGER.debug(
            "preprocessed %dx%d -> square %d -> blob %s (x_ratio=%.4f, y_ratio=%.4f)",
            src_w,
            src_h,
            padded.shape[0],
            blob.shape,
            scale.x_ratio,
            scale.y_ratio,
        )
        return PreprocessResult(
            tensor=blob.astype(np.float32, copy=False),
            scale=scale,
            source_size=(src_w, src_h),
            padded_size=int(padded.shape[0]),
        )
