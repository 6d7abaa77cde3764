from __future__ import annotations

import numpy as np

from .colors import ColorPalette, hex_to_rgba
from .decode import DecodedRow
from .errors import InferenceError
from .stages import MaskGenerator


class OverlayCompositor:
    """
    Accumulates instance masks into one RGBA overlay.

    Each `paint` call hands the live overlay to the mask generator and returns
    its successor; callers must drop the previous overlay. Later detections
    paint over earlier ones.
    """

    def __init__(self, mask_generator: MaskGenerator, palette: ColorPalette, max_size: int, mask_alpha: int = 120) -> None:
        self.mask_generator = mask_generator
        self.palette = palette
        self.max_size = int(max_size)
        self.mask_alpha = int(mask_alpha)

    @staticmethod
    def new_overlay(model_height: int, model_width: int) -> np.ndarray:
        return np.zeros((model_height, model_width, 4), dtype=np.uint8)

    def mask_config(self, decoded: DecodedRow) -> np.ndarray:
        x, y, w, h = decoded.detection.box.as_xywh()
        rgba = hex_to_rgba(self.palette.get(decoded.detection.class_id), self.mask_alpha)
        return np.array([self.max_size, x, y, w, h, *rgba], dtype=np.float32)

    def paint(self, decoded: DecodedRow, mask_basis: np.ndarray, overlay: np.ndarray) -> np.ndarray:
        try:
            out = self.mask_generator.run(decoded.mask_input(), mask_basis, self.mask_config(decoded), overlay)
        except InferenceError:
            raise
        except Exception as exc:
            raise InferenceError(f"mask generator failed: {exc}") from exc

        out = np.asarray(out)
        if out.shape != overlay.shape:
            raise InferenceError(f"mask generator returned overlay of shape {out.shape}, expected {overlay.shape}")
        return out.astype(np.uint8, copy=False)
