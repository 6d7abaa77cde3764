from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np


RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned box in pixel units, top-left corner + size.
    """

    x: int
    y: int
    width: int
    height: int

    def as_xywh(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height

    def as_xyxy(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.x + self.width, self.y + self.height


@dataclass(frozen=True)
class ScaleFactors:
    x_ratio: float
    y_ratio: float


@dataclass(frozen=True)
class Detection:
    """
    One decoded row of the selector output, ready for rendering.
    """

    label: str
    probability: float
    color: RGBA
    box: BoundingBox
    class_id: int


@dataclass(frozen=True)
class PreprocessResult:
    tensor: np.ndarray
    scale: ScaleFactors
    source_size: Tuple[int, int]
    padded_size: int


@dataclass(frozen=True)
class PipelineResult:
    """
    Output of one complete pass.

    Boxes and overlay are in model-canvas space: the source image stretched to
    (model_width, model_height). Use `source_boxes()` for original-image pixels.
    """

    detections: Tuple[Detection, ...]
    overlay: np.ndarray
    source_size: Tuple[int, int]

    @property
    def model_size(self) -> Tuple[int, int]:
        h, w = self.overlay.shape[:2]
        return w, h

    def source_boxes(self) -> List[BoundingBox]:
        from .geometry import to_source_space

        return [to_source_space(d.box, self.model_size, self.source_size) for d in self.detections]
