from __future__ import annotations

import math
from typing import Sequence, Tuple

from .types import BoundingBox


def div_stride(stride: int, width: int, height: int) -> Tuple[int, int]:
    """
    Round width/height to the nearest multiple of `stride`.

    A remainder of at least half a stride rounds up, anything smaller rounds
    down. Sides never collapse below one stride.
    """

    if stride <= 0:
        raise ValueError("stride must be > 0")

    def _round(v: int) -> int:
        rem = v % stride
        if rem == 0:
            out = v
        elif rem >= stride / 2:
            out = (v // stride + 1) * stride
        else:
            out = (v // stride) * stride
        return max(out, stride)

    return _round(int(width)), _round(int(height))


def clip_box(box: Sequence[float], max_size: float) -> Tuple[float, float, float, float]:
    """
    Keep an [x, y, w, h] box inside the [0, max_size] square.

    The origin is clamped to the frame first, then width/height are shrunk so
    the far edge does not overflow. Size is not reduced when the origin moves.
    """

    x, y, w, h = box
    x = min(max(x, 0), max_size)
    y = min(max(y, 0), max_size)
    w = max(min(w, max_size - x), 0)
    h = max(min(h, max_size - y), 0)
    return x, y, w, h


def upscale_box(box: Sequence[float], x_ratio: float, y_ratio: float, max_size: int) -> BoundingBox:
    x, y, w, h = box
    scaled = clip_box(
        (
            math.floor(x * x_ratio),
            math.floor(y * y_ratio),
            math.floor(w * x_ratio),
            math.floor(h * y_ratio),
        ),
        max_size,
    )
    return BoundingBox(*(int(v) for v in scaled))


def to_source_space(box: BoundingBox, model_size: Tuple[int, int], source_size: Tuple[int, int]) -> BoundingBox:
    """
    Map a model-canvas box (model_width x model_height) onto the source image.
    """

    model_w, model_h = model_size
    src_w, src_h = source_size
    sx = src_w / model_w
    sy = src_h / model_h
    x = math.floor(box.x * sx)
    y = math.floor(box.y * sy)
    w = min(math.floor(box.width * sx), src_w - x)
    h = min(math.floor(box.height * sy), src_h - y)
    return BoundingBox(x, y, max(w, 0), max(h, 0))
