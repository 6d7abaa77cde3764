from __future__ import annotations

from typing import Tuple

import numpy as np

from .types import RGBA, PipelineResult


def _bgr(color: RGBA) -> Tuple[int, int, int]:
    r, g, b = color[:3]
    return int(b), int(g), int(r)


def blend_overlay(image_bgr: np.ndarray, overlay_rgba: np.ndarray) -> np.ndarray:
    """
    Alpha-blend an RGBA overlay onto a BGR image of the same height/width.
    """

    if image_bgr.shape[:2] != overlay_rgba.shape[:2]:
        raise ValueError(f"Image {image_bgr.shape[:2]} and overlay {overlay_rgba.shape[:2]} sizes differ")

    alpha = overlay_rgba[:, :, 3:4].astype(np.float32) / 255.0
    color = overlay_rgba[:, :, 2::-1].astype(np.float32)  # RGB -> BGR
    out = image_bgr.astype(np.float32) * (1.0 - alpha) + color * alpha
    return np.clip(out + 0.5, 0, 255).astype(np.uint8)


def render_result(
    image_bgr: np.ndarray,
    result: PipelineResult,
    *,
    show_score: bool = True,
    box_thickness: int = 2,
    font_scale: float = 0.5,
    font_thickness: int = 1,
) -> np.ndarray:
    """
    Draw the segmentation overlay, boxes and labels on a copy of the image.

    The image is stretched to the model canvas first, since that is the space
    the overlay and boxes are expressed in.
    """

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for render_result(). Install with `pip install opencv-python`.") from e

    if image_bgr is None or not hasattr(image_bgr, "shape"):
        raise TypeError("image_bgr must be a NumPy array (BGR).")
    if image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_bgr, 'shape', None)}")

    model_w, model_h = result.model_size
    canvas = cv2.resize(image_bgr, (model_w, model_h), interpolation=cv2.INTER_LINEAR)
    out = blend_overlay(canvas, result.overlay)
    h, w = out.shape[:2]

    for det in result.detections:
        x1, y1, x2, y2 = det.box.as_xyxy()
        x2 = min(x2, w - 1)
        y2 = min(y2, h - 1)

        color = _bgr(det.color)
        cv2.rectangle(out, (x1, y1), (x2, y2), color, thickness=box_thickness)

        label = f"{det.label} {det.probability * 100:.1f}%" if show_score else det.label

        (tw, th), baseline = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, font_scale, font_thickness)
        # Place label above the box if possible, else inside.
        y_text_top = y1 - th - baseline
        if y_text_top < 0:
            y_text_top = y1

        x_text_right = min(x1 + tw, w - 1)
        y_text_bottom = min(y_text_top + th + baseline, h - 1)

        cv2.rectangle(out, (x1, y_text_top), (x_text_right, y_text_bottom), color, thickness=-1)
        cv2.putText(
            out,
            label,
            (x1, min(y_text_top + th, h - 1)),
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            (255, 255, 255),
            thickness=font_thickness,
            lineType=cv2.LINE_AA,
        )

    return out
