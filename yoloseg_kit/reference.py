"""
NumPy/OpenCV implementations of the selector and mask-generator stages.

They follow the same tensor contracts as the exported `nms` and `mask` ONNX
graphs, so a pass can run with only the detector model on disk.
"""

from __future__ import annotations

import math

import numpy as np

from .nms import NMSConfig, cxcywh_to_xyxy, per_class_nms


class NumpySelector:
    """
    raw (1, 4 + nc + nm, A) + config [nc, topk, iou, score] -> selected (1, N, 4 + nc + nm).
    """

    def run(self, raw_detections: np.ndarray, config: np.ndarray) -> np.ndarray:
        raw = np.asarray(raw_detections, dtype=np.float32)
        if raw.ndim != 3 or raw.shape[0] != 1:
            raise ValueError(f"Expected detections of shape (1, C, A), got {raw.shape}")

        nc, topk, iou, score = (float(v) for v in np.asarray(config).reshape(-1)[:4])
        nc, topk = int(nc), int(topk)
        rows = raw[0].T  # (A, C)
        if rows.shape[1] < 4 + nc:
            raise ValueError(f"Detections have {rows.shape[1]} channels, need at least {4 + nc}")

        keep = per_class_nms(
            cxcywh_to_xyxy(rows[:, :4]),
            rows[:, 4 : 4 + nc],
            NMSConfig(iou_threshold=iou, score_threshold=score, topk=topk),
        )
        return rows[keep][None, ...]


class NumpyMaskGenerator:
    """
    Paint one instance mask into a copy of the overlay.

    detection: [x, y, w, h, coeffs...] with the box in model-output space
    config:    [max_size, x, y, w, h, r, g, b, a] with the box in canvas space

    The mask basis is resized to the overlay's (model_height, model_width)
    frame before cropping.
    """

    def __init__(self, threshold: float = 0.5) -> None:
        self.threshold = threshold

    def run(self, detection: np.ndarray, mask_basis: np.ndarray, config: np.ndarray, overlay: np.ndarray) -> np.ndarray:
        try:
            import cv2  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError("OpenCV is required for NumpyMaskGenerator. Install with `pip install opencv-python`.") from e

        det = np.asarray(detection, dtype=np.float32).reshape(-1)
        basis = np.asarray(mask_basis, dtype=np.float32)
        if basis.ndim == 4:
            basis = basis[0]
        nm, mh, mw = basis.shape
        coeffs = det[4:]
        if coeffs.shape[0] != nm:
            raise ValueError(f"Got {coeffs.shape[0]} mask coefficients for a {nm}-channel mask basis")

        cfg = np.asarray(config, dtype=np.float32).reshape(-1)
        if cfg.shape[0] != 9:
            raise ValueError(f"Mask config must have 9 values, got {cfg.shape[0]}")
        ux, uy, uw, uh = (int(v) for v in cfg[1:5])
        rgba = cfg[5:9].astype(np.uint8)

        out = np.array(overlay, dtype=np.uint8, copy=True)

        proto = coeffs @ basis.reshape(nm, -1)
        proto = 1.0 / (1.0 + np.exp(-proto))
        full = cv2.resize(proto.reshape(mh, mw), (out.shape[1], out.shape[0]), interpolation=cv2.INTER_LINEAR)

        bx, by, bw, bh = (int(math.floor(v)) for v in det[:4])
        crop = full[by : by + bh, bx : bx + bw]
        if crop.size == 0 or uw <= 0 or uh <= 0:
            return out

        mask = cv2.resize(crop, (uw, uh), interpolation=cv2.INTER_LINEAR) > self.threshold

        h_lim = max(0, min(uh, out.shape[0] - uy))
        w_lim = max(0, min(uw, out.shape[1] - ux))
        region = out[uy : uy + h_lim, ux : ux + w_lim]
        region[mask[:h_lim, :w_lim]] = rgba
        return out
