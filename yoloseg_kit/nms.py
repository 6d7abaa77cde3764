from dataclasses import dataclass
from typing import List

import numpy as np


@dataclass
class NMSConfig:
    iou_threshold: float = 0.45
    score_threshold: float = 0.25
    topk: int = 100


def cxcywh_to_xyxy(boxes: np.ndarray) -> np.ndarray:
    cx, cy, w, h = boxes.T
    return np.stack([cx - w / 2, cy - h / 2, cx + w / 2, cy + h / 2], axis=1)


def nms(boxes: np.ndarray, scores: np.ndarray, iou_threshold: float, max_detections: int) -> np.ndarray:
    """
    Greedy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Returns indices of boxes to keep, highest score first.
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.int64)

    x1 = boxes[:, 0]
    y1 = boxes[:, 1]
    x2 = boxes[:, 2]
    y2 = boxes[:, 3]
    areas = (x2 - x1) * (y2 - y1)

    # Stable sort keeps the lower index first among equal scores.
    order = np.argsort(-scores, kind="stable")
    keep = []

    while order.size > 0 and len(keep) < max_detections:
        i = order[0]
        keep.append(i)

        xx1 = np.maximum(x1[i], x1[order[1:]])
        yy1 = np.maximum(y1[i], y1[order[1:]])
        xx2 = np.minimum(x2[i], x2[order[1:]])
        yy2 = np.minimum(y2[i], y2[order[1:]])

        w = np.maximum(0.0, xx2 - xx1)
        h = np.maximum(0.0, yy2 - yy1)
        inter = w * h
        union = areas[i] + areas[order[1:]] - inter
        iou = inter / np.maximum(union, 1e-6)

        inds = np.where(iou <= iou_threshold)[0]
        order = order[inds + 1]

    return np.array(keep, dtype=np.int64)


def per_class_nms(boxes_xyxy: np.ndarray, class_scores: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Run NMS independently for every class column of `class_scores` (N, C).

    Returns candidate row indices grouped by class (class 0 first), each group
    ordered by descending score. A row can be selected by more than one class.
    """

    selected: List[np.ndarray] = []
    for cls in range(class_scores.shape[1]):
        scores = class_scores[:, cls]
        idx = np.where(scores > cfg.score_threshold)[0]
        if idx.size == 0:
            continue
        keep_local = nms(boxes_xyxy[idx], scores[idx], cfg.iou_threshold, cfg.topk)
        selected.append(idx[keep_local])

    if not selected:
        return np.empty((0,), dtype=np.int64)
    return np.concatenate(selected).astype(np.int64)
