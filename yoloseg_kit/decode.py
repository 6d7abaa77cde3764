from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

import numpy as np

from .colors import ColorPalette
from .errors import DecodeError
from .geometry import clip_box, upscale_box
from .types import Detection, ScaleFactors


@dataclass(frozen=True)
class DecodedRow:
    """
    A decoded selector row plus what the mask stage needs from it.

    model_box is the clipped [x, y, w, h] box in model-output space; the
    detection's box is the same box after upscaling and a second clip.
    """

    detection: Detection
    model_box: Tuple[float, float, float, float]
    mask_coeffs: np.ndarray

    def mask_input(self) -> np.ndarray:
        return np.concatenate([np.asarray(self.model_box, dtype=np.float32), self.mask_coeffs]).astype(np.float32)


class DetectionDecoder:
    """
    Selector rows are laid out as [cx, cy, w, h, class_scores..., mask_coeffs...].
    """

    def __init__(self, class_names: Sequence[str], palette: ColorPalette, max_size: int) -> None:
        self.class_names = tuple(class_names)
        self.palette = palette
        self.max_size = int(max_size)

    @property
    def num_classes(self) -> int:
        return len(self.class_names)

    def decode_row(self, row: np.ndarray, scale: ScaleFactors) -> DecodedRow:
        row = np.asarray(row, dtype=np.float32).reshape(-1)
        nc = self.num_classes
        if row.shape[0] < 4 + nc:
            raise DecodeError(f"Row has {row.shape[0]} values, expected at least {4 + nc} (4 box + {nc} classes)")
        if not np.isfinite(row[: 4 + nc]).all():
            raise DecodeError("Row box or class scores contain NaN or inf")

        cx, cy, w, h = (float(v) for v in row[0:4])
        scores = row[4 : 4 + nc]
        class_id = int(np.argmax(scores))
        probability = float(scores[class_id])

        model_box = clip_box((cx - 0.5 * w, cy - 0.5 * h, w, h), self.max_size)
        box = upscale_box(model_box, scale.x_ratio, scale.y_ratio, self.max_size)

        detection = Detection(
            label=self.class_names[class_id],
            probability=probability,
            color=self.palette.rgba(class_id),
            box=box,
            class_id=class_id,
        )
        return DecodedRow(detection=detection, model_box=model_box, mask_coeffs=row[4 + nc :].copy())

    def iter_rows(self, selected: np.ndarray, scale: ScaleFactors) -> Iterator[DecodedRow]:
        """Yield decoded rows of a (1, N, row_width) tensor in ascending row order."""

        rows = np.asarray(selected)
        if rows.ndim == 3:
            rows = rows[0]
        for idx in range(rows.shape[0]):
            yield self.decode_row(rows[idx], scale)
