from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple


@dataclass(frozen=True)
class PipelineConfig:
    """
    Caller-supplied settings for one segmentation pipeline.

    input_shape follows the YOLO export convention [batch, channels, width, height].
    """

    input_shape: Tuple[int, int, int, int]
    class_names: Tuple[str, ...]
    topk: int = 100
    iou_threshold: float = 0.45
    score_threshold: float = 0.25
    stride: int = 32
    mask_alpha: int = 120

    def __post_init__(self) -> None:
        shape = tuple(int(v) for v in self.input_shape)
        if len(shape) != 4:
            raise ValueError(f"input_shape must have 4 dims [batch, channels, width, height], got {self.input_shape}")
        object.__setattr__(self, "input_shape", shape)
        if isinstance(self.class_names, str):
            raise ValueError("class_names must be a sequence of names, not a string")
        object.__setattr__(self, "class_names", tuple(str(n) for n in self.class_names))

        batch, channels, width, height = shape
        if batch != 1:
            raise ValueError("input_shape batch must be 1")
        if channels != 3:
            raise ValueError("input_shape channels must be 3")
        if width <= 0 or height <= 0:
            raise ValueError("input_shape width/height must be > 0")
        if not self.class_names:
            raise ValueError("class_names must not be empty")
        for key in ("topk", "stride", "mask_alpha"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{key} must be an integer")
        if self.topk <= 0:
            raise ValueError("topk must be > 0")
        if not 0 < self.iou_threshold < 1:
            raise ValueError("iou_threshold must be in (0, 1)")
        if not 0 < self.score_threshold < 1:
            raise ValueError("score_threshold must be in (0, 1)")
        if self.stride <= 0:
            raise ValueError("stride must be > 0")
        if not 0 <= self.mask_alpha <= 255:
            raise ValueError("mask_alpha must be in [0, 255]")

    @property
    def model_width(self) -> int:
        return self.input_shape[2]

    @property
    def model_height(self) -> int:
        return self.input_shape[3]

    @property
    def max_size(self) -> int:
        return max(self.model_width, self.model_height)

    @property
    def num_classes(self) -> int:
        return len(self.class_names)


def _require_number(payload: Dict[str, Any], key: str) -> float:
    if key not in payload:
        raise ValueError(f"Missing required key: {key}")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _require_int(payload: Dict[str, Any], key: str) -> int:
    if key not in payload:
        raise ValueError(f"Missing required key: {key}")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return int(value)


def _require_int_list(payload: Dict[str, Any], key: str) -> List[int]:
    if key not in payload:
        raise ValueError(f"Missing required key: {key}")
    value = payload[key]
    if not isinstance(value, list) or any(isinstance(v, bool) or not isinstance(v, int) for v in value):
        raise ValueError(f"{key} must be a list of integers")
    return [int(v) for v in value]


def load_pipeline_config(path: Path, class_names: Sequence[str] = ()) -> PipelineConfig:
    """
    Load a JSON pipeline profile.

    `class_names` may come from the profile itself ("class_names") or be passed
    in, e.g. from `load_class_names()`; an explicit argument wins.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Pipeline config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid pipeline config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Pipeline config must be a JSON object")

    allowed = {
        "schema_version",
        "input_shape",
        "class_names",
        "topk",
        "iou_threshold",
        "score_threshold",
        "stride",
        "mask_alpha",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown pipeline config keys: {unknown}")

    if _require_int(payload, "schema_version") != 1:
        raise ValueError("pipeline config schema_version must be 1")

    names = list(class_names) or payload.get("class_names") or []
    if not isinstance(names, list) or any(not isinstance(n, str) for n in names):
        raise ValueError("class_names must be a list of strings")

    kwargs: Dict[str, Any] = {}
    if "topk" in payload:
        kwargs["topk"] = _require_int(payload, "topk")
    if "iou_threshold" in payload:
        kwargs["iou_threshold"] = _require_number(payload, "iou_threshold")
    if "score_threshold" in payload:
        kwargs["score_threshold"] = _require_number(payload, "score_threshold")
    if "stride" in payload:
        kwargs["stride"] = _require_int(payload, "stride")
    if "mask_alpha" in payload:
        kwargs["mask_alpha"] = _require_int(payload, "mask_alpha")

    return PipelineConfig(
        input_shape=tuple(_require_int_list(payload, "input_shape")),
        class_names=tuple(names),
        **kwargs,
    )
