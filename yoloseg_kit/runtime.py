from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np

from .colors import ColorPalette
from .config import PipelineConfig
from .pipeline import SegmentationPipeline
from .reference import NumpyMaskGenerator, NumpySelector


PathLike = Union[str, Path]

LOGGER = logging.getLogger(__name__)


def find_project_root(
    start: Optional[PathLike] = None,
    markers: Sequence[str] = ("pyproject.toml", "setup.py", ".git", "requirements.txt"),
) -> Path:
    """
    Best-effort project root discovery.

    Useful when `yoloseg_kit` is vendored as `A/yoloseg_kit` and models live in `A/models`.
    """

    p = Path(start) if start is not None else Path.cwd()
    p = p.resolve()

    # If a file is provided, start from its directory.
    if p.is_file():
        p = p.parent

    for parent in (p, *p.parents):
        for m in markers:
            if (parent / m).exists():
                return parent
    return p


def resolve_path(path: PathLike, root: Optional[PathLike] = "auto") -> Path:
    """
    Resolve `path` to an absolute Path.

    - Absolute paths are returned as-is.
    - Relative paths are resolved against:
      - `root` if provided
      - project root (auto) otherwise
    """

    p = Path(path)
    if p.is_absolute():
        return p

    if root == "auto" or root is None:
        base = find_project_root()
    else:
        base = Path(root).resolve()

    return (base / p).resolve()


def warmup(pipeline: SegmentationPipeline) -> None:
    """Run one zero tensor through the detector so the first real pass is not slowed by lazy init."""

    cfg = pipeline.cfg
    tensor = np.zeros((1, 3, cfg.model_height, cfg.model_width), dtype=np.float32)
    pipeline.detector.run(tensor)


def load_pipeline(
    detector_path: PathLike,
    cfg: PipelineConfig,
    *,
    selector_path: Optional[PathLike] = None,
    mask_path: Optional[PathLike] = None,
    root: Optional[PathLike] = "auto",
    providers: Optional[Sequence[str]] = None,
    palette: Optional[ColorPalette] = None,
    color_order: str = "RGBA",
    run_warmup: bool = True,
) -> SegmentationPipeline:
    """
    Create a segmentation pipeline from ONNX models on disk.

    Typical usage:
        pipe = load_pipeline("models/yolov8n-seg.onnx", cfg,
                             selector_path="models/nms-yolov8.onnx",
                             mask_path="models/mask-yolov8-seg.onnx")

    Args:
        detector_path: YOLOv8-seg export with outputs (output0, output1)
        selector_path: NMS graph; None uses `NumpySelector`
        mask_path: mask graph; None uses `NumpyMaskGenerator`
        root: base directory for resolving relative model paths ("auto" uses best-effort project root)
    """

    from .backends.onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig
    from .stages import OnnxDetector, OnnxMaskGenerator, OnnxSelector

    backend_cfg = OnnxRuntimeBackendConfig(providers=providers)

    detector = OnnxDetector(OnnxRuntimeBackend(resolve_path(detector_path, root=root), backend_cfg))

    if selector_path is not None:
        selector = OnnxSelector(OnnxRuntimeBackend(resolve_path(selector_path, root=root), backend_cfg))
    else:
        LOGGER.info("No selector model given, using NumpySelector")
        selector = NumpySelector()

    if mask_path is not None:
        mask_generator = OnnxMaskGenerator(OnnxRuntimeBackend(resolve_path(mask_path, root=root), backend_cfg))
    else:
        LOGGER.info("No mask model given, using NumpyMaskGenerator")
        mask_generator = NumpyMaskGenerator()

    pipeline = SegmentationPipeline(
        detector,
        selector,
        mask_generator,
        cfg,
        palette=palette,
        color_order=color_order,
    )
    if run_warmup:
        LOGGER.info("Warming up detector")
        warmup(pipeline)
    return pipeline
