"""
YOLOv8 instance-segmentation inference for single still images.

A pass runs three chained stages: detector -> selector (NMS) -> mask generator,
then returns labeled boxes and an RGBA segmentation overlay. Stages are plain
objects with a `run` method; ONNX Runtime adapters and NumPy reference
implementations are provided. Only NumPy and OpenCV are needed outside the
ONNX backend.
"""

from .types import BoundingBox, Detection, PipelineResult, PreprocessResult, ScaleFactors
from .errors import (
    CancellationToken,
    DecodeError,
    InferenceError,
    PipelineCancelled,
    PipelineError,
    PipelineFailure,
    PreprocessError,
)
from .geometry import clip_box, div_stride, to_source_space
from .colors import ColorPalette, hex_to_rgba
from .config import PipelineConfig, load_pipeline_config
from .metadata import load_class_names
from .preprocess import Preprocessor
from .decode import DetectionDecoder
from .compositor import OverlayCompositor
from .stages import DetectorOutput
from .reference import NumpyMaskGenerator, NumpySelector
from .pipeline import SegmentationPipeline
from .runtime import find_project_root, load_pipeline, resolve_path
from .visualize import render_result

__all__ = [
    "BoundingBox",
    "Detection",
    "PipelineResult",
    "PreprocessResult",
    "ScaleFactors",
    "CancellationToken",
    "DecodeError",
    "InferenceError",
    "PipelineCancelled",
    "PipelineError",
    "PipelineFailure",
    "PreprocessError",
    "clip_box",
    "div_stride",
    "to_source_space",
    "ColorPalette",
    "hex_to_rgba",
    "PipelineConfig",
    "load_pipeline_config",
    "load_class_names",
    "Preprocessor",
    "DetectionDecoder",
    "OverlayCompositor",
    "DetectorOutput",
    "NumpyMaskGenerator",
    "NumpySelector",
    "SegmentationPipeline",
    "find_project_root",
    "load_pipeline",
    "resolve_path",
    "render_result",
]
