from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from .colors import ColorPalette, default_palette
from .compositor import OverlayCompositor
from .config import PipelineConfig
from .decode import DetectionDecoder
from .errors import CancellationToken, InferenceError, PipelineError, PipelineFailure
from .preprocess import Preprocessor
from .stages import Detector, DetectorOutput, MaskGenerator, Selector
from .types import Detection, PipelineResult, PreprocessResult

LOGGER = logging.getLogger(__name__)


class PassState(str, Enum):
    PREPROCESSED = "preprocessed"
    DETECTED = "detected"
    SELECTED = "selected"
    MASKING = "masking"
    COMPOSITED = "composited"


class _PassBuffers:
    """
    Holds the intermediate tensors of one pass and drops them on exit,
    whether the pass completed or failed.
    """

    def __init__(self) -> None:
        self._buffers: Dict[str, Any] = {}

    def __enter__(self) -> "_PassBuffers":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._buffers.clear()

    def __setitem__(self, name: str, value: Any) -> None:
        self._buffers[name] = value

    def __getitem__(self, name: str) -> Any:
        return self._buffers[name]

    def pop(self, name: str) -> Any:
        return self._buffers.pop(name)


class SegmentationPipeline:
    """
    Preprocess -> detector -> selector (NMS) -> per-detection mask generator.

    Calls are strictly sequential; each consumes the previous call's output.
    A pass either returns a complete `PipelineResult` or raises
    `PipelineFailure` naming the stage that failed.
    """

    def __init__(
        self,
        detector: Detector,
        selector: Selector,
        mask_generator: MaskGenerator,
        cfg: PipelineConfig,
        *,
        palette: Optional[ColorPalette] = None,
        color_order: str = "RGBA",
    ) -> None:
        self.cfg = cfg
        self.detector = detector
        self.selector = selector
        self.palette = palette if palette is not None else default_palette()
        self.preprocessor = Preprocessor(cfg.model_width, cfg.model_height, stride=cfg.stride, color_order=color_order)
        self.decoder = DetectionDecoder(cfg.class_names, self.palette, cfg.max_size)
        self.compositor = OverlayCompositor(mask_generator, self.palette, cfg.max_size, cfg.mask_alpha)

    def selector_config(self) -> np.ndarray:
        cfg = self.cfg
        return np.array([cfg.num_classes, cfg.topk, cfg.iou_threshold, cfg.score_threshold], dtype=np.float32)

    def preprocess(self, image: np.ndarray) -> PreprocessResult:
        try:
            prep = self.preprocessor(image)
        except PipelineError as exc:
            raise PipelineFailure("preprocess", exc) from exc
        self._enter(PassState.PREPROCESSED)
        return prep

    def __call__(self, image: np.ndarray, *, cancel: Optional[CancellationToken] = None) -> PipelineResult:
        return self.run(self.preprocess(image), cancel=cancel)

    def run(self, prep: PreprocessResult, *, cancel: Optional[CancellationToken] = None) -> PipelineResult:
        stage = "detect"
        try:
            with _PassBuffers() as buffers:
                self._check_cancel(cancel)
                det = self._invoke(self.detector.run, prep.tensor)
                buffers["raw"], buffers["basis"] = self._check_detector(det)
                self._enter(PassState.DETECTED)

                stage = "select"
                self._check_cancel(cancel)
                selected = self._invoke(self.selector.run, buffers.pop("raw"), self.selector_config())
                buffers["selected"] = self._check_selected(selected)
                self._enter(PassState.SELECTED)
                LOGGER.debug("selector kept %d rows", buffers["selected"].shape[1])

                self._enter(PassState.MASKING)
                buffers["overlay"] = self.compositor.new_overlay(self.cfg.model_height, self.cfg.model_width)
                detections: List[Detection] = []
                rows = self.decoder.iter_rows(buffers["selected"], prep.scale)
                while True:
                    stage = "decode"
                    decoded = next(rows, None)
                    if decoded is None:
                        break

                    stage = "mask"
                    self._check_cancel(cancel)
                    buffers["overlay"] = self.compositor.paint(decoded, buffers["basis"], buffers.pop("overlay"))
                    detections.append(decoded.detection)

                self._enter(PassState.COMPOSITED)
                result = PipelineResult(
                    detections=tuple(detections),
                    overlay=buffers.pop("overlay"),
                    source_size=prep.source_size,
                )
        except PipelineError as exc:
            LOGGER.debug("pass failed at stage %s: %s", stage, exc)
            raise PipelineFailure(stage, exc) from exc

        LOGGER.debug("pass complete: %d detections", len(result.detections))
        return result

    # ------------------------------------------------------------------ #
    # Helper internal
    # ------------------------------------------------------------------ #
    @staticmethod
    def _enter(state: PassState) -> None:
        LOGGER.debug("pass state -> %s", state.value)

    @staticmethod
    def _check_cancel(cancel: Optional[CancellationToken]) -> None:
        if cancel is not None:
            cancel.raise_if_cancelled()

    @staticmethod
    def _invoke(fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except PipelineError:
            raise
        except Exception as exc:
            raise InferenceError(f"{type(exc).__name__}: {exc}") from exc

    def _check_detector(self, det: DetectorOutput):
        try:
            raw, basis = det
        except (TypeError, ValueError) as exc:
            raise InferenceError("detector must return (raw_detections, mask_basis)") from exc

        raw = np.asarray(raw)
        basis = np.asarray(basis)
        nc = self.cfg.num_classes
        if raw.ndim != 3 or raw.shape[0] != 1 or raw.shape[1] < 4 + nc:
            raise InferenceError(f"detector output has shape {raw.shape}, expected (1, >={4 + nc}, anchors)")
        if basis.ndim != 4 or basis.shape[0] != 1:
            raise InferenceError(f"mask basis has shape {basis.shape}, expected (1, nm, mh, mw)")
        if raw.shape[1] - 4 - nc != basis.shape[1]:
            raise InferenceError(
                f"detector emits {raw.shape[1] - 4 - nc} mask coefficients but mask basis has {basis.shape[1]} channels"
            )
        return raw, basis

    def _check_selected(self, selected: Any) -> np.ndarray:
        selected = np.asarray(selected)
        if selected.ndim != 3 or selected.shape[0] != 1:
            raise InferenceError(f"selector output has shape {selected.shape}, expected (1, N, row_width)")
        limit = self.cfg.topk * self.cfg.num_classes
        if selected.shape[1] > limit:
            raise InferenceError(f"selector returned {selected.shape[1]} rows, more than topk * num_classes = {limit}")
        return selected
