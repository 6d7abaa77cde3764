"""
The three inference stages a pass calls, in order: detector, selector, mask generator.

Any object with a matching `run` method can serve as a stage. The ONNX adapters
below wrap an `OnnxRuntimeBackend` session and map positional arguments to the
graph's named inputs/outputs.
"""

from __future__ import annotations

from typing import NamedTuple, Protocol, Sequence

import numpy as np


class DetectorOutput(NamedTuple):
    raw_detections: np.ndarray  # (1, 4 + nc + nm, anchors)
    mask_basis: np.ndarray  # (1, nm, mh, mw)


class Detector(Protocol):
    def run(self, image_tensor: np.ndarray) -> DetectorOutput: ...


class Selector(Protocol):
    def run(self, raw_detections: np.ndarray, config: np.ndarray) -> np.ndarray: ...


class MaskGenerator(Protocol):
    def run(self, detection: np.ndarray, mask_basis: np.ndarray, config: np.ndarray, overlay: np.ndarray) -> np.ndarray: ...


class OnnxDetector:
    def __init__(self, backend, input_name: str = "images", output_names: Sequence[str] = ("output0", "output1")) -> None:
        if len(output_names) != 2:
            raise ValueError("output_names must be (detections, mask_basis)")
        self.backend = backend
        self.input_name = input_name
        self.output_names = tuple(output_names)

    def run(self, image_tensor: np.ndarray) -> DetectorOutput:
        out = self.backend.run({self.input_name: image_tensor}, self.output_names)
        return DetectorOutput(out[self.output_names[0]], out[self.output_names[1]])


class OnnxSelector:
    def __init__(
        self,
        backend,
        detection_name: str = "detection",
        config_name: str = "config",
        output_name: str = "selected",
    ) -> None:
        self.backend = backend
        self.detection_name = detection_name
        self.config_name = config_name
        self.output_name = output_name

    def run(self, raw_detections: np.ndarray, config: np.ndarray) -> np.ndarray:
        out = self.backend.run(
            {self.detection_name: raw_detections, self.config_name: config},
            [self.output_name],
        )
        return out[self.output_name]


class OnnxMaskGenerator:
    def __init__(
        self,
        backend,
        detection_name: str = "detection",
        mask_name: str = "mask",
        config_name: str = "config",
        overlay_name: str = "overlay",
        output_name: str = "mask_filter",
    ) -> None:
        self.backend = backend
        self.detection_name = detection_name
        self.mask_name = mask_name
        self.config_name = config_name
        self.overlay_name = overlay_name
        self.output_name = output_name

    def run(self, detection: np.ndarray, mask_basis: np.ndarray, config: np.ndarray, overlay: np.ndarray) -> np.ndarray:
        out = self.backend.run(
            {
                self.detection_name: detection,
                self.mask_name: mask_basis,
                self.config_name: config,
                self.overlay_name: overlay,
            },
            [self.output_name],
        )
        return out[self.output_name]
