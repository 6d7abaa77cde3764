"""
Error taxonomy for a detection pass.

Every error raised while a pass runs is fatal to that pass. The coordinator
wraps the original error in `PipelineFailure`, which records the stage name.
"""

from __future__ import annotations

import threading
from typing import Optional


class PipelineError(Exception):
    """Base class for all pass-level errors."""


class PreprocessError(PipelineError):
    """Unreadable, empty or zero-sized input image."""


class InferenceError(PipelineError):
    """An inference stage rejected its input or returned a malformed tensor."""


class DecodeError(PipelineError):
    """A selected-detection row does not match the configured class count."""


class PipelineCancelled(PipelineError):
    """The caller's cancellation token was set between two stages."""


class PipelineFailure(PipelineError):
    def __init__(self, stage: str, error: Exception) -> None:
        super().__init__(f"{stage}: {type(error).__name__}: {error}")
        self.stage = stage
        self.error = error

    @property
    def kind(self) -> str:
        return type(self.error).__name__


class CancellationToken:
    """
    Cooperative cancellation flag, checked by the coordinator between stages.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise PipelineCancelled(self.reason or "cancelled")
