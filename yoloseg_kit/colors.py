from __future__ import annotations

import threading
from typing import Dict, Optional, Sequence, Tuple, Union

from .types import RGBA


_DEFAULT_HEX = (
    "FF3838",
    "FF9D97",
    "FF701F",
    "FFB21D",
    "CFD231",
    "48F90A",
    "92CC17",
    "3DDB86",
    "1A9334",
    "00D4BB",
    "2C99A8",
    "00C2FF",
    "344593",
    "6473FF",
    "0018EC",
    "8438FF",
    "520085",
    "CB38FF",
    "FF95C8",
    "FF37C7",
)


class ColorPalette:
    """
    Deterministic class-index -> "#RRGGBB" mapping.

    Colors come from a fixed ordered palette cycled by index; each lookup is
    memoized. Safe to share between threads running separate passes.
    """

    def __init__(self, palette: Optional[Sequence[str]] = None) -> None:
        hexes = tuple(palette) if palette is not None else _DEFAULT_HEX
        if not hexes:
            raise ValueError("palette must not be empty")
        self._palette = tuple(f"#{h.lstrip('#').upper()}" for h in hexes)
        self._cache: Dict[int, str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._palette)

    def get(self, index: int) -> str:
        index = int(index)
        if index < 0:
            raise ValueError(f"class index must be >= 0, got {index}")
        cached = self._cache.get(index)
        if cached is not None:
            return cached
        with self._lock:
            return self._cache.setdefault(index, self._palette[index % len(self._palette)])

    def rgba(self, index: int, alpha: int = 255) -> RGBA:
        return hex_to_rgba(self.get(index), alpha)

    def reset(self) -> None:
        with self._lock:
            self._cache.clear()


def hex_to_rgba(color: Union[str, Tuple[int, int, int]], alpha: int) -> RGBA:
    """
    Expand "#RRGGBB" (or an RGB triple) plus an 8-bit alpha into (r, g, b, a).
    """

    if not 0 <= int(alpha) <= 255:
        raise ValueError(f"alpha must be in [0, 255], got {alpha}")

    if isinstance(color, str):
        h = color.lstrip("#")
        if len(h) != 6:
            raise ValueError(f"Expected a #RRGGBB color, got {color!r}")
        r, g, b = (int(h[i : i + 2], 16) for i in (0, 2, 4))
    else:
        r, g, b = (int(c) for c in color)
    return r, g, b, int(alpha)


_default_palette = ColorPalette()


def default_palette() -> ColorPalette:
    return _default_palette
