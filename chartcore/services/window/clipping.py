"""
Visible-range clipping of indicator results.

Maps an indicator's lines, which start at its begin_index, onto the bar
indices currently on screen. Clipping never raises: a range that misses
the result entirely yields empty lines.
"""

from typing import Iterable, Optional, Sequence

import numpy as np

from chartcore.schemas.market import VisibleRange
from chartcore.schemas.indicators import IndicatorOutput
from chartcore.schemas.window import YBounds


def clip(result: IndicatorOutput, visible: VisibleRange) -> tuple[int, tuple[list[float], ...]]:
    """
    Slice every line of `result` to the visible range.

    Returns:
        (local_start, lines) where local_start is the offset of the slice
        inside the result's lines.
    """
    local_start = max(visible.start - result.begin_index, 0)
    local_end = min(visible.end - result.begin_index, result.length)
    lines = tuple(result.lines.values())

    if local_start >= local_end:
        return local_start, tuple([] for _ in lines)
    return local_start, tuple(line[local_start:local_end] for line in lines)


def clip_result(result: IndicatorOutput, visible: VisibleRange) -> IndicatorOutput:
    """Same output shape restricted to the visible range; begin_index is rebased."""
    local_start, lines = clip(result, visible)
    return result.with_lines(result.begin_index + local_start, lines)


def last_visible_values(result: IndicatorOutput, visible: VisibleRange) -> Optional[dict[str, float]]:
    """Value of each line at the last visible bar (or the last value before it)."""
    if result.length == 0:
        return None
    index = min(result.length - 1, visible.end - result.begin_index - 1)
    if index < 0:
        return None
    return {name: values[index] for name, values in result.lines.items()}


def visible_values(values: Sequence[float], visible: VisibleRange) -> np.ndarray:
    """Raw per-bar values (closes, volumes, ...) inside the visible range."""
    return np.asarray(values, dtype=float)[visible.start : visible.end]


def y_bounds(lines: Iterable[Sequence[float]], fallback: Optional[YBounds] = None) -> YBounds:
    """
    Min/max across all given lines.

    Falls back to `fallback` (or 0..0) when every line is empty.
    """
    chunks = [np.asarray(line, dtype=float) for line in lines]
    chunks = [c for c in chunks if c.size]
    if not chunks:
        return fallback or YBounds(min=0.0, max=0.0)

    merged = np.concatenate(chunks)
    return YBounds(min=float(merged.min()), max=float(merged.max()))
