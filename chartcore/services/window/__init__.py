"""
Window Service

CONTRACT:
    Input:  WindowRequest (Series + VisibleRange + indicator parameters)
    Output: WindowOutput

RESPONSIBILITIES:
    - Clip indicator results to the visible range
    - Y-axis bounds per panel
    - Tick labels (nice steps for indicators, even grid for prices)
    - Legend values at the last visible bar
"""

from chartcore.services.window.axis import axis_labels, linear_labels, nice_step
from chartcore.services.window.clipping import (
    clip,
    clip_result,
    last_visible_values,
    visible_values,
    y_bounds,
)
from chartcore.services.window.interface import WindowServiceInterface
from chartcore.services.window.service import WindowService, get_window_service

__all__ = [
    "axis_labels",
    "linear_labels",
    "nice_step",
    "clip",
    "clip_result",
    "last_visible_values",
    "visible_values",
    "y_bounds",
    "WindowServiceInterface",
    "WindowService",
    "get_window_service",
]
