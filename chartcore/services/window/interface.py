"""
Window Service Interface

Defines the contract for evaluating indicators over a visible range.
"""

from abc import abstractmethod

from chartcore.services.base import BaseService
from chartcore.schemas.market import Series, VisibleRange
from chartcore.schemas.indicators import IndicatorParams
from chartcore.schemas.window import WindowedIndicator, WindowOutput, WindowRequest, YBounds


class WindowServiceInterface(BaseService[WindowRequest, WindowOutput]):
    """
    Window Service Contract.

    INPUT: WindowRequest
        - series: Full bar series
        - visible_range: Bars on screen
        - indicators: Parameter models, one per indicator panel/overlay

    OUTPUT: WindowOutput
        - Candle bounds and price grid
        - Per indicator: full result, clipped result, bounds, tick labels,
          legend values
        - errors: Indicators that could not be computed (when skipping)
    """

    @property
    def name(self) -> str:
        return "WindowService"

    @abstractmethod
    def execute(self, input_data: WindowRequest) -> WindowOutput:
        """Evaluate every requested indicator for the visible range."""
        pass

    @abstractmethod
    def evaluate(
        self, series: Series, visible: VisibleRange, params: IndicatorParams
    ) -> WindowedIndicator:
        """Compute, clip, bound and label one indicator. Errors propagate."""
        pass

    @abstractmethod
    def candle_bounds(self, series: Series, visible: VisibleRange) -> YBounds:
        """Lowest low and highest high of the visible bars."""
        pass
