"""
Window Service Implementation

Computes indicators over the full series, then restricts them to the
visible range and derives the y-axis scale for each panel.
"""

import logging
from typing import Optional

from chartcore.core.config import Settings, get_settings
from chartcore.schemas.market import Series, VisibleRange
from chartcore.schemas.indicators import IndicatorKind, IndicatorOutput, IndicatorParams
from chartcore.schemas.window import WindowedIndicator, WindowOutput, WindowRequest, YBounds
from chartcore.services.base import IndicatorError
from chartcore.services.indicators.service import IndicatorService
from chartcore.services.window.axis import axis_labels, linear_labels
from chartcore.services.window.clipping import (
    clip_result,
    last_visible_values,
    visible_values,
    y_bounds,
)
from chartcore.services.window.interface import WindowServiceInterface

logger = logging.getLogger(__name__)


# Bounds used when nothing of an indicator is visible
FALLBACK_BOUNDS = {
    IndicatorKind.RSI: YBounds(min=0.0, max=100.0),
    IndicatorKind.STOCH: YBounds(min=0.0, max=100.0),
    IndicatorKind.KDJ: YBounds(min=0.0, max=100.0),
    IndicatorKind.STOCHRSI: YBounds(min=0.0, max=100.0),
    IndicatorKind.WILLR: YBounds(min=-100.0, max=0.0),
}

# RSI panels always span the full oscillator range
FIXED_BOUNDS = {
    IndicatorKind.RSI: YBounds(min=0.0, max=100.0),
}

# Computed bounds are clamped into these
CLAMPED_BOUNDS = {
    IndicatorKind.STOCHRSI: (0.0, 100.0),
}

# Overlays drawn on the price panel also scale with visible closes
PRICE_OVERLAYS = {IndicatorKind.MA, IndicatorKind.BBANDS}


def describe(params: IndicatorParams) -> str:
    """Short label such as 'MACD(12,26,9)' for logs and error messages."""
    values = [
        str(v.value if hasattr(v, "value") else v)
        for k, v in params.model_dump().items()
        if k != "indicator"
    ]
    return f"{params.indicator.value}({','.join(values)})"


class WindowService(WindowServiceInterface):
    """
    Window Service.

    Failures of individual indicators are logged and reported in
    WindowOutput.errors unless the request asks for them to propagate.
    """

    def __init__(
        self,
        indicator_service: Optional[IndicatorService] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.indicators = indicator_service or IndicatorService(self.settings)

    @property
    def name(self) -> str:
        return "WindowService"

    def execute(self, input_data: WindowRequest) -> WindowOutput:
        """Evaluate every requested indicator for the visible range."""
        input_data = self.validate_input(input_data)
        series = input_data.series
        visible = input_data.visible_range
        visible.check_within(len(series))

        output = WindowOutput(visible_range=visible)

        for params in input_data.indicators:
            try:
                output.indicators.append(self.evaluate(series, visible, params))
            except (IndicatorError, NotImplementedError) as e:
                if not input_data.skip_failures:
                    raise
                logger.warning(f"Skipping {describe(params)}: {e}")
                output.errors.append(f"{describe(params)}: {e}")

        if input_data.include_candles:
            bounds = self.candle_bounds(series, visible)
            # Overlays share the price panel
            for item in output.indicators:
                if item.indicator in PRICE_OVERLAYS:
                    bounds = bounds.union(item.bounds)
            output.candle_bounds = bounds
            output.candle_labels = linear_labels(
                bounds.min, bounds.max, self.settings.axis_labels_count
            )

        logger.debug(
            f"Evaluated window [{visible.start}, {visible.end}) with "
            f"{len(output.indicators)} indicators, {len(output.errors)} errors"
        )
        return output

    def evaluate(
        self, series: Series, visible: VisibleRange, params: IndicatorParams
    ) -> WindowedIndicator:
        """Compute, clip, bound and label one indicator. Errors propagate."""
        visible.check_within(len(series))
        result = self.indicators.compute(series, params)
        clipped = clip_result(result, visible)

        bounds = self.indicator_bounds(series, visible, clipped)
        # Fixed-range panels still label only the span the lines cover
        label_bounds = bounds
        if params.indicator in FIXED_BOUNDS:
            label_bounds = y_bounds(clipped.lines.values(), bounds)

        return WindowedIndicator(
            indicator=params.indicator,
            params=params,
            result=result,
            visible=clipped,
            local_start=clipped.begin_index - result.begin_index,
            bounds=bounds,
            axis_labels=axis_labels(
                label_bounds.min, label_bounds.max, self.settings.axis_target_steps
            ),
            last_values=last_visible_values(result, visible),
        )

    def indicator_bounds(
        self, series: Series, visible: VisibleRange, clipped: IndicatorOutput
    ) -> YBounds:
        """Y-axis bounds of an indicator panel (or overlay) for the visible bars."""
        kind = clipped.indicator
        if kind in FIXED_BOUNDS:
            return FIXED_BOUNDS[kind]

        lines = list(clipped.lines.values())
        if kind in PRICE_OVERLAYS:
            lines.append(visible_values(series.closes(), visible))
        elif kind == IndicatorKind.VOLUME_MA:
            lines.append(visible_values(series.volumes(), visible))

        bounds = y_bounds(lines, FALLBACK_BOUNDS.get(kind))
        if kind in CLAMPED_BOUNDS:
            bounds = bounds.clamp(*CLAMPED_BOUNDS[kind])
        return bounds

    def candle_bounds(self, series: Series, visible: VisibleRange) -> YBounds:
        """Lowest low and highest high of the visible bars."""
        visible.check_within(len(series))
        lows = visible_values(series.lows(), visible)
        highs = visible_values(series.highs(), visible)
        # Malformed bars (low above high) still give an ordered range
        return YBounds(
            min=float(min(lows.min(), highs.min())),
            max=float(max(highs.max(), lows.max())),
        )


# Singleton instance
_service_instance: Optional[WindowService] = None


def get_window_service() -> WindowService:
    """Get or create window service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = WindowService()
    return _service_instance
