"""
CONTRACT 3: Windowed Evaluation

Input: WindowRequest (Series + VisibleRange + indicator parameters)
Output: WindowOutput

Indicator results clipped to what is on screen, with the y-axis bounds and
tick labels needed to scale each panel.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from chartcore.schemas.market import Series, VisibleRange
from chartcore.schemas.indicators import IndicatorKind, IndicatorOutput, IndicatorParams


class YBounds(BaseModel):
    """Vertical value range of a plot panel."""

    model_config = ConfigDict(frozen=True)

    min: float
    max: float

    @model_validator(mode="after")
    def validate_order(self) -> "YBounds":
        if self.min > self.max:
            raise ValueError(f"min {self.min} is above max {self.max}")
        return self

    @property
    def span(self) -> float:
        return self.max - self.min

    def union(self, other: "YBounds") -> "YBounds":
        return YBounds(min=min(self.min, other.min), max=max(self.max, other.max))

    def clamp(self, low: float, high: float) -> "YBounds":
        """Restrict to [low, high] without inverting the range."""
        lo = max(self.min, low)
        hi = min(self.max, high)
        if lo > hi:
            return YBounds(min=low, max=high)
        return YBounds(min=lo, max=hi)


class WindowedIndicator(BaseModel):
    """One indicator evaluated for the visible range."""

    indicator: IndicatorKind
    params: IndicatorParams
    result: IndicatorOutput = Field(..., description="Full-series result")
    visible: IndicatorOutput = Field(..., description="Result clipped to the visible range")
    local_start: int = Field(..., ge=0, description="Offset of the clip inside `result`")
    bounds: YBounds
    axis_labels: list[float]
    last_values: Optional[dict[str, float]] = Field(
        default=None,
        description="Legend values at the last visible bar",
    )


class WindowRequest(BaseModel):
    """
    Request for a windowed evaluation.
    Sent by: presentation layer (on redraw)
    Received by: Window Service
    """

    series: Series
    visible_range: VisibleRange
    indicators: list[IndicatorParams] = Field(default_factory=list)
    skip_failures: bool = Field(
        default=True,
        description="Log and record failing indicators instead of raising",
    )
    include_candles: bool = True


class WindowOutput(BaseModel):
    """Everything a chart needs to draw the visible range."""

    visible_range: VisibleRange
    candle_bounds: Optional[YBounds] = Field(
        default=None,
        description="Price panel scale: visible lows/highs plus MA and Bollinger overlays",
    )
    candle_labels: list[float] = Field(default_factory=list)
    indicators: list[WindowedIndicator] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
