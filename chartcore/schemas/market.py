"""
CONTRACT 1: Market Data

Bar, Series and VisibleRange: the inputs every indicator and window
computation consumes. A Series is built once per dataset and may be
appended to as new bars stream in.
"""

from typing import Iterable, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator

from chartcore.services.base import InvalidParameterError


# =============================================================================
# BAR
# =============================================================================


class Bar(BaseModel):
    """
    Single OHLCV observation (immutable).

    high/low consistency with open/close is expected but not enforced.
    """

    model_config = ConfigDict(frozen=True)

    time: float = Field(..., allow_inf_nan=False, description="Seconds since epoch")
    open: float = Field(..., allow_inf_nan=False)
    high: float = Field(..., allow_inf_nan=False)
    low: float = Field(..., allow_inf_nan=False)
    close: float = Field(..., allow_inf_nan=False)
    volume: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)

    @property
    def is_bullish(self) -> bool:
        return self.close >= self.open


# =============================================================================
# SERIES
# =============================================================================


class Series(BaseModel):
    """
    Chronologically ordered bars.

    Price accessors return fresh float64 arrays so indicator code can never
    mutate the bars.
    """

    symbol: Optional[str] = None
    bars: list[Bar] = Field(default_factory=list)

    _version: int = PrivateAttr(default=0)

    @field_validator("bars")
    @classmethod
    def validate_order(cls, v: list[Bar]) -> list[Bar]:
        for prev, bar in zip(v, v[1:]):
            if bar.time <= prev.time:
                raise ValueError(
                    f"bar times must be strictly increasing ({bar.time} after {prev.time})"
                )
        return v

    def __len__(self) -> int:
        return len(self.bars)

    def __getitem__(self, index):
        return self.bars[index]

    @property
    def version(self) -> int:
        """Increases on every append; usable as a cache key with parameters."""
        return self._version

    @property
    def last(self) -> Optional[Bar]:
        return self.bars[-1] if self.bars else None

    def append(self, bar: Bar) -> None:
        """Append a streamed bar. Its time must be after the last bar's."""
        if self.bars and bar.time <= self.bars[-1].time:
            raise InvalidParameterError(
                f"bar time {bar.time} is not after last bar time {self.bars[-1].time}",
                {"time": bar.time, "last_time": self.bars[-1].time},
            )
        self.bars.append(bar)
        self._version += 1

    def extend(self, bars: Iterable[Bar]) -> None:
        for bar in bars:
            self.append(bar)

    def times(self) -> np.ndarray:
        return np.array([b.time for b in self.bars], dtype=float)

    def opens(self) -> np.ndarray:
        return np.array([b.open for b in self.bars], dtype=float)

    def highs(self) -> np.ndarray:
        return np.array([b.high for b in self.bars], dtype=float)

    def lows(self) -> np.ndarray:
        return np.array([b.low for b in self.bars], dtype=float)

    def closes(self) -> np.ndarray:
        return np.array([b.close for b in self.bars], dtype=float)

    def volumes(self) -> np.ndarray:
        missing = [i for i, b in enumerate(self.bars) if b.volume is None]
        if missing:
            raise InvalidParameterError(
                f"{len(missing)} bars have no volume (first at index {missing[0]})",
                {"missing": len(missing), "first_index": missing[0]},
            )
        return np.array([b.volume for b in self.bars], dtype=float)

    def visible_range(self, start: int, end: int) -> "VisibleRange":
        """Build a VisibleRange checked against this series' length."""
        visible = VisibleRange(start=start, end=end)
        visible.check_within(len(self))
        return visible

    def window(self, visible: "VisibleRange") -> list[Bar]:
        """Bars inside the visible range."""
        visible.check_within(len(self))
        return self.bars[visible.start : visible.end]


# =============================================================================
# VISIBLE RANGE
# =============================================================================


class VisibleRange(BaseModel):
    """
    Half-open index interval [start, end) into a Series.

    A visible window needs at least two bars to be scaled.
    """

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0)
    end: int = Field(..., gt=0)

    @model_validator(mode="after")
    def validate_span(self) -> "VisibleRange":
        if self.end - self.start <= 1:
            raise ValueError(
                f"visible range [{self.start}, {self.end}) must span at least two bars"
            )
        return self

    @property
    def length(self) -> int:
        return self.end - self.start

    def check_within(self, length: int) -> None:
        if self.end > length:
            raise InvalidParameterError(
                f"visible range end {self.end} exceeds series length {length}",
                {"end": self.end, "length": length},
            )

    def contains(self, index: int) -> bool:
        return self.start <= index < self.end

    @classmethod
    def from_scroll(
        cls,
        offset: float,
        candle_width: float,
        candle_spacing: float,
        visible_count: int,
        total: int,
    ) -> "VisibleRange":
        """
        Derive the visible bars from a horizontal scroll offset.

        Args:
            offset: Scroll offset in points from the first bar
            candle_width: Width of a single candle
            candle_spacing: Gap between candles
            visible_count: Number of candles that fit on screen
            total: Number of bars in the series

        Raises:
            InvalidParameterError: Non-positive candle slot or fewer than
                two bars left to show
        """
        slot = candle_width + candle_spacing
        if slot <= 0:
            raise InvalidParameterError(
                f"candle width + spacing must be positive, got {slot}",
                {"candle_width": candle_width, "candle_spacing": candle_spacing},
            )
        start = max(0, int(offset / slot))
        end = min(total, start + visible_count)
        if end - start <= 1:
            raise InvalidParameterError(
                f"scroll offset {offset} leaves fewer than two visible bars",
                {"start": start, "end": end, "total": total},
            )
        return cls(start=start, end=end)
