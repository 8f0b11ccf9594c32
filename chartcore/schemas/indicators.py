"""
CONTRACT 2: Indicator Engine

Input: IndicatorRequest (Series + indicator parameters)
Output: IndicatorOutput

Indicator results are a tagged variant keyed on `shape`: one, two or
three aligned lines sharing a single begin_index into the source series.
"""

import math
from enum import Enum
from typing import Annotated, ClassVar, Literal, Optional, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from chartcore.schemas.market import Series


# =============================================================================
# ENUMS
# =============================================================================


class MAKind(str, Enum):
    """Moving average variants, ordered like TA-Lib's MA type codes."""

    SMA = "SMA"
    EMA = "EMA"
    WMA = "WMA"
    DEMA = "DEMA"
    TEMA = "TEMA"
    TRIMA = "TRIMA"
    KAMA = "KAMA"
    MAMA = "MAMA"
    T3 = "T3"

    @property
    def code(self) -> int:
        return list(MAKind).index(self)


class IndicatorKind(str, Enum):
    MA = "MA"
    RSI = "RSI"
    MACD = "MACD"
    BBANDS = "BBANDS"
    BB_BANDWIDTH = "BB_BANDWIDTH"
    STOCH = "STOCH"
    KDJ = "KDJ"
    WILLR = "WILLR"
    STOCHRSI = "STOCHRSI"
    VOLUME_MA = "VOLUME_MA"


class DegenerateWindowPolicy(str, Enum):
    """What a zero-range (highest == lowest) window produces."""

    NEUTRAL = "neutral"  # %K = 50, %R = -50
    RAISE = "raise"  # DegenerateWindowError


# =============================================================================
# INPUT: Indicator parameters
# =============================================================================
# Periods are plain ints here; the calculation layer rejects non-positive
# values with InvalidParameterError.


class MAParams(BaseModel):
    indicator: Literal[IndicatorKind.MA] = IndicatorKind.MA
    period: int = 20
    kind: MAKind = MAKind.SMA


class RSIParams(BaseModel):
    indicator: Literal[IndicatorKind.RSI] = IndicatorKind.RSI
    period: int = 14


class MACDParams(BaseModel):
    indicator: Literal[IndicatorKind.MACD] = IndicatorKind.MACD
    fast_period: int = 12
    slow_period: int = 26
    signal_period: int = 9


class BollingerParams(BaseModel):
    indicator: Literal[IndicatorKind.BBANDS] = IndicatorKind.BBANDS
    period: int = 20
    dev_up: float = 2.0
    dev_down: float = 2.0
    ma_kind: MAKind = MAKind.SMA


class BandwidthParams(BollingerParams):
    indicator: Literal[IndicatorKind.BB_BANDWIDTH] = IndicatorKind.BB_BANDWIDTH


class StochasticParams(BaseModel):
    indicator: Literal[IndicatorKind.STOCH] = IndicatorKind.STOCH
    fast_k_period: int = 5
    slow_k_period: int = 3
    slow_d_period: int = 3
    slow_k_ma: MAKind = MAKind.SMA
    slow_d_ma: MAKind = MAKind.SMA


class KDJParams(BaseModel):
    indicator: Literal[IndicatorKind.KDJ] = IndicatorKind.KDJ
    fast_k_period: int = 9
    slow_k_period: int = 3
    slow_d_period: int = 3


class WilliamsRParams(BaseModel):
    indicator: Literal[IndicatorKind.WILLR] = IndicatorKind.WILLR
    period: int = 14


class StochRSIParams(BaseModel):
    indicator: Literal[IndicatorKind.STOCHRSI] = IndicatorKind.STOCHRSI
    period: int = 14
    fast_k_period: int = 3
    fast_d_period: int = 3
    fast_d_ma: MAKind = MAKind.SMA


class VolumeMAParams(BaseModel):
    indicator: Literal[IndicatorKind.VOLUME_MA] = IndicatorKind.VOLUME_MA
    short_period: int = 5
    long_period: int = 10


IndicatorParams = Annotated[
    Union[
        MAParams,
        RSIParams,
        MACDParams,
        BollingerParams,
        BandwidthParams,
        StochasticParams,
        KDJParams,
        WilliamsRParams,
        StochRSIParams,
        VolumeMAParams,
    ],
    Field(discriminator="indicator"),
]


class IndicatorRequest(BaseModel):
    """
    Request for a single indicator computation.
    Sent by: Window Service / presentation layer
    Received by: Indicator Service

    When params is omitted, the configured defaults for `indicator` apply.
    """

    series: Series
    indicator: IndicatorKind
    params: Optional[IndicatorParams] = None

    @model_validator(mode="after")
    def validate_params_kind(self) -> "IndicatorRequest":
        if self.params is not None and self.params.indicator != self.indicator:
            raise ValueError(
                f"params are for {self.params.indicator.value}, not {self.indicator.value}"
            )
        return self


# =============================================================================
# OUTPUT: IndicatorOutput variants
# =============================================================================


class _SeriesOutput(BaseModel):
    """Shared behaviour of every output shape."""

    model_config = ConfigDict(frozen=True)

    line_fields: ClassVar[tuple[str, ...]] = ()

    indicator: IndicatorKind
    begin_index: int = Field(..., ge=0, description="Series index of the first value")
    line_names: tuple[str, ...]

    @model_validator(mode="after")
    def validate_lines(self):
        values = self._line_values()
        if len(self.line_names) != len(values):
            raise ValueError(
                f"{len(values)} lines but {len(self.line_names)} names: {self.line_names}"
            )
        lengths = {len(v) for v in values}
        if len(lengths) > 1:
            raise ValueError(f"lines must share one length, got {sorted(lengths)}")
        for name, line in zip(self.line_names, values):
            if not all(math.isfinite(x) for x in line):
                raise ValueError(f"line '{name}' contains non-finite values")
        return self

    def _line_values(self) -> tuple[list[float], ...]:
        return tuple(getattr(self, f) for f in self.line_fields)

    @property
    def lines(self) -> dict[str, list[float]]:
        """Ordered mapping of line name to values."""
        return dict(zip(self.line_names, self._line_values()))

    @property
    def length(self) -> int:
        return len(getattr(self, self.line_fields[0]))

    @property
    def end_index(self) -> int:
        """Series index one past the last value."""
        return self.begin_index + self.length

    def line(self, name: str) -> list[float]:
        try:
            return self.lines[name]
        except KeyError as err:
            raise KeyError(
                f"no line named {name!r}, available: {self.line_names}"
            ) from err

    def as_arrays(self) -> tuple[np.ndarray, ...]:
        return tuple(np.asarray(v, dtype=float) for v in self._line_values())

    def with_lines(self, begin_index: int, lines: tuple[list[float], ...]):
        """Copy of this output holding `lines` starting at `begin_index`."""
        update = dict(zip(self.line_fields, (list(v) for v in lines)))
        update["begin_index"] = begin_index
        return self.model_copy(update=update)


class SingleSeriesOutput(_SeriesOutput):
    """One line: MA, RSI, Williams %R, bandwidth."""

    line_fields: ClassVar[tuple[str, ...]] = ("values",)

    shape: Literal["single"] = "single"
    line_names: tuple[str, ...] = ("value",)
    values: list[float]


class DualSeriesOutput(_SeriesOutput):
    """Two lines: StochRSI, volume moving averages."""

    line_fields: ClassVar[tuple[str, ...]] = ("first", "second")

    shape: Literal["dual"] = "dual"
    line_names: tuple[str, ...] = ("first", "second")
    first: list[float]
    second: list[float]


class TripleSeriesOutput(_SeriesOutput):
    """Three lines: MACD, Bollinger Bands, Stochastic, KDJ."""

    line_fields: ClassVar[tuple[str, ...]] = ("first", "second", "third")

    shape: Literal["triple"] = "triple"
    line_names: tuple[str, ...] = ("first", "second", "third")
    first: list[float]
    second: list[float]
    third: list[float]


IndicatorOutput = Annotated[
    Union[SingleSeriesOutput, DualSeriesOutput, TripleSeriesOutput],
    Field(discriminator="shape"),
]
