"""
Indicator Engine Service Implementation

Wraps the NumPy calculations into typed IndicatorOutput values and maps
Series bars to the price arrays each indicator needs.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from chartcore.core.config import Settings, get_settings
from chartcore.schemas.market import Series
from chartcore.schemas.indicators import (
    BandwidthParams,
    BollingerParams,
    DegenerateWindowPolicy,
    DualSeriesOutput,
    IndicatorKind,
    IndicatorOutput,
    IndicatorParams,
    IndicatorRequest,
    KDJParams,
    MACDParams,
    MAKind,
    MAParams,
    RSIParams,
    SingleSeriesOutput,
    StochasticParams,
    StochRSIParams,
    TripleSeriesOutput,
    VolumeMAParams,
    WilliamsRParams,
)
from chartcore.services.indicators import calculations as calc
from chartcore.services.indicators.interface import IndicatorServiceInterface

logger = logging.getLogger(__name__)

Values = Sequence[float]


def _line(values: np.ndarray) -> list[float]:
    return values.tolist()


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Each public method takes plain numeric arrays; `compute` and `execute`
    take a Series. Omitted parameters fall back to Settings.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def name(self) -> str:
        return "IndicatorService"

    @property
    def policy(self) -> DegenerateWindowPolicy:
        return DegenerateWindowPolicy(self.settings.degenerate_window_policy)

    def execute(self, input_data: IndicatorRequest) -> IndicatorOutput:
        """Calculate the requested indicator over the full series."""
        input_data = self.validate_input(input_data)
        params = input_data.params or self.default_params(input_data.indicator)
        return self.compute(input_data.series, params)

    def compute(self, series: Series, params: IndicatorParams) -> IndicatorOutput:
        """Calculate one indicator for a series."""
        kind = params.indicator
        logger.debug(f"Computing {kind.value} over {len(series)} bars")

        if isinstance(params, MAParams):
            return self.moving_average(series.closes(), params.period, params.kind)
        if isinstance(params, RSIParams):
            return self.rsi(series.closes(), params.period)
        if isinstance(params, MACDParams):
            return self.macd(
                series.closes(), params.fast_period, params.slow_period, params.signal_period
            )
        if isinstance(params, BandwidthParams):
            bands = self.bollinger_bands(
                series.closes(), params.period, params.dev_up, params.dev_down, params.ma_kind
            )
            return self.bollinger_bandwidth(bands)
        if isinstance(params, BollingerParams):
            return self.bollinger_bands(
                series.closes(), params.period, params.dev_up, params.dev_down, params.ma_kind
            )
        if isinstance(params, StochasticParams):
            return self.stochastic(
                series.highs(),
                series.lows(),
                series.closes(),
                params.fast_k_period,
                params.slow_k_period,
                params.slow_d_period,
                params.slow_k_ma,
                params.slow_d_ma,
            )
        if isinstance(params, KDJParams):
            return self.kdj(
                series.highs(),
                series.lows(),
                series.closes(),
                params.fast_k_period,
                params.slow_k_period,
                params.slow_d_period,
            )
        if isinstance(params, WilliamsRParams):
            return self.williams_r(series.highs(), series.lows(), series.closes(), params.period)
        if isinstance(params, StochRSIParams):
            return self.stoch_rsi(
                series.closes(),
                params.period,
                params.fast_k_period,
                params.fast_d_period,
                params.fast_d_ma,
            )
        if isinstance(params, VolumeMAParams):
            return self.volume_ma(series.volumes(), params.short_period, params.long_period)

        raise TypeError(f"Unsupported indicator parameters: {type(params).__name__}")

    def default_overlays(self) -> list[MAParams]:
        """Moving averages drawn on the price panel by default."""
        return [
            MAParams(period=period, kind=self.settings.ma_overlay_kind)
            for period in self.settings.ma_periods
        ]

    def default_params(self, indicator: IndicatorKind) -> IndicatorParams:
        """Parameters built from configured defaults."""
        s = self.settings
        indicator = IndicatorKind(indicator)

        if indicator == IndicatorKind.MA:
            return MAParams(period=s.ma_period)
        if indicator == IndicatorKind.RSI:
            return RSIParams(period=s.rsi_period)
        if indicator == IndicatorKind.MACD:
            return MACDParams(
                fast_period=s.macd_fast_period,
                slow_period=s.macd_slow_period,
                signal_period=s.macd_signal_period,
            )
        if indicator in (IndicatorKind.BBANDS, IndicatorKind.BB_BANDWIDTH):
            model = BollingerParams if indicator == IndicatorKind.BBANDS else BandwidthParams
            return model(period=s.bb_period, dev_up=s.bb_dev_up, dev_down=s.bb_dev_down)
        if indicator == IndicatorKind.STOCH:
            return StochasticParams(
                fast_k_period=s.stoch_fast_k_period,
                slow_k_period=s.stoch_slow_k_period,
                slow_d_period=s.stoch_slow_d_period,
            )
        if indicator == IndicatorKind.KDJ:
            return KDJParams(
                fast_k_period=s.kdj_fast_k_period,
                slow_k_period=s.kdj_slow_k_period,
                slow_d_period=s.kdj_slow_d_period,
            )
        if indicator == IndicatorKind.WILLR:
            return WilliamsRParams(period=s.williams_r_period)
        if indicator == IndicatorKind.STOCHRSI:
            return StochRSIParams(
                period=s.stoch_rsi_period,
                fast_k_period=s.stoch_rsi_fast_k_period,
                fast_d_period=s.stoch_rsi_fast_d_period,
            )
        return VolumeMAParams(
            short_period=s.volume_ma_short_period,
            long_period=s.volume_ma_long_period,
        )

    # =========================================================================
    # SINGLE-LINE INDICATORS
    # =========================================================================

    def moving_average(
        self, closes: Values, period: Optional[int] = None, kind: MAKind = MAKind.SMA
    ) -> SingleSeriesOutput:
        period = self.settings.ma_period if period is None else period
        begin, values = calc.moving_average(closes, period, kind)
        return SingleSeriesOutput(
            indicator=IndicatorKind.MA,
            begin_index=begin,
            line_names=(f"{MAKind(kind).value.lower()}{period}",),
            values=_line(values),
        )

    def moving_averages(
        self,
        closes: Values,
        periods: Optional[Sequence[int]] = None,
        kind: Optional[MAKind] = None,
    ) -> list[SingleSeriesOutput]:
        """One moving average per period (configured overlay set by default)."""
        periods = self.settings.ma_periods if periods is None else periods
        kind = self.settings.ma_overlay_kind if kind is None else kind
        return [self.moving_average(closes, period, kind) for period in periods]

    def rsi(self, closes: Values, period: Optional[int] = None) -> SingleSeriesOutput:
        period = self.settings.rsi_period if period is None else period
        begin, values = calc.rsi(closes, period, self.settings.rsi_neutral_value)
        return SingleSeriesOutput(
            indicator=IndicatorKind.RSI,
            begin_index=begin,
            line_names=(f"rsi{period}",),
            values=_line(values),
        )

    def williams_r(
        self, highs: Values, lows: Values, closes: Values, period: Optional[int] = None
    ) -> SingleSeriesOutput:
        period = self.settings.williams_r_period if period is None else period
        begin, values = calc.williams_r(highs, lows, closes, period, self.policy)
        return SingleSeriesOutput(
            indicator=IndicatorKind.WILLR,
            begin_index=begin,
            line_names=("wr",),
            values=_line(values),
        )

    def bollinger_bandwidth(self, bands: TripleSeriesOutput) -> SingleSeriesOutput:
        """(upper - lower) / middle for a Bollinger Bands output."""
        upper, middle, lower = bands.as_arrays()
        return SingleSeriesOutput(
            indicator=IndicatorKind.BB_BANDWIDTH,
            begin_index=bands.begin_index,
            line_names=("bandwidth",),
            values=_line(calc.bandwidth(upper, middle, lower)),
        )

    # =========================================================================
    # MULTI-LINE INDICATORS
    # =========================================================================

    def macd(
        self,
        closes: Values,
        fast_period: Optional[int] = None,
        slow_period: Optional[int] = None,
        signal_period: Optional[int] = None,
    ) -> TripleSeriesOutput:
        s = self.settings
        begin, macd_line, signal_line, histogram = calc.macd(
            closes,
            s.macd_fast_period if fast_period is None else fast_period,
            s.macd_slow_period if slow_period is None else slow_period,
            s.macd_signal_period if signal_period is None else signal_period,
        )
        return TripleSeriesOutput(
            indicator=IndicatorKind.MACD,
            begin_index=begin,
            line_names=("macd", "signal", "histogram"),
            first=_line(macd_line),
            second=_line(signal_line),
            third=_line(histogram),
        )

    def bollinger_bands(
        self,
        closes: Values,
        period: Optional[int] = None,
        dev_up: Optional[float] = None,
        dev_down: Optional[float] = None,
        ma_kind: MAKind = MAKind.SMA,
    ) -> TripleSeriesOutput:
        s = self.settings
        begin, upper, middle, lower = calc.bollinger_bands(
            closes,
            s.bb_period if period is None else period,
            s.bb_dev_up if dev_up is None else dev_up,
            s.bb_dev_down if dev_down is None else dev_down,
            ma_kind,
        )
        return TripleSeriesOutput(
            indicator=IndicatorKind.BBANDS,
            begin_index=begin,
            line_names=("upper", "middle", "lower"),
            first=_line(upper),
            second=_line(middle),
            third=_line(lower),
        )

    def stochastic(
        self,
        highs: Values,
        lows: Values,
        closes: Values,
        fast_k_period: Optional[int] = None,
        slow_k_period: Optional[int] = None,
        slow_d_period: Optional[int] = None,
        slow_k_ma: MAKind = MAKind.SMA,
        slow_d_ma: MAKind = MAKind.SMA,
    ) -> TripleSeriesOutput:
        s = self.settings
        begin, fast_k, slow_k, slow_d = calc.stochastic(
            highs,
            lows,
            closes,
            s.stoch_fast_k_period if fast_k_period is None else fast_k_period,
            s.stoch_slow_k_period if slow_k_period is None else slow_k_period,
            s.stoch_slow_d_period if slow_d_period is None else slow_d_period,
            slow_k_ma,
            slow_d_ma,
            self.policy,
        )
        return TripleSeriesOutput(
            indicator=IndicatorKind.STOCH,
            begin_index=begin,
            line_names=("fast_k", "slow_k", "slow_d"),
            first=_line(fast_k),
            second=_line(slow_k),
            third=_line(slow_d),
        )

    def kdj(
        self,
        highs: Values,
        lows: Values,
        closes: Values,
        fast_k_period: Optional[int] = None,
        slow_k_period: Optional[int] = None,
        slow_d_period: Optional[int] = None,
    ) -> TripleSeriesOutput:
        s = self.settings
        begin, k, d, j = calc.kdj(
            highs,
            lows,
            closes,
            s.kdj_fast_k_period if fast_k_period is None else fast_k_period,
            s.kdj_slow_k_period if slow_k_period is None else slow_k_period,
            s.kdj_slow_d_period if slow_d_period is None else slow_d_period,
            self.policy,
        )
        return TripleSeriesOutput(
            indicator=IndicatorKind.KDJ,
            begin_index=begin,
            line_names=("k", "d", "j"),
            first=_line(k),
            second=_line(d),
            third=_line(j),
        )

    def stoch_rsi(
        self,
        closes: Values,
        period: Optional[int] = None,
        fast_k_period: Optional[int] = None,
        fast_d_period: Optional[int] = None,
        fast_d_ma: MAKind = MAKind.SMA,
    ) -> DualSeriesOutput:
        s = self.settings
        begin, fast_k, fast_d = calc.stoch_rsi(
            closes,
            s.stoch_rsi_period if period is None else period,
            s.stoch_rsi_fast_k_period if fast_k_period is None else fast_k_period,
            s.stoch_rsi_fast_d_period if fast_d_period is None else fast_d_period,
            fast_d_ma,
            self.policy,
            s.rsi_neutral_value,
        )
        return DualSeriesOutput(
            indicator=IndicatorKind.STOCHRSI,
            begin_index=begin,
            line_names=("fast_k", "fast_d"),
            first=_line(fast_k),
            second=_line(fast_d),
        )

    def volume_ma(
        self,
        volumes: Values,
        short_period: Optional[int] = None,
        long_period: Optional[int] = None,
    ) -> DualSeriesOutput:
        s = self.settings
        short_period = s.volume_ma_short_period if short_period is None else short_period
        long_period = s.volume_ma_long_period if long_period is None else long_period
        begin, short_ma, long_ma = calc.volume_ma(volumes, short_period, long_period)
        return DualSeriesOutput(
            indicator=IndicatorKind.VOLUME_MA,
            begin_index=begin,
            line_names=(f"ma{short_period}", f"ma{long_period}"),
            first=_line(short_ma),
            second=_line(long_ma),
        )


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance
