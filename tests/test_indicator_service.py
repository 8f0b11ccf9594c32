"""Tests for the indicator service and its output contracts."""

import numpy as np
import pytest
from pydantic import TypeAdapter, ValidationError

from chartcore.core.config import Settings
from chartcore.schemas.indicators import (
    BandwidthParams,
    BollingerParams,
    DualSeriesOutput,
    IndicatorKind,
    IndicatorOutput,
    IndicatorRequest,
    MACDParams,
    MAKind,
    MAParams,
    RSIParams,
    SingleSeriesOutput,
    StochasticParams,
    TripleSeriesOutput,
    VolumeMAParams,
)
from chartcore.services.base import (
    DegenerateWindowError,
    IndicatorError,
    InsufficientDataError,
    InvalidParameterError,
    ServiceError,
)
from chartcore.services.indicators.service import IndicatorService, get_indicator_service

from conftest import make_series, random_walk


class TestIndicatorService:
    """Tests for the typed indicator wrappers."""

    def test_moving_average_line_name(self, service):
        result = service.moving_average([10, 11, 12, 13, 14], 3)

        assert isinstance(result, SingleSeriesOutput)
        assert result.begin_index == 2
        assert result.line_names == ("sma3",)
        assert result.values == [11.0, 12.0, 13.0]

    def test_moving_average_default_period(self, service):
        result = service.moving_average(random_walk(0, 50), kind=MAKind.EMA)

        assert result.line_names == ("ema20",)
        assert result.begin_index == 19
        assert result.end_index == 50

    def test_rsi_flat(self, service):
        result = service.rsi([100, 100, 100, 100, 100], 4)

        assert result.begin_index == 4
        assert result.values == [50.0]

    def test_rsi_neutral_from_settings(self):
        service = IndicatorService(Settings(rsi_neutral_value=0.0))

        assert service.rsi([7.0] * 5, 4).values == [0.0]

    def test_macd_lines(self, service):
        result = service.macd(random_walk(1, 120))

        assert isinstance(result, TripleSeriesOutput)
        assert result.line_names == ("macd", "signal", "histogram")
        assert result.begin_index == 33
        macd_line, signal, histogram = result.as_arrays()
        assert np.max(np.abs(histogram - (macd_line - signal))) <= 1e-9

    def test_macd_insufficient_data(self, service):
        with pytest.raises(InsufficientDataError) as exc:
            service.macd(random_walk(1, 20))

        assert exc.value.indicator == "MACD"
        assert isinstance(exc.value, IndicatorError)
        assert isinstance(exc.value, ServiceError)

    def test_bollinger_bands_order(self, service):
        upper, middle, lower = service.bollinger_bands(random_walk(2, 100)).as_arrays()

        assert np.all(upper >= middle)
        assert np.all(middle >= lower)

    def test_bollinger_bandwidth(self, service):
        bands = service.bollinger_bands(random_walk(2, 100, start=500.0))
        width = service.bollinger_bandwidth(bands)

        assert width.begin_index == bands.begin_index
        upper, middle, lower = bands.as_arrays()
        assert width.values == pytest.approx(((upper - lower) / middle).tolist())

    def test_williams_r(self, service):
        result = service.williams_r([10, 12, 11], [8, 9, 8], [9, 11, 10], 3)

        assert result.begin_index == 2
        assert result.values == [-50.0]
        assert result.line_names == ("wr",)

    def test_kdj_j_line(self, service, sample_series):
        result = service.kdj(sample_series.highs(), sample_series.lows(), sample_series.closes())
        k, d, j = result.as_arrays()

        assert result.line_names == ("k", "d", "j")
        assert j == pytest.approx(3 * k - 2 * d)

    def test_stoch_rsi_shape(self, service):
        result = service.stoch_rsi(random_walk(3, 60))

        assert isinstance(result, DualSeriesOutput)
        assert result.line_names == ("fast_k", "fast_d")
        assert result.begin_index == 18

    def test_volume_ma(self, service):
        volumes = [float(v) for v in range(1, 21)]
        result = service.volume_ma(volumes)

        assert result.line_names == ("ma5", "ma10")
        assert result.begin_index == 9
        assert result.line("ma5")[0] == pytest.approx(8.0)
        assert result.line("ma10")[0] == pytest.approx(5.5)

    def test_unknown_line(self, service):
        result = service.rsi(random_walk(0, 30))

        with pytest.raises(KeyError):
            result.line("signal")

    def test_mismatched_lengths(self, service):
        with pytest.raises(InvalidParameterError):
            service.williams_r([1.0, 2.0, 3.0], [1.0, 2.0], [1.0, 2.0, 3.0], 2)

    @pytest.mark.parametrize("period", [0, -5])
    def test_non_positive_period(self, service, period):
        with pytest.raises(InvalidParameterError):
            service.rsi(random_walk(0, 30), period)

    def test_invalid_parameter_is_value_error(self, service):
        with pytest.raises(ValueError):
            service.moving_average([1.0, 2.0, 3.0], 0)


class TestDegenerateWindowPolicy:
    """Zero-range windows under each policy."""

    def test_neutral_by_default(self, service):
        flat = [5.0] * 20

        assert service.williams_r(flat, flat, flat, 14).values == [-50.0] * 7
        assert service.policy.value == "neutral"

    def test_raise(self):
        service = IndicatorService(Settings(degenerate_window_policy="raise"))
        flat = [5.0] * 20

        with pytest.raises(DegenerateWindowError) as exc:
            service.stochastic(flat, flat, flat)

        assert exc.value.index == 4
        assert exc.value.indicator == "STOCH"

    def test_invalid_policy_setting(self):
        with pytest.raises(ValidationError):
            Settings(degenerate_window_policy="ignore")


class TestCompute:
    """Tests for Series-based dispatch."""

    def test_execute_with_defaults(self, service, sample_series):
        request = IndicatorRequest(series=sample_series, indicator=IndicatorKind.MACD)
        result = service.execute(request)

        assert result.indicator == IndicatorKind.MACD
        assert result.begin_index == 33
        assert result.end_index == len(sample_series)

    def test_execute_with_params(self, service, sample_series):
        request = IndicatorRequest(
            series=sample_series,
            indicator=IndicatorKind.MA,
            params=MAParams(period=5, kind=MAKind.WMA),
        )
        result = service.execute(request)

        assert result.line_names == ("wma5",)
        assert result.begin_index == 4

    def test_params_must_match_indicator(self, sample_series):
        with pytest.raises(ValidationError):
            IndicatorRequest(
                series=sample_series,
                indicator=IndicatorKind.RSI,
                params=MACDParams(),
            )

    def test_params_from_dict(self, service, sample_series):
        request = IndicatorRequest(
            series=sample_series,
            indicator="STOCH",
            params={"indicator": IndicatorKind.STOCH, "fast_k_period": 14},
        )

        assert isinstance(request.params, StochasticParams)
        assert service.execute(request).begin_index == 13 + 2 + 2

    def test_bandwidth_dispatch(self, service, sample_series):
        result = service.compute(sample_series, BandwidthParams())

        assert result.indicator == IndicatorKind.BB_BANDWIDTH
        assert result.line_names == ("bandwidth",)

    def test_bands_dispatch(self, service, sample_series):
        result = service.compute(sample_series, BollingerParams(period=10))

        assert result.indicator == IndicatorKind.BBANDS
        assert result.begin_index == 9

    def test_volume_missing(self, service):
        series = make_series([1.0, 2.0, 3.0, 4.0, 5.0])

        with pytest.raises(InvalidParameterError):
            service.compute(series, VolumeMAParams(short_period=2, long_period=3))

    @pytest.mark.parametrize("kind", list(IndicatorKind))
    def test_default_params(self, service, kind):
        params = service.default_params(kind)

        assert params.indicator == kind

    def test_default_params_follow_settings(self):
        service = IndicatorService(Settings(rsi_period=21))

        assert service.default_params(IndicatorKind.RSI) == RSIParams(period=21)

    def test_default_overlays(self, service):
        overlays = service.default_overlays()

        assert [p.period for p in overlays] == [7, 25, 99]
        assert all(p.kind == MAKind.EMA for p in overlays)

    def test_moving_averages(self, service):
        results = service.moving_averages(random_walk(4, 150))

        assert [r.line_names for r in results] == [("ema7",), ("ema25",), ("ema99",)]
        assert [r.begin_index for r in results] == [6, 24, 98]

    def test_moving_averages_explicit(self):
        service = IndicatorService(Settings(ma_periods=[5, 10], ma_overlay_kind="SMA"))
        results = service.moving_averages([float(v) for v in range(1, 21)])

        assert [r.line_names for r in results] == [("sma5",), ("sma10",)]
        assert service.moving_averages([1.0, 2.0, 3.0], periods=[2], kind=MAKind.WMA)[0].line_names == ("wma2",)

    def test_execute_validates_input(self, sample_series):
        calls = []

        class RecordingService(IndicatorService):
            def validate_input(self, input_data):
                calls.append(input_data.indicator)
                return input_data

        RecordingService(Settings()).execute(
            IndicatorRequest(series=sample_series, indicator=IndicatorKind.RSI)
        )

        assert calls == [IndicatorKind.RSI]

    def test_singleton(self):
        assert get_indicator_service() is get_indicator_service()


class TestOutputContract:
    """Validation of IndicatorOutput values."""

    def test_discriminated_by_shape(self):
        adapter = TypeAdapter(IndicatorOutput)
        result = adapter.validate_python(
            {
                "shape": "dual",
                "indicator": "VOLUME_MA",
                "begin_index": 9,
                "line_names": ["ma5", "ma10"],
                "first": [1.0],
                "second": [2.0],
            }
        )

        assert isinstance(result, DualSeriesOutput)
        assert result.lines == {"ma5": [1.0], "ma10": [2.0]}

    def test_unequal_line_lengths(self):
        with pytest.raises(ValidationError):
            DualSeriesOutput(
                indicator=IndicatorKind.STOCHRSI, begin_index=0, first=[1.0, 2.0], second=[1.0]
            )

    def test_non_finite_values(self):
        with pytest.raises(ValidationError):
            SingleSeriesOutput(indicator=IndicatorKind.RSI, begin_index=0, values=[1.0, float("nan")])

    def test_name_count(self):
        with pytest.raises(ValidationError):
            SingleSeriesOutput(
                indicator=IndicatorKind.RSI, begin_index=0, line_names=("a", "b"), values=[1.0]
            )

    def test_negative_begin_index(self):
        with pytest.raises(ValidationError):
            SingleSeriesOutput(indicator=IndicatorKind.RSI, begin_index=-1, values=[1.0])

    def test_frozen(self, service):
        result = service.rsi(random_walk(0, 30))

        with pytest.raises(ValidationError):
            result.begin_index = 0

    def test_health_check(self, service):
        assert service.health_check()
        assert service.name == "IndicatorService"

    def test_ma_kind_codes(self):
        assert MAKind.SMA.code == 0
        assert MAKind.MAMA.code == 7
        assert MAKind.T3.code == 8
