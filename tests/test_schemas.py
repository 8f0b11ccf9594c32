"""Tests for market data contracts."""

import pytest
from pydantic import ValidationError

from chartcore.schemas.market import Bar, Series, VisibleRange
from chartcore.services.base import InvalidParameterError

from conftest import make_series


def bar(time, close=10.0, volume=100.0):
    return Bar(time=time, open=close, high=close + 1, low=close - 1, close=close, volume=volume)


class TestBar:
    """Tests for Bar validation."""

    def test_bullish(self):
        assert Bar(time=0, open=1.0, high=2.0, low=0.5, close=1.5).is_bullish
        assert not Bar(time=0, open=1.5, high=2.0, low=0.5, close=1.0).is_bullish

    def test_volume_optional(self):
        assert Bar(time=0, open=1.0, high=1.0, low=1.0, close=1.0).volume is None

    def test_negative_volume(self):
        with pytest.raises(ValidationError):
            bar(0, volume=-1.0)

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_price(self, value):
        with pytest.raises(ValidationError):
            Bar(time=0, open=1.0, high=1.0, low=1.0, close=value)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            bar(0).close = 11.0


class TestSeries:
    """Tests for Series ordering and accessors."""

    def test_times_must_increase(self):
        with pytest.raises(ValidationError):
            Series(bars=[bar(60), bar(0)])
        with pytest.raises(ValidationError):
            Series(bars=[bar(0), bar(0)])

    def test_accessors(self):
        series = make_series([1.0, 2.0, 3.0], highs=[2.0, 3.0, 4.0], lows=[0.5, 1.5, 2.5])

        assert len(series) == 3
        assert series.closes().tolist() == [1.0, 2.0, 3.0]
        assert series.highs().tolist() == [2.0, 3.0, 4.0]
        assert series.lows().tolist() == [0.5, 1.5, 2.5]
        assert series.times().tolist() == [0.0, 60.0, 120.0]
        assert series[1].close == 2.0
        assert series.last.close == 3.0

    def test_arrays_are_copies(self):
        series = make_series([1.0, 2.0, 3.0])
        closes = series.closes()
        closes[0] = 99.0

        assert series.closes()[0] == 1.0

    def test_missing_volume(self):
        with pytest.raises(InvalidParameterError):
            make_series([1.0, 2.0]).volumes()

    def test_append(self):
        series = Series(bars=[bar(0), bar(60)])
        series.append(bar(120, close=11.0))

        assert len(series) == 3
        assert series.version == 1
        assert series.last.close == 11.0

    def test_append_out_of_order(self):
        series = Series(bars=[bar(0), bar(60)])

        with pytest.raises(InvalidParameterError):
            series.append(bar(60))

        assert len(series) == 2
        assert series.version == 0

    def test_extend(self):
        series = Series(bars=[bar(0)])
        series.extend([bar(60), bar(120)])

        assert len(series) == 3
        assert series.version == 2

    def test_empty(self):
        series = Series()

        assert len(series) == 0
        assert series.last is None
        assert series.closes().tolist() == []

    def test_window(self):
        series = make_series([1.0, 2.0, 3.0, 4.0])
        visible = series.visible_range(1, 3)

        assert [b.close for b in series.window(visible)] == [2.0, 3.0]

        with pytest.raises(InvalidParameterError):
            series.visible_range(2, 5)


class TestVisibleRange:
    """Tests for VisibleRange."""

    def test_length_and_contains(self):
        visible = VisibleRange(start=5, end=10)

        assert visible.length == 5
        assert visible.contains(5)
        assert not visible.contains(10)

    @pytest.mark.parametrize("start,end", [(3, 4), (4, 4), (5, 3), (-1, 5)])
    def test_invalid(self, start, end):
        with pytest.raises(ValidationError):
            VisibleRange(start=start, end=end)

    def test_check_within(self):
        VisibleRange(start=0, end=10).check_within(10)

        with pytest.raises(InvalidParameterError):
            VisibleRange(start=0, end=11).check_within(10)

    def test_from_scroll(self):
        visible = VisibleRange.from_scroll(250.0, 8.0, 2.0, 40, 1000)

        assert (visible.start, visible.end) == (25, 65)

    def test_from_scroll_clamps(self):
        assert VisibleRange.from_scroll(-30.0, 8.0, 2.0, 40, 1000).start == 0
        assert VisibleRange.from_scroll(9700.0, 8.0, 2.0, 40, 1000).end == 1000

    def test_from_scroll_too_few_bars(self):
        with pytest.raises(InvalidParameterError):
            VisibleRange.from_scroll(9990.0, 8.0, 2.0, 40, 1000)

    def test_from_scroll_zero_slot(self):
        with pytest.raises(InvalidParameterError):
            VisibleRange.from_scroll(10.0, 0.0, 0.0, 40, 1000)
