"""
Technical Indicator Calculations

Pure NumPy implementations of technical indicators.
All math is deterministic.

Every function returns the valid portion only, as (begin_index, values),
where begin_index is the position in the input that values[0] aligns to.
Inputs are never modified.
"""

from typing import Union

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from chartcore.schemas.indicators import DegenerateWindowPolicy, MAKind
from chartcore.services.base import (
    DegenerateWindowError,
    InsufficientDataError,
    InvalidParameterError,
)

Result = tuple[int, np.ndarray]

KAMA_FAST_PERIOD = 2
KAMA_SLOW_PERIOD = 30
T3_VOLUME_FACTOR = 0.7

NEUTRAL_STOCH_K = 50.0
NEUTRAL_WILLIAMS_R = -50.0


# =============================================================================
# VALIDATION
# =============================================================================


def _as_array(values, name: str = "input") -> np.ndarray:
    """Copy input into a 1-D float array of finite values."""
    arr = np.array(values, dtype=float)
    if arr.ndim != 1:
        raise InvalidParameterError(
            f"{name} must be one-dimensional, got shape {arr.shape}", {"input": name}
        )
    if not np.all(np.isfinite(arr)):
        raise InvalidParameterError(f"{name} contains non-finite values", {"input": name})
    return arr


def _check_period(period, name: str = "period") -> int:
    if isinstance(period, bool) or not isinstance(period, (int, np.integer)):
        raise InvalidParameterError(f"{name} must be an integer, got {period!r}", {name: period})
    if period <= 0:
        raise InvalidParameterError(f"{name} must be positive, got {period}", {name: period})
    return int(period)


def _require(available: int, required: int, indicator: str) -> None:
    if available < required:
        raise InsufficientDataError(required, available, indicator)


def _check_same_length(**arrays: np.ndarray) -> int:
    lengths = {name: len(arr) for name, arr in arrays.items()}
    if len(set(lengths.values())) > 1:
        raise InvalidParameterError(f"input lengths differ: {lengths}", lengths)
    return next(iter(lengths.values()))


def _ma_kind(kind) -> MAKind:
    try:
        return MAKind(kind)
    except ValueError as err:
        raise InvalidParameterError(f"unknown moving average kind {kind!r}") from err


def _policy(policy: Union[DegenerateWindowPolicy, str]) -> DegenerateWindowPolicy:
    try:
        return DegenerateWindowPolicy(policy)
    except ValueError as err:
        raise InvalidParameterError(f"unknown degenerate window policy {policy!r}") from err


def _finite(indicator: str, begin: int, *lines: np.ndarray) -> tuple:
    """Reject results that overflowed, e.g. sums of prices near the float limit."""
    for line in lines:
        if not np.all(np.isfinite(line)):
            raise InvalidParameterError(
                f"{indicator}: result overflowed to non-finite values",
                {"indicator": indicator},
            )
    return (begin, *lines)


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data, period: int) -> Result:
    """Simple Moving Average."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), period, "SMA")

    return _finite("SMA", period - 1, sliding_window_view(data, period).mean(axis=1))


def ema(data, period: int) -> Result:
    """Exponential Moving Average, seeded with the SMA of the first period."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), period, "EMA")

    alpha = 2.0 / (period + 1)
    result = np.empty(len(data) - period + 1)

    # Start with SMA
    result[0] = np.mean(data[:period])

    for i in range(period, len(data)):
        result[i - period + 1] = alpha * data[i] + (1 - alpha) * result[i - period]

    return _finite("EMA", period - 1, result)


def wma(data, period: int) -> Result:
    """Weighted Moving Average (linear weights 1..period)."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), period, "WMA")

    weights = np.arange(1, period + 1, dtype=float)
    return _finite("WMA", period - 1, sliding_window_view(data, period) @ weights / weights.sum())


def dema(data, period: int) -> Result:
    """Double Exponential Moving Average: 2*EMA - EMA(EMA)."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), 2 * period - 1, "DEMA")

    _, e1 = ema(data, period)
    _, e2 = ema(e1, period)
    return _finite("DEMA", 2 * (period - 1), 2 * e1[period - 1 :] - e2)


def tema(data, period: int) -> Result:
    """Triple Exponential Moving Average: 3*e1 - 3*e2 + e3."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), 3 * period - 2, "TEMA")

    lag = period - 1
    _, e1 = ema(data, period)
    _, e2 = ema(e1, period)
    _, e3 = ema(e2, period)
    return _finite("TEMA", 3 * lag, 3 * e1[2 * lag :] - 3 * e2[lag:] + e3)


def trima(data, period: int) -> Result:
    """Triangular Moving Average (SMA of an SMA)."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), period, "TRIMA")

    if period % 2:
        first = second = (period + 1) // 2
    else:
        first, second = period // 2, period // 2 + 1

    _, inner = sma(data, first)
    _, outer = sma(inner, second)
    return _finite("TRIMA", period - 1, outer)


def kama(data, period: int) -> Result:
    """Kaufman Adaptive Moving Average."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), period + 1, "KAMA")

    fastest = 2.0 / (KAMA_FAST_PERIOD + 1)
    slowest = 2.0 / (KAMA_SLOW_PERIOD + 1)

    # Sum of absolute one-bar changes over each period-long stretch
    steps = np.abs(np.diff(data))
    volatility = sliding_window_view(steps, period).sum(axis=1)
    change = np.abs(data[period:] - data[:-period])

    result = np.empty(len(data) - period)
    prev = data[period - 1]
    for i in range(len(result)):
        if volatility[i] <= change[i] or volatility[i] == 0:
            efficiency = 1.0
        else:
            efficiency = change[i] / volatility[i]
        smoothing = (efficiency * (fastest - slowest) + slowest) ** 2
        prev = prev + smoothing * (data[i + period] - prev)
        result[i] = prev

    return _finite("KAMA", period, result)


def _generalized_dema(data: np.ndarray, period: int, v_factor: float) -> Result:
    _, e1 = ema(data, period)
    _, e2 = ema(e1, period)
    return 2 * (period - 1), e1[period - 1 :] * (1 + v_factor) - e2 * v_factor


def t3(data, period: int, v_factor: float = T3_VOLUME_FACTOR) -> Result:
    """Tillson T3: generalized DEMA applied three times."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), 6 * period - 5, "T3")

    begin = 0
    values = data
    for _ in range(3):
        offset, values = _generalized_dema(values, period, v_factor)
        begin += offset
    return _finite("T3", begin, values)


_MA_FUNCTIONS = {
    MAKind.SMA: sma,
    MAKind.EMA: ema,
    MAKind.WMA: wma,
    MAKind.DEMA: dema,
    MAKind.TEMA: tema,
    MAKind.TRIMA: trima,
    MAKind.KAMA: kama,
    MAKind.T3: t3,
}


def ma_lookback(period: int, kind: MAKind = MAKind.SMA) -> int:
    """Number of leading inputs a moving average consumes before its first value."""
    period = _check_period(period)
    kind = _ma_kind(kind)
    if kind in (MAKind.SMA, MAKind.EMA, MAKind.WMA, MAKind.TRIMA):
        return period - 1
    if kind == MAKind.DEMA:
        return 2 * (period - 1)
    if kind == MAKind.TEMA:
        return 3 * (period - 1)
    if kind == MAKind.KAMA:
        return period
    if kind == MAKind.T3:
        return 6 * (period - 1)
    raise NotImplementedError(f"{kind.value} moving average is not implemented")


def moving_average(data, period: int, kind: MAKind = MAKind.SMA) -> Result:
    """Moving average of the given kind."""
    kind = _ma_kind(kind)
    if kind not in _MA_FUNCTIONS:
        raise NotImplementedError(f"{kind.value} moving average is not implemented")
    return _MA_FUNCTIONS[kind](data, period)


# =============================================================================
# WINDOW STATISTICS
# =============================================================================


def stddev(data, period: int) -> Result:
    """Population standard deviation over a trailing window."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), period, "STDDEV")

    return _finite("STDDEV", period - 1, sliding_window_view(data, period).std(axis=1))


def highest(data, period: int) -> Result:
    """Highest value over a trailing window."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), period, "MAX")

    return period - 1, sliding_window_view(data, period).max(axis=1)


def lowest(data, period: int) -> Result:
    """Lowest value over a trailing window."""
    period = _check_period(period)
    data = _as_array(data)
    _require(len(data), period, "MIN")

    return period - 1, sliding_window_view(data, period).min(axis=1)


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes, period: int = 14, neutral: float = 50.0) -> Result:
    """
    Relative Strength Index with Wilder smoothing.

    The first averages are plain means of the first `period` changes.
    A window without any gain or loss yields `neutral`.
    """
    period = _check_period(period)
    closes = _as_array(closes, "close")
    _require(len(closes), period + 1, "RSI")

    # Calculate price changes
    deltas = np.diff(closes)

    # Separate gains and losses
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    # First average
    avg_gain = np.mean(gains[:period])
    avg_loss = np.mean(losses[:period])

    result = np.empty(len(closes) - period)
    result[0] = _rsi_value(avg_gain, avg_loss, neutral)

    # Subsequent RSI values using smoothed averages
    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result[i - period + 1] = _rsi_value(avg_gain, avg_loss, neutral)

    return _finite("RSI", period, result)


def _rsi_value(avg_gain: float, avg_loss: float, neutral: float) -> float:
    total = avg_gain + avg_loss
    if total == 0:
        return neutral
    return 100.0 * avg_gain / total


def macd(
    closes,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> tuple[int, np.ndarray, np.ndarray, np.ndarray]:
    """
    MACD (Moving Average Convergence Divergence).

    A fast period longer than the slow one is swapped.

    Returns: (begin_index, macd_line, signal_line, histogram)
    """
    fast_period = _check_period(fast_period, "fast_period")
    slow_period = _check_period(slow_period, "slow_period")
    signal_period = _check_period(signal_period, "signal_period")
    if slow_period < fast_period:
        fast_period, slow_period = slow_period, fast_period
    closes = _as_array(closes, "close")
    _require(len(closes), slow_period + signal_period - 1, "MACD")

    _, fast_ema = ema(closes, fast_period)
    _, slow_ema = ema(closes, slow_period)

    # Both EMAs aligned at slow_period - 1
    macd_line = fast_ema[slow_period - fast_period :] - slow_ema

    # Signal line is EMA of MACD line
    _, signal_line = ema(macd_line, signal_period)
    macd_line = macd_line[signal_period - 1 :]

    # Histogram
    histogram = macd_line - signal_line

    return _finite("MACD", slow_period + signal_period - 2, macd_line, signal_line, histogram)


def _raw_stochastic(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    period: int,
    policy: DegenerateWindowPolicy,
    indicator: str,
) -> Result:
    """Fast %K: close position within the trailing high/low window, 0..100."""
    begin, highest_high = highest(highs, period)
    _, lowest_low = lowest(lows, period)
    current = closes[period - 1 :]

    spread = highest_high - lowest_low
    flat = spread == 0
    if flat.any() and policy == DegenerateWindowPolicy.RAISE:
        raise DegenerateWindowError(int(np.argmax(flat)) + begin, indicator)

    safe_spread = np.where(flat, 1.0, spread)
    k = np.where(flat, NEUTRAL_STOCH_K, (current - lowest_low) / safe_spread * 100)
    return begin, k


def stochastic(
    highs,
    lows,
    closes,
    fast_k_period: int = 5,
    slow_k_period: int = 3,
    slow_d_period: int = 3,
    slow_k_ma: MAKind = MAKind.SMA,
    slow_d_ma: MAKind = MAKind.SMA,
    policy: Union[DegenerateWindowPolicy, str] = DegenerateWindowPolicy.NEUTRAL,
) -> tuple[int, np.ndarray, np.ndarray, np.ndarray]:
    """
    Stochastic Oscillator.

    Returns: (begin_index, fast_k, slow_k, slow_d)
    """
    fast_k_period = _check_period(fast_k_period, "fast_k_period")
    slow_k_period = _check_period(slow_k_period, "slow_k_period")
    slow_d_period = _check_period(slow_d_period, "slow_d_period")
    policy = _policy(policy)
    highs = _as_array(highs, "high")
    lows = _as_array(lows, "low")
    closes = _as_array(closes, "close")
    length = _check_same_length(high=highs, low=lows, close=closes)

    k_lag = ma_lookback(slow_k_period, slow_k_ma)
    d_lag = ma_lookback(slow_d_period, slow_d_ma)
    _require(length, fast_k_period + k_lag + d_lag, "STOCH")

    begin, fast_k = _raw_stochastic(highs, lows, closes, fast_k_period, policy, "STOCH")
    _, slow_k = moving_average(fast_k, slow_k_period, slow_k_ma)
    _, slow_d = moving_average(slow_k, slow_d_period, slow_d_ma)

    return _finite(
        "STOCH",
        begin + k_lag + d_lag,
        fast_k[k_lag + d_lag :],
        slow_k[d_lag:],
        slow_d,
    )


def kdj(
    highs,
    lows,
    closes,
    fast_k_period: int = 9,
    slow_k_period: int = 3,
    slow_d_period: int = 3,
    policy: Union[DegenerateWindowPolicy, str] = DegenerateWindowPolicy.NEUTRAL,
) -> tuple[int, np.ndarray, np.ndarray, np.ndarray]:
    """
    KDJ: smoothed stochastic plus J = 3K - 2D (J may leave 0..100).

    Returns: (begin_index, k, d, j)
    """
    begin, _, k, d = stochastic(
        highs,
        lows,
        closes,
        fast_k_period,
        slow_k_period,
        slow_d_period,
        policy=policy,
    )
    return _finite("KDJ", begin, k, d, 3 * k - 2 * d)


def williams_r(
    highs,
    lows,
    closes,
    period: int = 14,
    policy: Union[DegenerateWindowPolicy, str] = DegenerateWindowPolicy.NEUTRAL,
) -> Result:
    """Williams %R, -100..0."""
    period = _check_period(period)
    policy = _policy(policy)
    highs = _as_array(highs, "high")
    lows = _as_array(lows, "low")
    closes = _as_array(closes, "close")
    length = _check_same_length(high=highs, low=lows, close=closes)
    _require(length, period, "WILLR")

    begin, highest_high = highest(highs, period)
    _, lowest_low = lowest(lows, period)
    current = closes[period - 1 :]

    spread = highest_high - lowest_low
    flat = spread == 0
    if flat.any() and policy == DegenerateWindowPolicy.RAISE:
        raise DegenerateWindowError(int(np.argmax(flat)) + begin, "WILLR")

    safe_spread = np.where(flat, 1.0, spread)
    result = np.where(flat, NEUTRAL_WILLIAMS_R, (highest_high - current) / safe_spread * -100)
    return _finite("WILLR", begin, result)


def stoch_rsi(
    closes,
    period: int = 14,
    fast_k_period: int = 3,
    fast_d_period: int = 3,
    fast_d_ma: MAKind = MAKind.SMA,
    policy: Union[DegenerateWindowPolicy, str] = DegenerateWindowPolicy.NEUTRAL,
    neutral: float = 50.0,
) -> tuple[int, np.ndarray, np.ndarray]:
    """
    Stochastic RSI: the fast stochastic formula applied to RSI output.

    Returns: (begin_index, fast_k, fast_d)
    """
    period = _check_period(period)
    fast_k_period = _check_period(fast_k_period, "fast_k_period")
    fast_d_period = _check_period(fast_d_period, "fast_d_period")
    policy = _policy(policy)
    closes = _as_array(closes, "close")

    d_lag = ma_lookback(fast_d_period, fast_d_ma)
    _require(len(closes), period + fast_k_period + d_lag, "STOCHRSI")

    rsi_begin, rsi_values = rsi(closes, period, neutral)
    k_begin, fast_k = _raw_stochastic(
        rsi_values, rsi_values, rsi_values, fast_k_period, policy, "STOCHRSI"
    )
    _, fast_d = moving_average(fast_k, fast_d_period, fast_d_ma)

    return _finite("STOCHRSI", rsi_begin + k_begin + d_lag, fast_k[d_lag:], fast_d)


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def bollinger_bands(
    closes,
    period: int = 20,
    dev_up: float = 2.0,
    dev_down: float = 2.0,
    ma_kind: MAKind = MAKind.SMA,
) -> tuple[int, np.ndarray, np.ndarray, np.ndarray]:
    """
    Bollinger Bands around a moving average of the given kind.

    Returns: (begin_index, upper, middle, lower)
    """
    for name, dev in (("dev_up", dev_up), ("dev_down", dev_down)):
        if not np.isfinite(dev) or dev < 0:
            raise InvalidParameterError(f"{name} must be a non-negative number, got {dev}", {name: dev})

    ma_begin, middle = moving_average(closes, period, ma_kind)
    std_begin, std = stddev(closes, period)

    begin = max(ma_begin, std_begin)
    middle = middle[begin - ma_begin :]
    std = std[begin - std_begin :]

    upper = middle + (dev_up * std)
    lower = middle - (dev_down * std)

    return _finite("BBANDS", begin, upper, middle, lower)


def bandwidth(upper: np.ndarray, middle: np.ndarray, lower: np.ndarray) -> np.ndarray:
    """Band width relative to the middle band; 0 where the middle band is 0."""
    upper = _as_array(upper, "upper")
    middle = _as_array(middle, "middle")
    lower = _as_array(lower, "lower")
    _check_same_length(upper=upper, middle=middle, lower=lower)

    zero = middle == 0
    width = np.where(zero, 0.0, (upper - lower) / np.where(zero, 1.0, middle))
    return _finite("BB_BANDWIDTH", 0, width)[1]


# =============================================================================
# VOLUME INDICATORS
# =============================================================================


def volume_ma(volumes, short_period: int = 5, long_period: int = 10) -> tuple[int, np.ndarray, np.ndarray]:
    """
    Two simple moving averages of volume, aligned at the later start.

    Returns: (begin_index, short_ma, long_ma)
    """
    short_period = _check_period(short_period, "short_period")
    long_period = _check_period(long_period, "long_period")
    volumes = _as_array(volumes, "volume")
    if np.any(volumes < 0):
        raise InvalidParameterError("volume must be non-negative")
    _require(len(volumes), max(short_period, long_period), "VOLUME_MA")

    short_begin, short_ma = sma(volumes, short_period)
    long_begin, long_ma = sma(volumes, long_period)

    begin = max(short_begin, long_begin)
    return _finite("VOLUME_MA", begin, short_ma[begin - short_begin :], long_ma[begin - long_begin :])
