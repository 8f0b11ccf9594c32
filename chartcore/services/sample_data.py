"""
Sample Data Generator

Generates random-walk candle series for demos and tests.
"""

import time
from typing import Optional

import numpy as np

from chartcore.core.config import get_settings
from chartcore.schemas.market import Bar, Series

# Per-bar close change, as a fraction of the previous close
MAX_CHANGE = 0.02
# Wick extension beyond the candle body, as a fraction of the body edge
MAX_WICK = 0.01

DEFAULT_INTERVAL = 60.0  # one minute


def generate_sample_bars(
    count: Optional[int] = None,
    start_price: Optional[float] = None,
    interval: float = DEFAULT_INTERVAL,
    seed: Optional[int] = None,
    end_time: Optional[float] = None,
    symbol: Optional[str] = None,
) -> Series:
    """
    Generate a random-walk candle series.

    Each bar opens at the previous close and closes within +/-2%; highs and
    lows extend up to 1% beyond the body. The last bar ends at `end_time`
    (defaults to now).

    Args:
        count: Number of bars (defaults to settings.sample_bar_count)
        start_price: Opening price of the first bar (random 100-200 if omitted)
        interval: Seconds between bars
        seed: Seed for a reproducible series
        end_time: Epoch seconds of the last bar
        symbol: Optional symbol attached to the series

    Returns:
        Series of `count` bars with volume
    """
    if count is None:
        count = get_settings().sample_bar_count
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")

    rng = np.random.default_rng(seed)
    if end_time is None:
        end_time = time.time()
    start_time = end_time - interval * (count - 1)

    last_close = float(start_price) if start_price is not None else float(rng.uniform(100, 200))

    bars = []
    for i in range(count):
        # Random walk
        change = rng.uniform(-MAX_CHANGE, MAX_CHANGE)

        open_price = last_close
        close_price = open_price * (1 + change)
        high_price = max(open_price, close_price) * rng.uniform(1.0, 1.0 + MAX_WICK)
        low_price = min(open_price, close_price) * rng.uniform(1.0 - MAX_WICK, 1.0)

        bars.append(
            Bar(
                time=start_time + i * interval,
                open=open_price,
                high=high_price,
                low=low_price,
                close=close_price,
                volume=float(rng.integers(100_000, 5_000_000)),
            )
        )
        last_close = close_price

    return Series(symbol=symbol, bars=bars)
