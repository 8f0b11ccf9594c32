"""Shared fixtures for chartcore tests."""

from typing import Optional, Sequence

import numpy as np
import pytest

from chartcore.core.config import Settings
from chartcore.schemas.market import Bar, Series
from chartcore.services.indicators.service import IndicatorService
from chartcore.services.sample_data import generate_sample_bars
from chartcore.services.window.service import WindowService

END_TIME = 1_700_000_000.0


def make_series(
    closes: Sequence[float],
    highs: Optional[Sequence[float]] = None,
    lows: Optional[Sequence[float]] = None,
    volumes: Optional[Sequence[float]] = None,
) -> Series:
    """Series with one-minute bars; opens equal closes unless given otherwise."""
    highs = highs if highs is not None else closes
    lows = lows if lows is not None else closes
    bars = [
        Bar(
            time=60.0 * i,
            open=closes[i],
            high=highs[i],
            low=lows[i],
            close=closes[i],
            volume=volumes[i] if volumes is not None else None,
        )
        for i in range(len(closes))
    ]
    return Series(bars=bars)


def random_walk(seed: int, n: int = 200, start: float = 100.0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return start + np.cumsum(rng.normal(0, 1, n))


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def service(settings):
    return IndicatorService(settings)


@pytest.fixture
def window_service(settings):
    return WindowService(settings=settings)


@pytest.fixture
def sample_series():
    return generate_sample_bars(count=120, start_price=150.0, seed=7, end_time=END_TIME)
