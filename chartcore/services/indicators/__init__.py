"""
Indicator Engine Service

CONTRACT:
    Input:  IndicatorRequest (Series + parameters)
    Output: IndicatorOutput

RESPONSIBILITIES:
    - Moving averages (SMA, EMA, WMA, DEMA, TEMA, TRIMA, KAMA, T3)
    - Oscillators (RSI, MACD, Stochastic, KDJ, Williams %R, StochRSI)
    - Bands (Bollinger Bands and bandwidth)
    - Volume moving averages

Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from chartcore.services.indicators.interface import IndicatorServiceInterface
from chartcore.services.indicators.service import IndicatorService, get_indicator_service

__all__ = [
    "IndicatorServiceInterface",
    "IndicatorService",
    "get_indicator_service",
]
