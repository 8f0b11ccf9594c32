"""
chartcore Schema Contracts

This module defines all contracts between the library's components.
All services accept and return these models.
"""

from chartcore.schemas.market import Bar, Series, VisibleRange
from chartcore.schemas.indicators import (
    MAKind,
    IndicatorKind,
    DegenerateWindowPolicy,
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
    IndicatorParams,
    IndicatorRequest,
    SingleSeriesOutput,
    DualSeriesOutput,
    TripleSeriesOutput,
    IndicatorOutput,
)
from chartcore.schemas.window import (
    YBounds,
    WindowedIndicator,
    WindowRequest,
    WindowOutput,
)

__all__ = [
    # Market
    "Bar",
    "Series",
    "VisibleRange",
    # Indicators
    "MAKind",
    "IndicatorKind",
    "DegenerateWindowPolicy",
    "MAParams",
    "RSIParams",
    "MACDParams",
    "BollingerParams",
    "BandwidthParams",
    "StochasticParams",
    "KDJParams",
    "WilliamsRParams",
    "StochRSIParams",
    "VolumeMAParams",
    "IndicatorParams",
    "IndicatorRequest",
    "SingleSeriesOutput",
    "DualSeriesOutput",
    "TripleSeriesOutput",
    "IndicatorOutput",
    # Window
    "YBounds",
    "WindowedIndicator",
    "WindowRequest",
    "WindowOutput",
]
