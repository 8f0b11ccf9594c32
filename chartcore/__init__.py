"""
chartcore - indicator computation for candlestick charts.

Computes technical indicators over OHLCV bar series and restricts them to
a visible range with y-axis bounds and tick labels, ready for a chart
front-end to draw.

All computation is synchronous, stateless and side-effect free.
"""

import logging

from chartcore.core.config import Settings, get_settings
from chartcore.schemas import (
    Bar,
    Series,
    VisibleRange,
    MAKind,
    IndicatorKind,
    DegenerateWindowPolicy,
    IndicatorRequest,
    IndicatorOutput,
    SingleSeriesOutput,
    DualSeriesOutput,
    TripleSeriesOutput,
    YBounds,
    WindowRequest,
    WindowOutput,
)
from chartcore.services.base import (
    ServiceError,
    IndicatorError,
    InsufficientDataError,
    InvalidParameterError,
    DegenerateWindowError,
)
from chartcore.services.indicators import IndicatorService, get_indicator_service
from chartcore.services.window import WindowService, get_window_service
from chartcore.services.sample_data import generate_sample_bars

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Schemas
    "Bar",
    "Series",
    "VisibleRange",
    "MAKind",
    "IndicatorKind",
    "DegenerateWindowPolicy",
    "IndicatorRequest",
    "IndicatorOutput",
    "SingleSeriesOutput",
    "DualSeriesOutput",
    "TripleSeriesOutput",
    "YBounds",
    "WindowRequest",
    "WindowOutput",
    # Errors
    "ServiceError",
    "IndicatorError",
    "InsufficientDataError",
    "InvalidParameterError",
    "DegenerateWindowError",
    # Services
    "IndicatorService",
    "get_indicator_service",
    "WindowService",
    "get_window_service",
    "generate_sample_bars",
]
