"""
chartcore Services

Service layer containing all computation.
Each service has a defined interface (contract) and implementation.
"""

from chartcore.services.base import (
    BaseService,
    ServiceError,
    IndicatorError,
    InsufficientDataError,
    InvalidParameterError,
    DegenerateWindowError,
)

__all__ = [
    "BaseService",
    "ServiceError",
    "IndicatorError",
    "InsufficientDataError",
    "InvalidParameterError",
    "DegenerateWindowError",
]
