"""
Base Service Interface

All services inherit from this base class.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for all services.

    Each service:
    - Has a defined input type
    - Has a defined output type
    - Can validate its inputs
    - Can check its health

    Services are synchronous: every computation is a pure transform
    over in-memory arrays.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging."""
        pass

    @abstractmethod
    def execute(self, input_data: InputT) -> OutputT:
        """
        Execute the service's main function.

        Args:
            input_data: Validated input conforming to InputT schema

        Returns:
            Output conforming to OutputT schema

        Raises:
            ServiceError: If execution fails
        """
        pass

    def health_check(self) -> bool:
        """Pure computation services are always healthy."""
        return True

    def validate_input(self, input_data: InputT) -> InputT:
        """
        Validate input data.
        Default implementation returns input as-is (Pydantic handles validation).
        Override for custom validation logic.
        """
        return input_data


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class IndicatorError(ServiceError):
    """Indicator computation failed. Nothing was produced."""

    def __init__(self, message: str, details: dict = None, service_name: str = "indicators"):
        super().__init__(service_name, message, details)


class InsufficientDataError(IndicatorError):
    """Input series is shorter than the indicator's minimum window."""

    def __init__(self, required: int, available: int, indicator: Optional[str] = None):
        self.required = required
        self.available = available
        self.indicator = indicator
        label = f"{indicator}: " if indicator else ""
        super().__init__(
            f"{label}need at least {required} values, got {available}",
            {"required": required, "available": available, "indicator": indicator},
        )


class InvalidParameterError(IndicatorError, ValueError):
    """Non-positive period, mismatched input lengths or similar config error."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, details)


class DegenerateWindowError(IndicatorError):
    """A high/low window has zero range so the oscillator is undefined."""

    def __init__(self, index: int, indicator: Optional[str] = None):
        self.index = index
        self.indicator = indicator
        label = f"{indicator}: " if indicator else ""
        super().__init__(
            f"{label}zero-range window ending at index {index}",
            {"index": index, "indicator": indicator},
        )
