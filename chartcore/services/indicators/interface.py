"""
Indicator Engine Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod

from chartcore.services.base import BaseService
from chartcore.schemas.market import Series
from chartcore.schemas.indicators import (
    IndicatorKind,
    IndicatorOutput,
    IndicatorParams,
    IndicatorRequest,
)


class IndicatorServiceInterface(BaseService[IndicatorRequest, IndicatorOutput]):
    """
    Indicator Engine Service Contract.

    INPUT: IndicatorRequest
        - series: Bars to compute over
        - indicator: Which indicator
        - params: Optional parameters (configured defaults otherwise)

    OUTPUT: IndicatorOutput
        - begin_index: Series index the first value aligns to
        - one, two or three equal-length lines

    Raises InsufficientDataError, InvalidParameterError or
    DegenerateWindowError; never returns partial output.
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    def execute(self, input_data: IndicatorRequest) -> IndicatorOutput:
        """Calculate the requested indicator over the full series."""
        pass

    @abstractmethod
    def compute(self, series: Series, params: IndicatorParams) -> IndicatorOutput:
        """
        Calculate one indicator for a series.

        Args:
            series: Bars in chronological order
            params: Parameter model; its `indicator` field selects the indicator

        Returns:
            Indicator lines aligned to the series
        """
        pass

    @abstractmethod
    def default_params(self, indicator: IndicatorKind) -> IndicatorParams:
        """Parameters built from configured defaults."""
        pass
