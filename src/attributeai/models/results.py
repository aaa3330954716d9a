"""Aggregated attribution results returned by the engine."""

from typing import Literal, Union

from pydantic import Field

from attributeai.core.exceptions import ErrorKind, JourneyValidationError
from attributeai.models.attribution import (
    AttributedTouchpoint,
    AttributionParams,
    JourneyAttribution,
    ModelKind,
)
from attributeai.models.base import BaseAttributionModel

ROAS_NOT_AVAILABLE = "N/A"

# ROAS is reported as "N/A" when there is no spend, never as NaN or infinity
Roas = Union[float, Literal["N/A"]]


class JourneyError(BaseAttributionModel):
    """A journey that was skipped, and why."""

    customer_id: str | None = Field(None, description="Customer identifier if known")
    kind: ErrorKind
    detail: str

    @classmethod
    def from_exception(
        cls, exc: JourneyValidationError, customer_id: str | None = None
    ) -> "JourneyError":
        """Build an error record from a journey validation exception."""
        return cls(
            customer_id=exc.customer_id if exc.customer_id is not None else customer_id,
            kind=exc.kind,
            detail=exc.detail,
        )


class ChannelAggregate(BaseAttributionModel):
    """Attributed value and spend for one channel."""

    channel: str
    total_attribution: float
    total_cost: float
    touchpoint_count: int = Field(..., ge=0)
    roas: Roas


class DimensionAggregate(BaseAttributionModel):
    """Attributed value and spend for one contextual tag value."""

    dimension: str
    total_attribution: float
    total_cost: float
    touchpoint_count: int = Field(..., ge=0)
    roas: Roas


class ChannelDimensionCell(BaseAttributionModel):
    """Attributed value for one (channel, dimension) pair."""

    channel: str
    dimension: str
    total_attribution: float
    touchpoint_count: int = Field(..., ge=0)


class AttributionSummary(BaseAttributionModel):
    """Headline numbers for a single-model run."""

    total_attribution: float = 0.0
    total_cost: float = 0.0
    overall_roas: Roas = ROAS_NOT_AVAILABLE
    average_channel_roas: Roas = ROAS_NOT_AVAILABLE
    touchpoint_count: int = 0
    journey_count: int = 0
    skipped_journey_count: int = 0
    dimension_count: int = 0


class AttributionReport(BaseAttributionModel):
    """Result of running one attribution model over a batch of journeys."""

    model: ModelKind
    params: AttributionParams
    dimension_key: str | None = None
    dimension_filter: str | None = None
    attributed: tuple[AttributedTouchpoint, ...] = ()
    journeys: tuple[JourneyAttribution, ...] = ()
    by_channel: tuple[ChannelAggregate, ...] = ()
    by_dimension: tuple[DimensionAggregate, ...] = ()
    channel_dimension: tuple[ChannelDimensionCell, ...] = ()
    summary: AttributionSummary = Field(default_factory=AttributionSummary)
    errors: tuple[JourneyError, ...] = ()

    def channel(self, name: str) -> ChannelAggregate | None:
        """Look up one channel row by name."""
        return next((row for row in self.by_channel if row.channel == name), None)

    def dimension(self, value: str) -> DimensionAggregate | None:
        """Look up one dimension row by value."""
        return next((row for row in self.by_dimension if row.dimension == value), None)


class ModelComparisonRow(BaseAttributionModel):
    """Totals for one model in a comparison run."""

    model: ModelKind
    label: str
    total_attribution: float
    total_cost: float
    aggregate_roas: Roas


class ModelChannelBreakdown(BaseAttributionModel):
    """Channel aggregates for one model in a comparison run."""

    model: ModelKind
    by_channel: tuple[ChannelAggregate, ...] = ()


class ComparisonReport(BaseAttributionModel):
    """Result of running every model over the same journeys."""

    params: AttributionParams
    rows: tuple[ModelComparisonRow, ...] = ()
    channel_breakdown: tuple[ModelChannelBreakdown, ...] = ()
    errors: tuple[JourneyError, ...] = ()

    def row(self, model: ModelKind | str) -> ModelComparisonRow | None:
        """Look up the row for one model."""
        kind = ModelKind.parse(model)
        return next((row for row in self.rows if row.model == kind), None)

    def breakdown(self, model: ModelKind | str) -> tuple[ChannelAggregate, ...]:
        """Channel aggregates for one model (empty if it was not compared)."""
        kind = ModelKind.parse(model)
        for entry in self.channel_breakdown:
            if entry.model == kind:
                return entry.by_channel
        return ()
