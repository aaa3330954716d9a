"""Data models for journeys and attribution results."""

from attributeai.models.attribution import (
    AttributedTouchpoint,
    AttributionParams,
    ConversionWindow,
    JourneyAttribution,
    ModelKind,
)
from attributeai.models.journey import Conversion, Journey, Touchpoint
from attributeai.models.results import (
    ROAS_NOT_AVAILABLE,
    AttributionReport,
    AttributionSummary,
    ChannelAggregate,
    ChannelDimensionCell,
    ComparisonReport,
    DimensionAggregate,
    JourneyError,
    ModelChannelBreakdown,
    ModelComparisonRow,
    Roas,
)

__all__ = [
    "ROAS_NOT_AVAILABLE",
    "AttributedTouchpoint",
    "AttributionParams",
    "AttributionReport",
    "AttributionSummary",
    "ChannelAggregate",
    "ChannelDimensionCell",
    "ComparisonReport",
    "Conversion",
    "ConversionWindow",
    "DimensionAggregate",
    "Journey",
    "JourneyAttribution",
    "JourneyError",
    "ModelChannelBreakdown",
    "ModelComparisonRow",
    "ModelKind",
    "Roas",
    "Touchpoint",
]
