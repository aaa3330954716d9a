"""Attribution models, aggregation and model comparison."""

from attributeai.attribution.aggregation import (
    ChannelAggregator,
    DimensionCorrelator,
    compute_roas,
)
from attributeai.attribution.attributor import JourneyAttributor, coerce_journey
from attributeai.attribution.comparison import ModelComparator
from attributeai.attribution.engine import AttributionEngine
from attributeai.attribution.weights import compute_credit

__all__ = [
    "AttributionEngine",
    "ChannelAggregator",
    "DimensionCorrelator",
    "JourneyAttributor",
    "ModelComparator",
    "coerce_journey",
    "compute_credit",
    "compute_roas",
]
