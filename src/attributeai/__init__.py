"""AttributeAI.

Multi-touch attribution for marketing journeys: splits each conversion's
value across the touchpoints that led to it, then rolls the credit up by
channel and by contextual tags such as weather.
"""

__version__ = "1.0.0"

from attributeai.attribution import AttributionEngine
from attributeai.models import (
    AttributionParams,
    ConversionWindow,
    Journey,
    ModelKind,
    Touchpoint,
)

__all__ = [
    "AttributionEngine",
    "AttributionParams",
    "ConversionWindow",
    "Journey",
    "ModelKind",
    "Touchpoint",
]
