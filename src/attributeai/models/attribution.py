"""Attribution model selection, parameters and per-journey results."""

import math
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from attributeai.core.exceptions import InvalidParameterError, UnknownModelError
from attributeai.models.base import BaseAttributionModel, ensure_utc, utc_now
from attributeai.models.journey import Touchpoint

# Keys used by the dashboard's model selector
_MODEL_ALIASES = {
    "first_click": "first_touch",
    "last_click": "last_touch",
    "u_shaped": "position_based",
}


class ModelKind(str, Enum):
    """Supported attribution models.

    Declaration order is significant: the model comparator uses it to break
    ties between models with equal total attribution.
    """

    FIRST_TOUCH = "first_touch"
    LAST_TOUCH = "last_touch"
    LINEAR = "linear"
    TIME_DECAY = "time_decay"
    POSITION_BASED = "position_based"  # 40/20/40

    @property
    def label(self) -> str:
        """Human-readable model name, e.g. 'Time Decay'."""
        return self.value.replace("_", " ").title()

    @property
    def rank(self) -> int:
        """Position of this model in declaration order."""
        return list(ModelKind).index(self)

    @classmethod
    def parse(cls, key: Any) -> "ModelKind":
        """Resolve a model key to a ModelKind.

        Accepts enum members, their values, hyphenated or spaced spellings
        ("time-decay", "Time Decay") and the dashboard aliases
        ("first-click", "last-click").

        Raises:
            UnknownModelError: If the key does not name a supported model
        """
        if isinstance(key, cls):
            return key
        if isinstance(key, str):
            normalized = key.strip().lower().replace("-", "_").replace(" ", "_")
            normalized = _MODEL_ALIASES.get(normalized, normalized)
            try:
                return cls(normalized)
            except ValueError:
                pass
        raise UnknownModelError(key)


class AttributionParams(BaseAttributionModel):
    """Caller-supplied model parameters.

    Values are checked by ``ensure_valid`` rather than by field constraints:
    a bad parameter is a programmer error that must abort the whole call
    with ``InvalidParameterError``.
    """

    half_life_days: float = Field(
        default=7.0, description="Days over which time-decay weight halves"
    )
    position_first_weight: float = Field(
        default=0.4, description="Share of credit for the first touch"
    )
    position_last_weight: float = Field(
        default=0.4, description="Share of credit for the last touch"
    )

    def ensure_valid(self) -> "AttributionParams":
        """Check parameters are structurally valid.

        Returns:
            self, for chaining

        Raises:
            InvalidParameterError: If any parameter is out of range
        """
        if not math.isfinite(self.half_life_days) or self.half_life_days <= 0:
            raise InvalidParameterError(
                "half_life_days", self.half_life_days, "must be a positive number"
            )

        for name in ("position_first_weight", "position_last_weight"):
            weight = getattr(self, name)
            if not math.isfinite(weight) or not 0 < weight < 1:
                raise InvalidParameterError(name, weight, "must be between 0 and 1")

        combined = self.position_first_weight + self.position_last_weight
        if combined > 1.0 + 1e-9:
            raise InvalidParameterError(
                "position weights",
                combined,
                "first and last weights must not sum to more than 1.0",
            )
        return self


class ConversionWindow(BaseAttributionModel):
    """Reporting window on conversion time, e.g. the last 30 days."""

    end: datetime = Field(..., description="Window end (inclusive)")
    days: float = Field(..., gt=0, description="Window length in days")

    @field_validator("end", mode="after")
    @classmethod
    def normalize_end(cls, v: datetime) -> datetime:
        """Store the window end as timezone-aware UTC."""
        return ensure_utc(v)

    @classmethod
    def trailing(cls, days: float, end: datetime | None = None) -> "ConversionWindow":
        """Window covering the last N days, e.g. the dashboard's 30d and 90d ranges."""
        return cls(end=end or utc_now(), days=days)

    @property
    def start(self) -> datetime:
        """Window start (inclusive)."""
        return self.end - timedelta(days=self.days)

    def contains(self, timestamp: datetime | None) -> bool:
        """Check whether a conversion time falls inside the window."""
        if timestamp is None:
            return False
        return self.start <= ensure_utc(timestamp) <= self.end


class AttributedTouchpoint(Touchpoint):
    """A touchpoint annotated with the credit assigned by one model."""

    customer_id: str = Field(..., description="Journey the touchpoint belongs to")
    conversion_value: float = Field(..., description="Value of that journey")
    model: ModelKind = Field(..., description="Model that assigned the credit")
    position: int = Field(..., ge=0, description="Index in the sorted journey")
    attribution: float = Field(..., description="Monetary credit")
    attribution_percent: float = Field(
        ..., description="Credit as a percentage of the conversion value"
    )


class JourneyAttribution(BaseAttributionModel):
    """All attributed touchpoints of one journey under one model."""

    customer_id: str
    model: ModelKind
    conversion_value: float
    touchpoints: tuple[AttributedTouchpoint, ...]

    @property
    def total_attribution(self) -> float:
        """Sum of credit; equals the conversion value within float epsilon."""
        return math.fsum(tp.attribution for tp in self.touchpoints)

    @property
    def total_cost(self) -> float:
        """Sum of touchpoint costs."""
        return math.fsum(tp.cost for tp in self.touchpoints)
