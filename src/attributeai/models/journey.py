"""Customer journey input models."""

import math
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from attributeai.models.base import BaseAttributionModel, ensure_utc
from attributeai.utils.parsing import bounded_monetary_value, clean_label


class Touchpoint(BaseAttributionModel):
    """One marketing exposure in a customer journey."""

    timestamp: datetime = Field(..., description="When the exposure happened")
    channel: str = Field(..., min_length=1, description="Channel, e.g. 'Paid Search'")
    campaign: str = Field(default="", description="Campaign name")
    cost: float = Field(
        default=0.0, description="Spend for this exposure (0 for organic/direct)"
    )
    dimension: str | None = Field(
        default=None,
        validation_alias=AliasChoices("dimension", "weather"),
        description="Default contextual tag, e.g. weather condition",
    )
    dimensions: dict[str, str] = Field(
        default_factory=dict, description="Additional named contextual tags"
    )

    @field_validator("timestamp", mode="after")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        """Store timestamps as timezone-aware UTC."""
        return ensure_utc(v)

    @field_validator("channel", mode="before")
    @classmethod
    def clean_channel(cls, v: Any) -> Any:
        """Strip whitespace from channel labels."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("campaign", mode="before")
    @classmethod
    def clean_campaign(cls, v: Any) -> str:
        """Missing campaign names become an empty string."""
        return clean_label(v) or ""

    @field_validator("cost", mode="before")
    @classmethod
    def clean_cost(cls, v: Any) -> float:
        """Negative, missing or unparsable cost counts as zero spend.

        Costs above MAX_MONETARY_VALUE fail validation.
        """
        cost = bounded_monetary_value(v)
        if cost is None or cost < 0:
            return 0.0
        return cost

    @field_validator("dimension", mode="before")
    @classmethod
    def clean_dimension(cls, v: Any) -> str | None:
        """Normalize the default tag."""
        return clean_label(v)

    @field_validator("dimensions", mode="before")
    @classmethod
    def clean_dimensions(cls, v: Any) -> Any:
        """Drop tags with missing values."""
        if v is None:
            return {}
        if isinstance(v, dict):
            cleaned = {}
            for key, value in v.items():
                label = clean_label(value)
                if label is not None:
                    cleaned[str(key)] = label
            return cleaned
        return v

    def dimension_value(self, dimension_key: str | None = None) -> str | None:
        """Get the tag used for dimension correlation.

        Args:
            dimension_key: Name of the tag in ``dimensions``; None selects
                the default ``dimension`` tag

        Returns:
            The tag value, or None if the touchpoint is not tagged
        """
        if dimension_key is None:
            return self.dimension
        return self.dimensions.get(dimension_key)


class Conversion(BaseAttributionModel):
    """Monetary outcome to be attributed across a journey."""

    value: float = Field(..., description="Conversion value")
    timestamp: datetime | None = Field(default=None, description="Conversion time")

    @field_validator("value", mode="before")
    @classmethod
    def clean_value(cls, v: Any) -> Any:
        """Parse currency strings; leave anything unparsable for validation."""
        cleaned = bounded_monetary_value(v)
        if cleaned is None and isinstance(v, int) and not isinstance(v, bool):
            raise ValueError("Conversion value is too large to represent")
        return v if cleaned is None else cleaned

    @field_validator("timestamp", mode="after")
    @classmethod
    def normalize_timestamp(cls, v: datetime | None) -> datetime | None:
        """Store timestamps as timezone-aware UTC."""
        return ensure_utc(v)


class Journey(BaseAttributionModel):
    """One customer's path to conversion.

    Touchpoints are kept in the order the caller supplied; the attributor
    sorts them chronologically before crediting anything.
    """

    customer_id: str = Field(
        ...,
        validation_alias=AliasChoices("customer_id", "customerId"),
        description="Customer identifier",
    )
    touchpoints: tuple[Touchpoint, ...] = Field(default=())
    conversion: Conversion

    @field_validator("customer_id", mode="before")
    @classmethod
    def stringify_customer_id(cls, v: Any) -> Any:
        """Accept numeric CRM identifiers."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def total_cost(self) -> float:
        """Sum of touchpoint costs."""
        return math.fsum(tp.cost for tp in self.touchpoints)
