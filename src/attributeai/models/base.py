"""Base model with common configuration."""

from datetime import datetime, timezone

from pydantic import BaseModel as PydanticBaseModel


def utc_now() -> datetime:
    """Get current UTC datetime (Python 3.12 compatible)."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so journeys can be compared safely.

    Raises:
        ValueError: If the UTC equivalent falls outside the datetime range
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError as e:
        # Raised as ValueError so pydantic reports it as a validation error
        raise ValueError(
            f"Timestamp {dt.isoformat()} is outside the supported range in UTC"
        ) from e


class BaseAttributionModel(PydanticBaseModel):
    """Base model for all AttributeAI models.

    Inputs and derived results are immutable: every engine call recomputes
    its results instead of mutating what it was given.
    """

    model_config = {
        "frozen": True,
        # Allow population by field name
        "populate_by_name": True,
        "extra": "ignore",
    }
