"""Journey attributor: validates one journey and applies a model to it."""

import logging
import math
from typing import Any, Iterable, Mapping, NamedTuple

from pydantic import ValidationError

from attributeai.attribution.weights import compute_credit
from attributeai.core.exceptions import (
    EmptyJourneyError,
    InvalidConversionError,
    InvalidTimestampError,
    JourneyValidationError,
    MalformedJourneyError,
)
from attributeai.models.attribution import (
    AttributedTouchpoint,
    AttributionParams,
    JourneyAttribution,
    ModelKind,
)
from attributeai.models.journey import Journey, Touchpoint
from attributeai.models.results import JourneyError

logger = logging.getLogger(__name__)


class PreparedJourney(NamedTuple):
    """A validated journey with its touchpoints in chronological order."""

    journey: Journey
    touchpoints: tuple[Touchpoint, ...]


def coerce_journey(raw: Journey | Mapping[str, Any]) -> Journey:
    """Build a Journey from a raw mapping such as decoded JSON.

    Schema failures are translated into the journey error taxonomy so a
    single bad record can be reported without failing the batch.

    Args:
        raw: A Journey instance or a mapping with the same fields

    Returns:
        The validated Journey

    Raises:
        JourneyValidationError: If the record cannot be parsed
    """
    if isinstance(raw, Journey):
        return raw

    customer_id = _raw_customer_id(raw)

    if not isinstance(raw, Mapping):
        raise MalformedJourneyError(
            f"Expected a journey mapping, got {type(raw).__name__}", customer_id
        )

    try:
        return Journey.model_validate(raw)
    except ValidationError as e:
        raise _classify_validation_error(e, customer_id) from e
    except OverflowError as e:
        # Numeric conversions pydantic does not wrap in a ValidationError
        raise MalformedJourneyError(f"Value out of range: {e}", customer_id) from e


def _raw_customer_id(raw: Any) -> str | None:
    """Best-effort customer id from an unvalidated record."""
    if not isinstance(raw, Mapping):
        return None
    for key in ("customer_id", "customerId"):
        if raw.get(key) is not None:
            return str(raw[key])
    return None


def _classify_validation_error(
    error: ValidationError, customer_id: str | None
) -> JourneyValidationError:
    """Map a pydantic validation error to the most specific journey error."""
    details = error.errors()
    locations = [tuple(str(part) for part in detail["loc"]) for detail in details]
    message = "; ".join(
        f"{'.'.join(loc) or 'journey'}: {detail['msg']}"
        for loc, detail in zip(locations, details)
    )

    if any(loc and loc[0] == "conversion" for loc in locations):
        return InvalidConversionError(message, customer_id)
    if any("timestamp" in loc for loc in locations):
        return InvalidTimestampError(message, customer_id)
    if any(
        loc == ("touchpoints",) and detail.get("input") is None
        for loc, detail in zip(locations, details)
    ):
        return EmptyJourneyError(message, customer_id)
    return MalformedJourneyError(message, customer_id)


class JourneyAttributor:
    """Validate journeys and attribute their conversion value with one model."""

    def __init__(self, params: AttributionParams | None = None):
        """Initialize the attributor.

        Args:
            params: Model parameters shared by every journey in a run
        """
        self.params = (params or AttributionParams()).ensure_valid()

    def validate(self, journey: Journey) -> tuple[Touchpoint, ...]:
        """Check a journey can be attributed and sort its touchpoints.

        Args:
            journey: Journey to check

        Returns:
            Touchpoints in chronological order (stable for equal timestamps)

        Raises:
            EmptyJourneyError: If the journey has no touchpoints
            InvalidConversionError: If the conversion value is not positive or
                its timestamp is missing
            InvalidTimestampError: If a touchpoint happens after the conversion
        """
        customer_id = journey.customer_id
        conversion = journey.conversion

        if not journey.touchpoints:
            raise EmptyJourneyError("Journey has no touchpoints", customer_id)

        if not math.isfinite(conversion.value) or conversion.value <= 0:
            raise InvalidConversionError(
                f"Conversion value must be positive, got {conversion.value}",
                customer_id,
            )

        if conversion.timestamp is None:
            raise InvalidConversionError("Conversion timestamp is missing", customer_id)

        for tp in journey.touchpoints:
            if tp.timestamp > conversion.timestamp:
                raise InvalidTimestampError(
                    f"Touchpoint on {tp.channel!r} at {tp.timestamp.isoformat()} is "
                    f"after the conversion at {conversion.timestamp.isoformat()}",
                    customer_id,
                )

        return tuple(sorted(journey.touchpoints, key=lambda tp: tp.timestamp))

    def prepare(self, journey: Journey | Mapping[str, Any]) -> PreparedJourney:
        """Coerce and validate a journey in one step."""
        parsed = coerce_journey(journey)
        return PreparedJourney(parsed, self.validate(parsed))

    def attribute(
        self, journey: Journey | Mapping[str, Any], model: ModelKind | str
    ) -> JourneyAttribution:
        """Attribute one journey's conversion value across its touchpoints.

        Args:
            journey: Journey to attribute
            model: Attribution model to apply

        Returns:
            Attributed touchpoints tagged with the customer and conversion value

        Raises:
            JourneyValidationError: If the journey is invalid
            UnknownModelError: If the model is not supported
        """
        return self.attribute_prepared(self.prepare(journey), ModelKind.parse(model))

    def attribute_prepared(
        self, prepared: PreparedJourney, model: ModelKind
    ) -> JourneyAttribution:
        """Apply a model to an already validated journey."""
        journey, touchpoints = prepared
        conversion = journey.conversion

        split = compute_credit(
            model, touchpoints, conversion.value, conversion.timestamp, self.params
        )

        attributed = tuple(
            AttributedTouchpoint(
                **tp.model_dump(),
                customer_id=journey.customer_id,
                conversion_value=conversion.value,
                model=model,
                position=position,
                attribution=credit,
                attribution_percent=percent,
            )
            for position, (tp, credit, percent) in enumerate(
                zip(touchpoints, split.credit, split.percent)
            )
        )

        return JourneyAttribution(
            customer_id=journey.customer_id,
            model=model,
            conversion_value=conversion.value,
            touchpoints=attributed,
        )


def partition_journeys(
    journeys: Iterable[Journey | Mapping[str, Any]], attributor: JourneyAttributor
) -> tuple[list[PreparedJourney], list[JourneyError]]:
    """Split a batch into attributable journeys and error records.

    Invalid journeys are logged and reported, never raised, so one bad
    record cannot sink the rest of the batch.
    """
    prepared: list[PreparedJourney] = []
    errors: list[JourneyError] = []

    for index, journey in enumerate(journeys):
        try:
            prepared.append(attributor.prepare(journey))
        except JourneyValidationError as e:
            error = JourneyError.from_exception(e)
            logger.warning(
                f"Skipping journey #{index} (customer {error.customer_id}): "
                f"{error.kind.value} - {error.detail}"
            )
            errors.append(error)

    return prepared, errors
