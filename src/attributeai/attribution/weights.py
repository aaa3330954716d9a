"""Attribution model library.

One pure function per ``ModelKind`` splits a conversion value across a
chronologically sorted list of touchpoints. Every function returns the
monetary credit per touchpoint; ``compute_credit`` adds the percentages.
"""

import math
from datetime import datetime
from typing import Callable, NamedTuple, Sequence

from attributeai.core.exceptions import (
    EmptyJourneyError,
    InvalidConversionError,
    UnknownModelError,
)
from attributeai.models.attribution import AttributionParams, ModelKind
from attributeai.models.base import ensure_utc
from attributeai.models.journey import Touchpoint

SECONDS_PER_DAY = 86_400

CreditFunction = Callable[
    [Sequence[Touchpoint], float, datetime, AttributionParams], list[float]
]


class CreditSplit(NamedTuple):
    """Credit assigned to each touchpoint, in touchpoint order."""

    credit: tuple[float, ...]
    percent: tuple[float, ...]


def first_touch_credit(
    touchpoints: Sequence[Touchpoint],
    conversion_value: float,
    conversion_timestamp: datetime,
    params: AttributionParams,
) -> list[float]:
    """Give 100% credit to the first touch."""
    return [conversion_value if i == 0 else 0.0 for i in range(len(touchpoints))]


def last_touch_credit(
    touchpoints: Sequence[Touchpoint],
    conversion_value: float,
    conversion_timestamp: datetime,
    params: AttributionParams,
) -> list[float]:
    """Give 100% credit to the last touch."""
    last = len(touchpoints) - 1
    return [conversion_value if i == last else 0.0 for i in range(len(touchpoints))]


def linear_credit(
    touchpoints: Sequence[Touchpoint],
    conversion_value: float,
    conversion_timestamp: datetime,
    params: AttributionParams,
) -> list[float]:
    """Give every touch an equal share."""
    share = conversion_value / len(touchpoints)
    return [share] * len(touchpoints)


def time_decay_credit(
    touchpoints: Sequence[Touchpoint],
    conversion_value: float,
    conversion_timestamp: datetime,
    params: AttributionParams,
) -> list[float]:
    """Weight touches by exponential decay towards the conversion.

    weight_i = 0.5 ** (days_before_conversion_i / half_life), normalized so
    the weights sum to 1. Touches recorded after the conversion count as
    zero days before it.
    """
    half_life = params.half_life_days
    days_before = [
        max(0.0, (conversion_timestamp - tp.timestamp).total_seconds() / SECONDS_PER_DAY)
        for tp in touchpoints
    ]

    # Exponents are shifted by the most recent touch so the largest weight is
    # exactly 1 and very old journeys cannot underflow to an all-zero total.
    nearest = min(days_before)
    weights = [math.pow(0.5, (days - nearest) / half_life) for days in days_before]
    total_weight = math.fsum(weights)

    return [conversion_value * weight / total_weight for weight in weights]


def position_based_credit(
    touchpoints: Sequence[Touchpoint],
    conversion_value: float,
    conversion_timestamp: datetime,
    params: AttributionParams,
) -> list[float]:
    """Position-based (U-shaped) attribution, 40/20/40 by default.

    A single touch gets everything. Two touches split the value in the
    ratio of the first and last weights (50/50 by default). Otherwise the
    first and last touches get their weights and the remainder is divided
    equally between the middle touches.
    """
    count = len(touchpoints)
    first_weight = params.position_first_weight
    last_weight = params.position_last_weight

    if count == 1:
        return [conversion_value]

    if count == 2:
        combined = first_weight + last_weight
        return [
            conversion_value * (first_weight / combined),
            conversion_value * (last_weight / combined),
        ]

    first_credit = conversion_value * first_weight
    last_credit = conversion_value * last_weight
    middle_credit = (conversion_value - first_credit - last_credit) / (count - 2)

    return [first_credit] + [middle_credit] * (count - 2) + [last_credit]


_CREDIT_FUNCTIONS: dict[ModelKind, CreditFunction] = {
    ModelKind.FIRST_TOUCH: first_touch_credit,
    ModelKind.LAST_TOUCH: last_touch_credit,
    ModelKind.LINEAR: linear_credit,
    ModelKind.TIME_DECAY: time_decay_credit,
    ModelKind.POSITION_BASED: position_based_credit,
}


def credit_function_for(model: ModelKind | str) -> CreditFunction:
    """Look up the credit function for a model.

    Raises:
        UnknownModelError: If the model is not supported
    """
    kind = ModelKind.parse(model)
    try:
        return _CREDIT_FUNCTIONS[kind]
    except KeyError:
        raise UnknownModelError(model) from None


def compute_credit(
    model: ModelKind | str,
    touchpoints: Sequence[Touchpoint],
    conversion_value: float,
    conversion_timestamp: datetime,
    params: AttributionParams | None = None,
) -> CreditSplit:
    """Split a conversion value across touchpoints.

    Args:
        model: Attribution model to apply
        touchpoints: Touchpoints in chronological order
        conversion_value: Value to distribute
        conversion_timestamp: When the conversion happened (naive means UTC)
        params: Model parameters (defaults when omitted)

    Returns:
        Credit and percentage of the conversion value per touchpoint

    Raises:
        EmptyJourneyError: If there are no touchpoints
        InvalidConversionError: If the conversion value is not positive or
            the conversion timestamp is missing
        UnknownModelError: If the model is not supported
        InvalidParameterError: If the parameters are invalid
    """
    credit_fn = credit_function_for(model)
    params = (params or AttributionParams()).ensure_valid()

    if not touchpoints:
        raise EmptyJourneyError("Journey has no touchpoints to attribute")

    if not math.isfinite(conversion_value) or conversion_value <= 0:
        raise InvalidConversionError(
            f"Conversion value must be positive, got {conversion_value}"
        )

    if conversion_timestamp is None:
        raise InvalidConversionError("Conversion timestamp is missing")
    conversion_timestamp = ensure_utc(conversion_timestamp)

    credit = credit_fn(touchpoints, conversion_value, conversion_timestamp, params)
    percent = [amount / conversion_value * 100 for amount in credit]

    return CreditSplit(tuple(credit), tuple(percent))
