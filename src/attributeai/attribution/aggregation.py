"""Channel and dimension aggregation of attributed touchpoints."""

import math
from typing import Callable, Iterable

from attributeai.models.attribution import AttributedTouchpoint
from attributeai.models.results import (
    ROAS_NOT_AVAILABLE,
    ChannelAggregate,
    ChannelDimensionCell,
    DimensionAggregate,
    Roas,
)

DEFAULT_UNSET_LABEL = "(not set)"


def compute_roas(total_attribution: float, total_cost: float) -> Roas:
    """Return on ad spend, or "N/A" when there is no spend to divide by."""
    if total_cost > 0:
        return total_attribution / total_cost
    return ROAS_NOT_AVAILABLE


def average_roas(values: Iterable[Roas]) -> Roas:
    """Mean of the numeric ROAS values, ignoring "N/A" entries."""
    numeric = [value for value in values if not isinstance(value, str)]
    if not numeric:
        return ROAS_NOT_AVAILABLE
    return math.fsum(numeric) / len(numeric)


class _Bucket:
    """Running totals for one aggregation key."""

    __slots__ = ("attribution", "cost", "count")

    def __init__(self) -> None:
        self.attribution: list[float] = []
        self.cost: list[float] = []
        self.count = 0

    def add(self, touchpoint: AttributedTouchpoint) -> None:
        self.attribution.append(touchpoint.attribution)
        self.cost.append(touchpoint.cost)
        self.count += 1

    @property
    def total_attribution(self) -> float:
        return math.fsum(self.attribution)

    @property
    def total_cost(self) -> float:
        return math.fsum(self.cost)


def _accumulate(
    touchpoints: Iterable[AttributedTouchpoint],
    key: Callable[[AttributedTouchpoint], str],
) -> list[tuple[str, _Bucket]]:
    """Group touchpoints into buckets and return them sorted by key."""
    buckets: dict[str, _Bucket] = {}
    for tp in touchpoints:
        buckets.setdefault(key(tp), _Bucket()).add(tp)
    return sorted(buckets.items(), key=lambda item: item[0])


class ChannelAggregator:
    """Group attributed touchpoints by channel."""

    def aggregate(
        self, touchpoints: Iterable[AttributedTouchpoint]
    ) -> tuple[ChannelAggregate, ...]:
        """Total attribution, cost, count and ROAS per channel.

        Args:
            touchpoints: Attributed touchpoints of all valid journeys under
                one model

        Returns:
            One row per distinct channel, sorted by channel name
        """
        return tuple(
            ChannelAggregate(
                channel=channel,
                total_attribution=bucket.total_attribution,
                total_cost=bucket.total_cost,
                touchpoint_count=bucket.count,
                roas=compute_roas(bucket.total_attribution, bucket.total_cost),
            )
            for channel, bucket in _accumulate(touchpoints, lambda tp: tp.channel)
        )


class DimensionCorrelator:
    """Group attributed touchpoints by a contextual tag such as weather."""

    def __init__(
        self,
        dimension_key: str | None = None,
        unset_label: str = DEFAULT_UNSET_LABEL,
    ):
        """Initialize the correlator.

        Args:
            dimension_key: Named tag to group by; None uses the touchpoint's
                default ``dimension`` tag
            unset_label: Bucket for touchpoints without a value
        """
        self.dimension_key = dimension_key
        self.unset_label = unset_label

    def dimension_of(self, touchpoint: AttributedTouchpoint) -> str:
        """The bucket a touchpoint falls into."""
        value = touchpoint.dimension_value(self.dimension_key)
        return value if value is not None else self.unset_label

    def correlate(
        self, touchpoints: Iterable[AttributedTouchpoint]
    ) -> tuple[DimensionAggregate, ...]:
        """Total attribution, cost, count and ROAS per dimension value."""
        return tuple(
            DimensionAggregate(
                dimension=dimension,
                total_attribution=bucket.total_attribution,
                total_cost=bucket.total_cost,
                touchpoint_count=bucket.count,
                roas=compute_roas(bucket.total_attribution, bucket.total_cost),
            )
            for dimension, bucket in _accumulate(touchpoints, self.dimension_of)
        )

    def cross_tab(
        self, touchpoints: Iterable[AttributedTouchpoint]
    ) -> tuple[ChannelDimensionCell, ...]:
        """Attributed value per (channel, dimension) pair.

        Summing the cells of one channel gives that channel's total, so the
        table shows how each channel's credit splits across the dimension.
        """
        buckets: dict[tuple[str, str], _Bucket] = {}
        for tp in touchpoints:
            buckets.setdefault((tp.channel, self.dimension_of(tp)), _Bucket()).add(tp)

        return tuple(
            ChannelDimensionCell(
                channel=channel,
                dimension=dimension,
                total_attribution=bucket.total_attribution,
                touchpoint_count=bucket.count,
            )
            for (channel, dimension), bucket in sorted(buckets.items())
        )
