"""Model comparator: runs every attribution model over the same journeys."""

import logging
import math
from typing import Any, Iterable, Mapping, Sequence

from attributeai.attribution.aggregation import ChannelAggregator, compute_roas
from attributeai.attribution.attributor import (
    JourneyAttributor,
    PreparedJourney,
    partition_journeys,
)
from attributeai.models.attribution import AttributionParams, ModelKind
from attributeai.models.journey import Journey
from attributeai.models.results import (
    ComparisonReport,
    JourneyError,
    ModelChannelBreakdown,
    ModelComparisonRow,
)

logger = logging.getLogger(__name__)

# Totals closer than this are treated as ties
TIE_PRECISION = 6


def resolve_models(models: Sequence[ModelKind | str] | None) -> list[ModelKind]:
    """Parse requested models, dropping duplicates and keeping declaration order."""
    if models is None:
        return list(ModelKind)
    requested = {ModelKind.parse(model) for model in models}
    return [kind for kind in ModelKind if kind in requested]


def rank_rows(rows: Iterable[ModelComparisonRow]) -> list[ModelComparisonRow]:
    """Sort rows by descending total attribution, ties by model declaration order."""
    return sorted(
        rows,
        key=lambda row: (-round(row.total_attribution, TIE_PRECISION), row.model.rank),
    )


class ModelComparator:
    """Compare attribution models over a fixed set of journeys.

    The comparator ranks models but never picks a "best" one: heuristic
    models conserve the same total, so the interesting differences live in
    the per-channel breakdown.
    """

    def __init__(self, params: AttributionParams | None = None):
        self.attributor = JourneyAttributor(params)
        self.channel_aggregator = ChannelAggregator()

    @property
    def params(self) -> AttributionParams:
        return self.attributor.params

    def compare(
        self,
        journeys: Iterable[Journey | Mapping[str, Any]],
        models: Sequence[ModelKind | str] | None = None,
    ) -> ComparisonReport:
        """Attribute every journey under each model and rank the totals.

        Args:
            journeys: Journeys to attribute
            models: Subset of models to compare (all models when omitted)

        Returns:
            Ranked rows, per-model channel breakdown and per-journey errors

        Raises:
            UnknownModelError: If a requested model is not supported
        """
        kinds = resolve_models(models)
        prepared, errors = partition_journeys(journeys, self.attributor)
        return self.compare_prepared(prepared, kinds, errors)

    def compare_prepared(
        self,
        prepared: Sequence[PreparedJourney],
        kinds: Sequence[ModelKind],
        errors: Sequence[JourneyError] = (),
    ) -> ComparisonReport:
        """Compare models over journeys that were already validated."""
        # Spend does not depend on the model
        total_cost = math.fsum(tp.cost for item in prepared for tp in item.touchpoints)

        rows = []
        breakdown = []
        for kind in kinds:
            attributed = [
                tp
                for item in prepared
                for tp in self.attributor.attribute_prepared(item, kind).touchpoints
            ]
            total_attribution = math.fsum(tp.attribution for tp in attributed)

            rows.append(
                ModelComparisonRow(
                    model=kind,
                    label=kind.label,
                    total_attribution=total_attribution,
                    total_cost=total_cost,
                    aggregate_roas=compute_roas(total_attribution, total_cost),
                )
            )
            breakdown.append(
                ModelChannelBreakdown(
                    model=kind,
                    by_channel=self.channel_aggregator.aggregate(attributed),
                )
            )

        logger.debug(
            f"Compared {len(kinds)} models over {len(prepared)} journeys "
            f"({len(errors)} skipped)"
        )

        return ComparisonReport(
            params=self.params,
            rows=tuple(rank_rows(rows)),
            channel_breakdown=tuple(breakdown),
            errors=tuple(errors),
        )
