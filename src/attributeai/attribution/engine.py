"""Multi-touch attribution engine.

Entry point for callers: runs one model over a batch of journeys, or
compares every model over the same batch. Invalid journeys are reported
in the result instead of failing the call; unknown models and invalid
parameters abort the call before any journey is processed.
"""

import logging
import math
from typing import Any, Iterable, Mapping, Sequence

from attributeai.attribution.aggregation import (
    ChannelAggregator,
    DimensionCorrelator,
    average_roas,
    compute_roas,
)
from attributeai.attribution.attributor import (
    JourneyAttributor,
    PreparedJourney,
    partition_journeys,
)
from attributeai.attribution.comparison import ModelComparator, resolve_models
from attributeai.core.config import Settings, get_settings
from attributeai.core.exceptions import AttributionError
from attributeai.models.attribution import (
    AttributionParams,
    ConversionWindow,
    ModelKind,
)
from attributeai.models.journey import Journey
from attributeai.models.results import (
    AttributionReport,
    AttributionSummary,
    ComparisonReport,
    JourneyError,
)

logger = logging.getLogger(__name__)

# Marks an omitted dimension_key; None itself selects the default tag
CONFIGURED_DIMENSION: Any = object()


class AttributionEngine:
    """Apply attribution models to customer journeys."""

    def __init__(self, settings: Settings | None = None):
        """Initialize the engine.

        Args:
            settings: Application settings supplying default parameters
                (loaded from the environment when omitted)
        """
        self.settings = settings or get_settings()

    def _params(self, params: AttributionParams | None) -> AttributionParams:
        return params if params is not None else self.settings.attribution.to_params()

    def _prepare(
        self,
        journeys: Iterable[Journey | Mapping[str, Any]],
        attributor: JourneyAttributor,
        window: ConversionWindow | None,
    ) -> tuple[list[PreparedJourney], list[JourneyError]]:
        """Validate the batch and drop journeys converting outside the window."""
        prepared, errors = partition_journeys(journeys, attributor)
        if window is None:
            return prepared, errors

        in_window = [
            item
            for item in prepared
            if window.contains(item.journey.conversion.timestamp)
        ]
        if len(in_window) < len(prepared):
            logger.info(
                f"Excluded {len(prepared) - len(in_window)} journeys converting "
                f"outside {window.start.isoformat()} - {window.end.isoformat()}"
            )
        return in_window, errors

    def run(
        self,
        journeys: Iterable[Journey | Mapping[str, Any]],
        model: ModelKind | str,
        params: AttributionParams | None = None,
        dimension_key: str | None = CONFIGURED_DIMENSION,
        dimension_filter: str | None = None,
        window: ConversionWindow | None = None,
    ) -> AttributionReport:
        """Attribute a batch of journeys with one model and aggregate the credit.

        Args:
            journeys: Journeys (or raw journey mappings) to attribute
            model: Attribution model to apply
            params: Model parameters (configured defaults when omitted)
            dimension_key: Named tag to correlate by (configured default when
                omitted; None selects the touchpoint's default tag)
            dimension_filter: Only aggregate touchpoints with this tag value
            window: Only include journeys converting inside this window

        Returns:
            Attributed touchpoints, aggregates, summary and per-journey errors

        Raises:
            UnknownModelError: If the model is not supported
            InvalidParameterError: If the parameters are invalid
        """
        try:
            kind = ModelKind.parse(model)
            attributor = JourneyAttributor(self._params(params))
        except AttributionError as e:
            logger.error(f"Attribution run aborted: {e}")
            raise

        if dimension_key is CONFIGURED_DIMENSION:
            dimension_key = self.settings.attribution.default_dimension_key
        correlator = DimensionCorrelator(
            dimension_key, self.settings.attribution.unset_dimension_label
        )

        logger.info(f"Running {kind.value} attribution")
        prepared, errors = self._prepare(journeys, attributor, window)

        journey_results = tuple(
            attributor.attribute_prepared(item, kind) for item in prepared
        )
        attributed = tuple(
            tp for journey in journey_results for tp in journey.touchpoints
        )
        if dimension_filter is not None:
            attributed = tuple(
                tp for tp in attributed if correlator.dimension_of(tp) == dimension_filter
            )

        by_channel = ChannelAggregator().aggregate(attributed)
        by_dimension = correlator.correlate(attributed)

        total_attribution = math.fsum(row.total_attribution for row in by_channel)
        total_cost = math.fsum(row.total_cost for row in by_channel)
        summary = AttributionSummary(
            total_attribution=total_attribution,
            total_cost=total_cost,
            overall_roas=compute_roas(total_attribution, total_cost),
            average_channel_roas=average_roas(row.roas for row in by_channel),
            touchpoint_count=len(attributed),
            journey_count=len(journey_results),
            skipped_journey_count=len(errors),
            dimension_count=len(by_dimension),
        )

        logger.info(
            f"Attributed {summary.journey_count} journeys "
            f"({summary.touchpoint_count} touchpoints, "
            f"{summary.skipped_journey_count} skipped) with {kind.value}"
        )

        return AttributionReport(
            model=kind,
            params=attributor.params,
            dimension_key=dimension_key,
            dimension_filter=dimension_filter,
            attributed=attributed,
            journeys=journey_results,
            by_channel=by_channel,
            by_dimension=by_dimension,
            channel_dimension=correlator.cross_tab(attributed),
            summary=summary,
            errors=tuple(errors),
        )

    def compare(
        self,
        journeys: Iterable[Journey | Mapping[str, Any]],
        params: AttributionParams | None = None,
        models: Sequence[ModelKind | str] | None = None,
        window: ConversionWindow | None = None,
    ) -> ComparisonReport:
        """Run several attribution models over the same journeys.

        Args:
            journeys: Journeys (or raw journey mappings) to attribute
            params: Model parameters (configured defaults when omitted)
            models: Models to compare (all models when omitted)
            window: Only include journeys converting inside this window

        Returns:
            Model rows ranked by total attribution, per-model channel
            breakdown and per-journey errors

        Raises:
            UnknownModelError: If a requested model is not supported
            InvalidParameterError: If the parameters are invalid
        """
        try:
            kinds = resolve_models(models)
            comparator = ModelComparator(self._params(params))
        except AttributionError as e:
            logger.error(f"Model comparison aborted: {e}")
            raise

        logger.info(f"Comparing {len(kinds)} attribution models")
        prepared, errors = self._prepare(journeys, comparator.attributor, window)
        report = comparator.compare_prepared(prepared, kinds, errors)

        logger.info(
            f"Compared models over {len(prepared)} journeys "
            f"({len(errors)} skipped)"
        )
        return report
