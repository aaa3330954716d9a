"""Tests for the model comparator."""

import pytest

from attributeai.attribution.comparison import ModelComparator, rank_rows, resolve_models
from attributeai.core.exceptions import ErrorKind, UnknownModelError
from attributeai.models import Conversion, ModelKind
from attributeai.models.results import ModelComparisonRow


@pytest.fixture
def comparator():
    """Create comparator with default parameters."""
    return ModelComparator()


def make_row(model: ModelKind, total: float) -> ModelComparisonRow:
    return ModelComparisonRow(
        model=model,
        label=model.label,
        total_attribution=total,
        total_cost=10.0,
        aggregate_roas=total / 10.0,
    )


class TestRanking:
    """Test row ordering."""

    def test_descending_total(self):
        """Test rows are ordered by descending total attribution."""
        rows = rank_rows(
            [
                make_row(ModelKind.FIRST_TOUCH, 10.0),
                make_row(ModelKind.LINEAR, 30.0),
                make_row(ModelKind.TIME_DECAY, 20.0),
            ]
        )
        assert [row.model for row in rows] == [
            ModelKind.LINEAR,
            ModelKind.TIME_DECAY,
            ModelKind.FIRST_TOUCH,
        ]

    def test_ties_use_declaration_order(self):
        """Test near-equal totals are ordered by model declaration order."""
        rows = rank_rows(
            [
                make_row(ModelKind.POSITION_BASED, 100.0),
                make_row(ModelKind.LINEAR, 100.0 + 1e-9),
                make_row(ModelKind.FIRST_TOUCH, 100.0 - 1e-9),
            ]
        )
        assert [row.model for row in rows] == [
            ModelKind.FIRST_TOUCH,
            ModelKind.LINEAR,
            ModelKind.POSITION_BASED,
        ]


class TestResolveModels:
    """Test model subset selection."""

    def test_all_models_by_default(self):
        """Test omitting models selects every model."""
        assert resolve_models(None) == list(ModelKind)

    def test_subset_in_declaration_order(self):
        """Test subsets are deduplicated and kept in declaration order."""
        assert resolve_models(["linear", "first-click", ModelKind.LINEAR]) == [
            ModelKind.FIRST_TOUCH,
            ModelKind.LINEAR,
        ]

    def test_unknown_model(self):
        """Test an unknown model aborts."""
        with pytest.raises(UnknownModelError):
            resolve_models(["linear", "shapley"])


class TestModelComparator:
    """Test comparing models over a journey set."""

    def test_rows_for_every_model(self, comparator, two_touch_journey):
        """Test one row per model with conserved totals."""
        report = comparator.compare([two_touch_journey])

        assert [row.model for row in report.rows] == list(ModelKind)
        for row in report.rows:
            assert row.total_attribution == pytest.approx(100.0)
            assert row.total_cost == 15.0
            assert row.aggregate_roas == pytest.approx(100.0 / 15.0)
            assert row.label == row.model.label

    def test_channel_breakdown_shows_model_differences(self, comparator, two_touch_journey):
        """Test per-model channel aggregates."""
        report = comparator.compare([two_touch_journey])

        first = {row.channel: row.total_attribution for row in report.breakdown("first_touch")}
        last = {row.channel: row.total_attribution for row in report.breakdown("last_touch")}

        assert first == {"Email": 0.0, "Paid Search": 100.0}
        assert last == {"Email": 100.0, "Paid Search": 0.0}

    def test_dashboard_breakdown(self, comparator, dashboard_journeys):
        """Test channel credit moves between models on the dashboard journeys."""
        report = comparator.compare(dashboard_journeys)

        for row in report.rows:
            assert row.total_attribution == pytest.approx(3000.0)
        first = {row.channel: row.total_attribution for row in report.breakdown(ModelKind.FIRST_TOUCH)}
        last = {row.channel: row.total_attribution for row in report.breakdown(ModelKind.LAST_TOUCH)}
        assert first["Google Ads"] == 2050.0
        assert last["Direct"] == 1800.0
        assert last["Organic Search"] == 1200.0

    def test_deterministic(self, comparator, dashboard_journeys):
        """Test the same input gives the same report."""
        assert comparator.compare(dashboard_journeys) == comparator.compare(dashboard_journeys)

    def test_model_subset(self, comparator, two_touch_journey):
        """Test only the requested models are compared."""
        report = comparator.compare([two_touch_journey], models=["linear", "time-decay"])

        assert [row.model for row in report.rows] == [ModelKind.LINEAR, ModelKind.TIME_DECAY]
        assert report.row("first_touch") is None
        assert report.breakdown("first_touch") == ()

    def test_zero_cost_roas(self, comparator, journey_factory):
        """Test ROAS is "N/A" when the journeys cost nothing."""
        journey = journey_factory("C1", [2, 1], costs=[0.0, 0.0])

        report = comparator.compare([journey])

        assert all(row.aggregate_roas == "N/A" for row in report.rows)

    def test_invalid_journeys_are_reported(self, comparator, two_touch_journey):
        """Test invalid journeys are excluded and reported once."""
        bad = two_touch_journey.model_copy(
            update={"customer_id": "BAD", "conversion": Conversion(value=0)}
        )

        report = comparator.compare([two_touch_journey, bad])

        assert len(report.errors) == 1
        assert report.errors[0].customer_id == "BAD"
        assert report.errors[0].kind == ErrorKind.INVALID_CONVERSION
        assert report.row(ModelKind.LINEAR).total_attribution == pytest.approx(100.0)

    def test_empty_batch(self, comparator):
        """Test comparing no journeys gives zero totals."""
        report = comparator.compare([])

        for row in report.rows:
            assert row.total_attribution == 0.0
            assert row.aggregate_roas == "N/A"
