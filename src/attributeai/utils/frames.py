"""pandas views of attribution results for analysts and notebooks.

Values are left unformatted: rounding and currency display belong to
whatever renders the frame.
"""

from typing import Iterable

import pandas as pd

from attributeai.models.attribution import AttributedTouchpoint
from attributeai.models.results import (
    AttributionReport,
    ChannelAggregate,
    ChannelDimensionCell,
    ComparisonReport,
    DimensionAggregate,
)

TOUCHPOINT_COLUMNS = [
    "customer_id",
    "position",
    "timestamp",
    "channel",
    "campaign",
    "cost",
    "dimension",
    "model",
    "conversion_value",
    "attribution",
    "attribution_percent",
]


def touchpoints_frame(touchpoints: Iterable[AttributedTouchpoint]) -> pd.DataFrame:
    """One row per attributed touchpoint."""
    rows = [
        {
            "customer_id": tp.customer_id,
            "position": tp.position,
            "timestamp": tp.timestamp,
            "channel": tp.channel,
            "campaign": tp.campaign,
            "cost": tp.cost,
            "dimension": tp.dimension,
            "model": tp.model.value,
            "conversion_value": tp.conversion_value,
            "attribution": tp.attribution,
            "attribution_percent": tp.attribution_percent,
        }
        for tp in touchpoints
    ]
    return pd.DataFrame(rows, columns=TOUCHPOINT_COLUMNS)


def _aggregate_frame(
    rows: Iterable[ChannelAggregate] | Iterable[DimensionAggregate], index: str
) -> pd.DataFrame:
    columns = [index, "total_attribution", "total_cost", "touchpoint_count", "roas"]
    records = [row.model_dump() for row in rows]
    df = pd.DataFrame(records, columns=columns)
    # "N/A" becomes a missing value so the column stays numeric
    df["roas"] = pd.to_numeric(df["roas"], errors="coerce")
    return df.set_index(index)


def channel_frame(rows: Iterable[ChannelAggregate]) -> pd.DataFrame:
    """Channel aggregates indexed by channel; ROAS is NaN where spend is zero."""
    return _aggregate_frame(rows, "channel")


def dimension_frame(rows: Iterable[DimensionAggregate]) -> pd.DataFrame:
    """Dimension aggregates indexed by dimension value."""
    return _aggregate_frame(rows, "dimension")


def cross_tab_frame(cells: Iterable[ChannelDimensionCell]) -> pd.DataFrame:
    """Channels as rows, dimension values as columns, attribution as values.

    Missing pairs are filled with 0.0.
    """
    df = pd.DataFrame(
        [cell.model_dump() for cell in cells],
        columns=["channel", "dimension", "total_attribution", "touchpoint_count"],
    )
    return df.pivot_table(
        index="channel",
        columns="dimension",
        values="total_attribution",
        aggfunc="sum",
        fill_value=0.0,
    )


def report_frames(report: AttributionReport) -> dict[str, pd.DataFrame]:
    """All frames of a single-model report, keyed by name."""
    return {
        "touchpoints": touchpoints_frame(report.attributed),
        "channels": channel_frame(report.by_channel),
        "dimensions": dimension_frame(report.by_dimension),
        "channel_dimension": cross_tab_frame(report.channel_dimension),
    }


def comparison_frame(report: ComparisonReport) -> pd.DataFrame:
    """Model rows in ranked order, indexed by model key."""
    df = pd.DataFrame(
        [
            {
                "model": row.model.value,
                "label": row.label,
                "total_attribution": row.total_attribution,
                "total_cost": row.total_cost,
                "aggregate_roas": row.aggregate_roas,
            }
            for row in report.rows
        ],
        columns=["model", "label", "total_attribution", "total_cost", "aggregate_roas"],
    )
    df["aggregate_roas"] = pd.to_numeric(df["aggregate_roas"], errors="coerce")
    return df.set_index("model")


def channel_comparison_frame(report: ComparisonReport) -> pd.DataFrame:
    """Channels as rows, models as columns, attributed value as values."""
    records = [
        {
            "channel": row.channel,
            "model": entry.model.value,
            "total_attribution": row.total_attribution,
        }
        for entry in report.channel_breakdown
        for row in entry.by_channel
    ]
    df = pd.DataFrame(records, columns=["channel", "model", "total_attribution"])
    return df.pivot_table(
        index="channel",
        columns="model",
        values="total_attribution",
        aggfunc="sum",
        fill_value=0.0,
    )
