# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
DataFrame views of analytics records.

Records stay the source of truth; these helpers only reshape them for
notebooks and exports. Amounts stay in integer minor units.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Union

import pandas as pd

from ..core.primitives.enums import TrailingMetric
from ..core.primitives.model import Model
from ..core.schema import MonthlyListingPerformance
from ..forecasting.types import ForecastResult

MONTH_COLUMNS = ("month", "target_month")


def records_to_frame(records: Iterable[Model]) -> pd.DataFrame:
    """
    Convert records into a DataFrame, one row per record.

    Fields are rendered as JSON-compatible values (enums as their values);
    month columns become monthly ``Period``s.
    """
    rows = [record.model_dump(mode="json") for record in records]
    df = pd.DataFrame(rows)
    for column in MONTH_COLUMNS:
        if column in df.columns:
            df[column] = pd.to_datetime(df[column], format="%Y-%m").dt.to_period("M")
    return df


def forecast_outcomes_frame(result: ForecastResult) -> pd.DataFrame:
    """One row per listing outcome, forecast and excluded alike."""
    df = records_to_frame(result.outcomes)
    if "reason_params" in df.columns:
        df = df.drop(columns=["reason_params"])
    return df


def revenue_pivot(
    listing_performance: Sequence[MonthlyListingPerformance],
    metric: Union[TrailingMetric, str] = TrailingMetric.GROSS_REVENUE,
    currency: Optional[str] = None,
    columns: str = "listing_id",
    include_totals_column: bool = True,
) -> pd.DataFrame:
    """
    Month x listing pivot of one revenue metric.

    Args:
        listing_performance: Monthly listing performance
        metric: Metric column to pivot (e.g. ``gross_revenue_minor``)
        currency: Currency to keep; required when the rows mix currencies
        columns: Column labels, ``listing_id`` or ``listing_name``
        include_totals_column: Append a ``Total`` column of row sums

    Returns:
        DataFrame indexed by monthly Period, one column per listing, months
        with no data for a listing filled with 0

    Raises:
        ValueError: If the rows mix currencies and no currency was given
    """
    metric_column = metric.value if isinstance(metric, TrailingMetric) else metric
    df = records_to_frame(listing_performance)
    if df.empty:
        return pd.DataFrame()

    if currency is None:
        currencies = sorted(df["currency"].unique())
        if len(currencies) > 1:
            raise ValueError(
                f"Rows mix currencies ({', '.join(currencies)}); pass currency="
            )
    else:
        df = df[df["currency"] == currency]

    pivot_df = df.pivot_table(
        index="month",
        columns=columns,
        values=metric_column,
        aggfunc="sum",
        fill_value=0,
    )
    pivot_df = pivot_df.sort_index()
    pivot_df = pivot_df.reindex(sorted(pivot_df.columns), axis=1)
    pivot_df.columns.name = None

    if include_totals_column:
        pivot_df["Total"] = pivot_df.sum(axis=1)
    return pivot_df
