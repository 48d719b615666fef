# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import pandas as pd
import pytest

from rentalytics.core.primitives import TrailingMetric
from rentalytics.forecasting.forecast import compute_revenue_forecast
from rentalytics.reporting import forecast_outcomes_frame, records_to_frame, revenue_pivot


class TestRecordsToFrame:
    def test_months_become_periods(self, make_history):
        df = records_to_frame(make_history("a", "2025-11", [100, 200, 300]))

        assert len(df) == 3
        assert df["month"].iloc[0] == pd.Period("2025-11", freq="M")
        assert df["gross_revenue_minor"].tolist() == [100, 200, 300]

    def test_empty(self):
        assert records_to_frame([]).empty


class TestRevenuePivot:
    def test_month_by_listing_with_total(self, make_performance):
        rows = [
            make_performance("a", "2026-01", gross=100, net=90),
            make_performance("b", "2026-01", gross=50, net=40),
            make_performance("a", "2026-02", gross=70, net=60),
        ]

        pivot = revenue_pivot(rows)

        assert list(pivot.columns) == ["a", "b", "Total"]
        assert list(pivot.index) == [
            pd.Period("2026-01", freq="M"),
            pd.Period("2026-02", freq="M"),
        ]
        assert pivot.loc[pd.Period("2026-01", freq="M"), "Total"] == 150
        assert pivot.loc[pd.Period("2026-02", freq="M"), "b"] == 0

        net = revenue_pivot(rows, TrailingMetric.NET_REVENUE, include_totals_column=False)
        assert list(net.columns) == ["a", "b"]
        assert net.loc[pd.Period("2026-01", freq="M"), "a"] == 90

    def test_mixed_currencies_require_a_choice(self, make_performance):
        rows = [
            make_performance("a", "2026-01", gross=100),
            make_performance("b", "2026-01", gross=50, currency="EUR"),
        ]
        with pytest.raises(ValueError):
            revenue_pivot(rows)
        assert list(revenue_pivot(rows, currency="EUR").columns) == ["b", "Total"]


class TestForecastFrame:
    def test_one_row_per_outcome(self, two_listing_history, make_history):
        result = compute_revenue_forecast(
            two_listing_history + make_history("listing-c", "2025-12", [10])
        )

        df = forecast_outcomes_frame(result)

        assert df["listing_id"].tolist() == ["listing-a", "listing-b", "listing-c"]
        assert df["status"].tolist() == ["forecast", "forecast", "excluded"]
        assert df["target_month"].iloc[0] == pd.Period("2026-01", freq="M")
