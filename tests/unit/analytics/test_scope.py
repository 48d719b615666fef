# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rentalytics.analytics.performance import compute_monthly_portfolio_performance
from rentalytics.analytics.scope import AnalysisScope, compute_scoped_portfolio_performance
from rentalytics.core.schema import MonthlyCashflow


@pytest.fixture
def listing_rows(make_performance):
    return [
        make_performance("a", "2026-01", gross=100, account_id="acct-1"),
        make_performance("b", "2026-01", gross=200, account_id="acct-1"),
        make_performance("c", "2026-01", gross=400, account_id="acct-2"),
        make_performance("a", "2026-02", gross=800, account_id="acct-1"),
    ]


class TestAnalysisScope:
    def test_ids_are_normalized(self):
        scope = AnalysisScope(listing_ids=("b", "a", "b"))
        assert scope.listing_ids == ("a", "b")

    def test_month_bounds_validated(self):
        with pytest.raises(ValidationError):
            AnalysisScope(start_month="2026-03", end_month="2026-01")

    def test_empty_scope_keeps_everything(self, listing_rows):
        scope = AnalysisScope()
        assert scope.filter_listing_performance(listing_rows) == listing_rows
        assert not scope.has_id_filter

    def test_scoped_portfolio_is_true_sum(self, listing_rows):
        scope = AnalysisScope(account_ids=("acct-1",), end_month="2026-01")

        portfolio = compute_scoped_portfolio_performance(listing_rows, scope)

        assert len(portfolio) == 1
        assert portfolio[0].gross_revenue_minor == 300
        assert portfolio == compute_monthly_portfolio_performance(
            [row for row in listing_rows if row.account_id == "acct-1" and row.month == "2026-01"]
        )

    def test_unattributed_cashflow_dropped_under_id_filter(self):
        rows = [
            MonthlyCashflow(month="2026-01", currency="USD", payouts_minor=10),
            MonthlyCashflow(
                month="2026-01",
                currency="USD",
                account_id="acct-1",
                listing_id="a",
                payouts_minor=20,
            ),
        ]

        assert len(AnalysisScope().filter_cashflow(rows)) == 2
        filtered = AnalysisScope(listing_ids=("a",)).filter_cashflow(rows)
        assert [row.payouts_minor for row in filtered] == [20]
