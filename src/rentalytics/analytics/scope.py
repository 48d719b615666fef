# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Analysis scopes: account, listing and month-range filters.

A scoped portfolio is always produced by filtering listing performance and
re-running the portfolio aggregator, so every scoped total is a true sum of
the listings in scope.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from pydantic import Field, field_validator, model_validator

from ..core.primitives.model import Model
from ..core.primitives.types import YearMonth
from ..core.schema import (
    MonthlyCashflow,
    MonthlyListingPerformance,
    MonthlyPortfolioPerformance,
)
from .performance import compute_monthly_portfolio_performance


class AnalysisScope(Model):
    """
    Filter applied to listing-level outputs before re-aggregation.

    Empty id tuples mean "no filter". Month bounds are inclusive.

    Attributes:
        account_ids: Accounts to keep
        listing_ids: Listings to keep
        start_month: First month to keep (``YYYY-MM``)
        end_month: Last month to keep (``YYYY-MM``)
    """

    account_ids: Tuple[str, ...] = Field(default=())
    listing_ids: Tuple[str, ...] = Field(default=())
    start_month: Optional[YearMonth] = None
    end_month: Optional[YearMonth] = None

    @field_validator("account_ids", "listing_ids")
    @classmethod
    def normalize_ids(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(sorted(set(value)))

    @model_validator(mode="after")
    def check_month_order(self) -> "AnalysisScope":
        if (
            self.start_month is not None
            and self.end_month is not None
            and self.end_month < self.start_month
        ):
            raise ValueError("end_month must not be before start_month")
        return self

    @property
    def has_id_filter(self) -> bool:
        return bool(self.account_ids or self.listing_ids)

    def includes_month(self, month: str) -> bool:
        if self.start_month is not None and month < self.start_month:
            return False
        if self.end_month is not None and month > self.end_month:
            return False
        return True

    def includes_listing(self, account_id: Optional[str], listing_id: Optional[str]) -> bool:
        """
        Whether a row's ids pass the id filters.

        Rows without ids (unattributed payouts) pass only when no id filter
        is active.
        """
        if self.account_ids and (account_id is None or account_id not in self.account_ids):
            return False
        if self.listing_ids and (listing_id is None or listing_id not in self.listing_ids):
            return False
        return True

    def filter_listing_performance(
        self, rows: Iterable[MonthlyListingPerformance]
    ) -> List[MonthlyListingPerformance]:
        return [
            row
            for row in rows
            if self.includes_listing(row.account_id, row.listing_id)
            and self.includes_month(row.month)
        ]

    def filter_cashflow(self, rows: Iterable[MonthlyCashflow]) -> List[MonthlyCashflow]:
        return [
            row
            for row in rows
            if self.includes_listing(row.account_id, row.listing_id)
            and self.includes_month(row.month)
        ]


def compute_scoped_portfolio_performance(
    listing_performance: Iterable[MonthlyListingPerformance],
    scope: AnalysisScope,
) -> List[MonthlyPortfolioPerformance]:
    """Filter listing performance to ``scope`` and aggregate the portfolio from it."""
    return compute_monthly_portfolio_performance(
        scope.filter_listing_performance(listing_performance)
    )
