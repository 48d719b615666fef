# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
End-to-end analytics pipeline.

Turns canonical transactions into every derived dataset: allocation,
listing and portfolio performance, cash flow, trailing comparisons,
occupancy and forecasts. The pipeline is synchronous and deterministic:
identical input yields identical output.

Three views are computed from the same transactions: ``all``, ``realized``
(paid) and ``forecast`` (upcoming). Forecasts are trained on realized
listing performance only.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import Field

from ..core.primitives.enums import DatasetKind
from ..core.primitives.model import Model
from ..core.primitives.settings import AnalyticsSettings
from ..core.primitives.types import CurrencyCode, NonNegativeInt
from ..core.schema import (
    CanonicalTransaction,
    EstimatedOccupancy,
    ListingServiceRange,
    MonthlyCashflow,
    MonthlyListingPerformance,
    MonthlyPortfolioPerformance,
    TrailingComparison,
)
from ..forecasting.forecast import compute_revenue_forecasts_by_currency
from ..forecasting.types import ForecastResult
from .allocation import allocate_performance_to_months
from .cashflow import compute_monthly_cashflow
from .occupancy import compute_estimated_occupancy, infer_listing_service_ranges
from .performance import (
    compute_monthly_listing_performance,
    compute_monthly_portfolio_performance,
)
from .trailing import compute_trailing_comparisons

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


class AnalyticsView(Model):
    """Every derived dataset for one subset of transactions."""

    listing_performance: Tuple[MonthlyListingPerformance, ...] = ()
    portfolio_performance: Tuple[MonthlyPortfolioPerformance, ...] = ()
    cashflow: Tuple[MonthlyCashflow, ...] = ()
    trailing: Tuple[TrailingComparison, ...] = ()
    service_ranges: Tuple[ListingServiceRange, ...] = ()
    occupancy: Tuple[EstimatedOccupancy, ...] = ()


class ListingSummary(Model):
    listing_id: str
    listing_name: str
    account_id: str
    transaction_count: NonNegativeInt


class AnalyticsResult(Model):
    """
    Complete analytics for an imported session.

    Attributes:
        views: Derived datasets keyed by view name (``all``, ``realized``,
            ``forecast``)
        service_ranges: Listing service ranges inferred from all transactions
        currency: Primary currency (most frequent; ties alphabetical)
        currencies: Every currency present, sorted
        account_ids: Every account with a listing transaction, sorted
        listings: Listings sorted by transaction count (desc) then name
        forecasts: Revenue forecast per currency, for currencies where at least
            one listing could be forecast
    """

    views: Dict[str, AnalyticsView]
    service_ranges: Tuple[ListingServiceRange, ...] = ()
    currency: CurrencyCode = DEFAULT_CURRENCY
    currencies: Tuple[CurrencyCode, ...] = ()
    account_ids: Tuple[str, ...] = ()
    listings: Tuple[ListingSummary, ...] = ()
    forecasts: Dict[str, ForecastResult] = Field(default_factory=dict)

    @property
    def all(self) -> AnalyticsView:
        return self.views["all"]

    @property
    def realized(self) -> AnalyticsView:
        return self.views[DatasetKind.REALIZED.value]

    @property
    def forecast(self) -> AnalyticsView:
        return self.views[DatasetKind.FORECAST.value]


def compute_view(
    transactions: Iterable[CanonicalTransaction],
    listing_names: Optional[Mapping[str, str]] = None,
    settings: Optional[AnalyticsSettings] = None,
) -> AnalyticsView:
    """Run every analytics stage over one subset of transactions."""
    settings = settings or AnalyticsSettings()
    transactions = list(transactions)
    if not transactions:
        return AnalyticsView()

    slices = allocate_performance_to_months(transactions)
    listing_performance = compute_monthly_listing_performance(slices, listing_names)
    service_ranges = infer_listing_service_ranges(transactions)

    return AnalyticsView(
        listing_performance=tuple(listing_performance),
        portfolio_performance=tuple(compute_monthly_portfolio_performance(listing_performance)),
        cashflow=tuple(compute_monthly_cashflow(transactions)),
        trailing=tuple(compute_trailing_comparisons(listing_performance, settings.trailing)),
        service_ranges=tuple(service_ranges),
        occupancy=tuple(
            compute_estimated_occupancy(listing_performance, service_ranges, settings.occupancy)
        ),
    )


def primary_currency(transactions: Iterable[CanonicalTransaction]) -> str:
    """Most frequent transaction currency; ties go to the alphabetically first."""
    counts = Counter(transaction.currency for transaction in transactions)
    if not counts:
        return DEFAULT_CURRENCY
    return min(counts, key=lambda currency: (-counts[currency], currency))


def summarize_listings(transactions: Iterable[CanonicalTransaction]) -> List[ListingSummary]:
    """One summary per listing, most transactions first, then by name."""
    first_seen: Dict[str, CanonicalTransaction] = {}
    counts: Counter = Counter()
    for transaction in transactions:
        if transaction.listing is None:
            continue
        listing_id = transaction.listing.listing_id
        first_seen.setdefault(listing_id, transaction)
        counts[listing_id] += 1

    summaries = [
        ListingSummary(
            listing_id=listing_id,
            listing_name=transaction.listing.listing_name,
            account_id=transaction.listing.account_id,
            transaction_count=counts[listing_id],
        )
        for listing_id, transaction in first_seen.items()
    ]
    summaries.sort(key=lambda item: (-item.transaction_count, item.listing_name, item.listing_id))
    return summaries


def compute_analytics(
    transactions: Iterable[CanonicalTransaction],
    settings: Optional[AnalyticsSettings] = None,
    compute_forecasts: bool = True,
) -> AnalyticsResult:
    """
    Compute every analytics view for a set of canonical transactions.

    Args:
        transactions: Canonical transactions from any number of accounts
        settings: Analytics settings (defaults reproduce the documented rules)
        compute_forecasts: Skip forecast training when False

    Returns:
        AnalyticsResult
    """
    settings = settings or AnalyticsSettings()
    transactions = list(transactions)

    # Last name seen wins, matching the importer's latest export.
    listing_names: Dict[str, str] = {}
    for transaction in transactions:
        if transaction.listing is not None:
            listing_names[transaction.listing.listing_id] = transaction.listing.listing_name

    realized = [tx for tx in transactions if tx.dataset_kind == DatasetKind.REALIZED]
    upcoming = [tx for tx in transactions if tx.dataset_kind == DatasetKind.FORECAST]

    views = {
        "all": compute_view(transactions, listing_names, settings),
        DatasetKind.REALIZED.value: compute_view(realized, listing_names, settings),
        DatasetKind.FORECAST.value: compute_view(upcoming, listing_names, settings),
    }

    forecasts: Dict[str, ForecastResult] = {}
    if compute_forecasts:
        by_currency = compute_revenue_forecasts_by_currency(
            views[DatasetKind.REALIZED.value].listing_performance, settings.forecast
        )
        forecasts = {
            currency: result for currency, result in by_currency.items() if result.listings
        }

    account_ids = sorted(
        {tx.listing.account_id for tx in transactions if tx.listing is not None}
    )
    result = AnalyticsResult(
        views=views,
        service_ranges=tuple(views["all"].service_ranges),
        currency=primary_currency(transactions),
        currencies=tuple(sorted({tx.currency for tx in transactions})),
        account_ids=tuple(account_ids),
        listings=tuple(summarize_listings(transactions)),
        forecasts=forecasts,
    )

    logger.info(
        f"Analytics computed: {len(transactions)} transactions "
        f"({len(realized)} realized, {len(upcoming)} upcoming), "
        f"{len(result.listings)} listings, {len(result.currencies)} currencies, "
        f"forecasts for {sorted(forecasts) or 'none'}"
    )
    return result
