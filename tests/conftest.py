# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for rentalytics testing.

Factories build canonical transactions and monthly listing performance
without spelling out every money component. They are exposed as fixtures
returning the factory function so tests can call them with overrides.
"""

from __future__ import annotations

import itertools
from datetime import date, timedelta
from typing import List, Optional, Sequence

import pytest

from rentalytics.core.primitives import (
    AnalyticsSettings,
    DatasetKind,
    TransactionKind,
    shift_month,
)
from rentalytics.core.schema import (
    CanonicalTransaction,
    ListingRef,
    Money,
    MonthlyListingPerformance,
    StayWindow,
    build_listing_ref,
)

_transaction_ids = itertools.count(1)


# Transaction Utilities
def build_transaction(
    kind: TransactionKind = TransactionKind.RESERVATION,
    listing_name: Optional[str] = "Beach House",
    account_id: str = "acct-1",
    check_in: Optional[date] = None,
    nights: Optional[int] = None,
    net: int = 0,
    gross: Optional[int] = None,
    cleaning: int = 0,
    service: int = 0,
    adjustment: int = 0,
    currency: str = "USD",
    dataset_kind: DatasetKind = DatasetKind.REALIZED,
    occurred: Optional[date] = None,
    transaction_id: Optional[str] = None,
) -> CanonicalTransaction:
    """
    Create a canonical transaction for testing.

    Args:
        kind: Transaction kind
        listing_name: Listing name; None for an unattributed row
        check_in: First night of the stay; no stay when None
        nights: Nights of the stay (check-out is derived from it)
        net: Net amount in minor units
        gross: Gross amount; defaults to ``net``

    Returns:
        CanonicalTransaction ready for testing
    """
    listing: Optional[ListingRef] = (
        build_listing_ref(account_id, listing_name) if listing_name is not None else None
    )
    stay = None
    if check_in is not None and nights is not None:
        stay = StayWindow(
            check_in_date=check_in,
            check_out_date=check_in + timedelta(days=nights),
            nights=nights,
        )

    def money(amount: int) -> Money:
        return Money(currency=currency, amount_minor=amount)

    return CanonicalTransaction(
        transaction_id=transaction_id or f"tx-{next(_transaction_ids):06d}",
        kind=kind,
        dataset_kind=dataset_kind,
        occurred_date=occurred or check_in or date(2026, 1, 15),
        listing=listing,
        stay=stay,
        net_amount=money(net),
        gross_amount=money(net if gross is None else gross),
        host_service_fee_amount=money(service),
        cleaning_fee_amount=money(cleaning),
        adjustment_amount=money(adjustment),
    )


# Performance Utilities
def build_performance(
    listing_id: str,
    month: str,
    gross: int,
    nights: int = 0,
    net: Optional[int] = None,
    account_id: str = "acct-1",
    currency: str = "USD",
    listing_name: Optional[str] = None,
) -> MonthlyListingPerformance:
    """Create one listing-month of performance; all net revenue counts as reservations."""
    net = gross if net is None else net
    return MonthlyListingPerformance(
        month=month,
        account_id=account_id,
        listing_id=listing_id,
        listing_name=listing_name or listing_id,
        currency=currency,
        booked_nights=nights,
        gross_revenue_minor=gross,
        net_revenue_minor=net,
        cleaning_fees_minor=0,
        service_fees_minor=0,
        reservation_revenue_minor=net,
        adjustment_revenue_minor=0,
        resolution_adjustment_revenue_minor=0,
        cancellation_fee_revenue_minor=0,
    )


def build_history(
    listing_id: str,
    start_month: str,
    revenues: Sequence[int],
    nights: Optional[Sequence[int]] = None,
    account_id: str = "acct-1",
    currency: str = "USD",
) -> List[MonthlyListingPerformance]:
    """Consecutive months of performance for one listing, starting at ``start_month``."""
    nights = nights or [10] * len(revenues)
    return [
        build_performance(
            listing_id,
            shift_month(start_month, offset),
            gross=revenue,
            nights=nights[offset],
            account_id=account_id,
            currency=currency,
        )
        for offset, revenue in enumerate(revenues)
    ]


def seasonal_revenues(months: int, base: int = 200_000, swing: int = 60_000) -> List[int]:
    """Deterministic revenue series with a yearly pattern and mild growth."""
    pattern = [0.6, 0.7, 0.9, 1.0, 1.1, 1.3, 1.5, 1.4, 1.1, 0.9, 0.7, 0.8]
    return [
        int(base * pattern[index % 12] + swing * index / 12)
        for index in range(months)
    ]


# Pytest Fixtures
@pytest.fixture
def make_transaction():
    return build_transaction


@pytest.fixture
def make_performance():
    return build_performance


@pytest.fixture
def make_history():
    return build_history


@pytest.fixture
def sample_settings():
    """Create default analytics settings for testing."""
    return AnalyticsSettings()


@pytest.fixture
def two_listing_history():
    """Two USD listings with 14 and 10 months of seasonal history ending 2025-12."""
    return build_history("listing-a", "2024-11", seasonal_revenues(14)) + build_history(
        "listing-b", "2025-03", seasonal_revenues(10, base=120_000)
    )
