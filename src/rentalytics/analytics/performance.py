# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Monthly performance aggregation from allocation slices.

Grouping uses structured tuple keys, never delimiter-joined strings, so ids
containing any character cannot collide.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..core.primitives.enums import TransactionKind
from ..core.schema import (
    MonthlyAllocationSlice,
    MonthlyListingPerformance,
    MonthlyPortfolioPerformance,
)

logger = logging.getLogger(__name__)

ListingKey = Tuple[str, str, str, str]  # (month, account_id, listing_id, currency)
PortfolioKey = Tuple[str, str]  # (month, currency)


@dataclass(slots=True)
class _ListingAccumulator:
    """Mutable running totals for one listing-month; frozen into a record at the end."""

    booked_nights: int = 0
    gross: int = 0
    net: int = 0
    cleaning: int = 0
    service: int = 0
    reservation: int = 0
    adjustment: int = 0
    resolution_adjustment: int = 0
    cancellation_fee: int = 0

    def add(self, item: MonthlyAllocationSlice) -> None:
        # Only reservations add room-nights; adjustments, resolutions and
        # cancellation fees can reference the same stay.
        if item.kind == TransactionKind.RESERVATION:
            self.booked_nights += item.nights
        self.gross += item.allocated_gross_minor
        self.net += item.allocated_net_minor
        self.cleaning += item.allocated_cleaning_fee_minor
        self.service += item.allocated_service_fee_minor

        if item.kind == TransactionKind.RESERVATION:
            self.reservation += item.allocated_net_minor
        elif item.kind == TransactionKind.ADJUSTMENT:
            self.adjustment += item.allocated_net_minor
        elif item.kind == TransactionKind.RESOLUTION_ADJUSTMENT:
            self.resolution_adjustment += item.allocated_net_minor
        elif item.kind == TransactionKind.CANCELLATION_FEE:
            self.cancellation_fee += item.allocated_net_minor
        else:
            raise ValueError(f"Slice {item.transaction_id} has non-performance kind {item.kind}")


@dataclass(slots=True)
class _PortfolioAccumulator:
    booked_nights: int = 0
    gross: int = 0
    net: int = 0
    cleaning: int = 0
    service: int = 0


def compute_monthly_listing_performance(
    slices: Iterable[MonthlyAllocationSlice],
    listing_names: Optional[Mapping[str, str]] = None,
) -> List[MonthlyListingPerformance]:
    """
    Compute monthly performance per listing from allocation slices.

    Groups slices by (month, account_id, listing_id, currency) and sums the
    allocated amounts. Net revenue is also broken down by transaction kind.

    Args:
        slices: Allocation slices (see ``allocate_performance_to_months``)
        listing_names: Optional listing_id -> display name; defaults to the id

    Returns:
        Listing performance sorted by month, listing id, then currency
    """
    groups: Dict[ListingKey, _ListingAccumulator] = {}

    for item in slices:
        key = (item.month, item.account_id, item.listing_id, item.currency)
        accumulator = groups.get(key)
        if accumulator is None:
            accumulator = groups[key] = _ListingAccumulator()
        accumulator.add(item)

    names = listing_names or {}
    # month, listing_id, currency, account_id
    ordered = sorted(
        groups.items(), key=lambda entry: (entry[0][0], entry[0][2], entry[0][3], entry[0][1])
    )
    return [
        MonthlyListingPerformance(
            month=month,
            account_id=account_id,
            listing_id=listing_id,
            listing_name=names.get(listing_id, listing_id),
            currency=currency,
            booked_nights=totals.booked_nights,
            gross_revenue_minor=totals.gross,
            net_revenue_minor=totals.net,
            cleaning_fees_minor=totals.cleaning,
            service_fees_minor=totals.service,
            reservation_revenue_minor=totals.reservation,
            adjustment_revenue_minor=totals.adjustment,
            resolution_adjustment_revenue_minor=totals.resolution_adjustment,
            cancellation_fee_revenue_minor=totals.cancellation_fee,
        )
        for (month, account_id, listing_id, currency), totals in ordered
    ]


def compute_monthly_portfolio_performance(
    listing_performance: Iterable[MonthlyListingPerformance],
) -> List[MonthlyPortfolioPerformance]:
    """
    Roll listing performance up to the portfolio, per (month, currency).

    Filtered portfolios (by account or listing) must be produced by filtering
    the listing performance first and calling this again, never by filtering
    an already-aggregated portfolio.
    """
    groups: Dict[PortfolioKey, _PortfolioAccumulator] = {}

    for row in listing_performance:
        key = (row.month, row.currency)
        accumulator = groups.get(key)
        if accumulator is None:
            accumulator = groups[key] = _PortfolioAccumulator()
        accumulator.booked_nights += row.booked_nights
        accumulator.gross += row.gross_revenue_minor
        accumulator.net += row.net_revenue_minor
        accumulator.cleaning += row.cleaning_fees_minor
        accumulator.service += row.service_fees_minor

    return [
        MonthlyPortfolioPerformance(
            month=month,
            currency=currency,
            booked_nights=totals.booked_nights,
            gross_revenue_minor=totals.gross,
            net_revenue_minor=totals.net,
            cleaning_fees_minor=totals.cleaning,
            service_fees_minor=totals.service,
        )
        for (month, currency), totals in sorted(groups.items())
    ]
