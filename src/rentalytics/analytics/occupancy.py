# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Estimated Occupancy (Assumption-Based)

Formula:
    booked_nights / (days_in_month * listings_in_service)

The platform exports carry no availability calendar, so "listings in
service" is inferred from observed stays: a listing counts for every month
between its first check-in and its last occupied night. The result is a
heuristic, not verified availability, and every record says so.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.primitives.calendar import days_in_month
from ..core.primitives.numeric import round_ratio
from ..core.primitives.settings import OccupancySettings
from ..core.schema import (
    CanonicalTransaction,
    EstimatedOccupancy,
    ListingServiceRange,
    MonthlyListingPerformance,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _RangeAccumulator:
    first_start: date
    last_end: date


def infer_listing_service_ranges(
    transactions: Iterable[CanonicalTransaction],
) -> List[ListingServiceRange]:
    """
    Infer when each listing was in service from its observed stays.

    Scans transactions carrying both a listing and a valid stay window and
    tracks, per (listing_id, currency), the earliest check-in and the latest
    (exclusive) check-out.

    Returns:
        Service ranges sorted by listing id then currency
    """
    ranges: Dict[Tuple[str, str], _RangeAccumulator] = {}

    for transaction in transactions:
        if transaction.listing is None or not transaction.has_valid_stay:
            continue
        stay = transaction.stay
        key = (transaction.listing.listing_id, transaction.currency)
        existing = ranges.get(key)
        if existing is None:
            ranges[key] = _RangeAccumulator(stay.check_in_date, stay.check_out_date)
            continue
        if stay.check_in_date < existing.first_start:
            existing.first_start = stay.check_in_date
        if stay.check_out_date > existing.last_end:
            existing.last_end = stay.check_out_date

    return [
        ListingServiceRange(
            listing_id=listing_id,
            currency=currency,
            first_stay_start=span.first_start,
            last_stay_end=span.last_end,
        )
        for (listing_id, currency), span in sorted(ranges.items())
    ]


def compute_estimated_occupancy(
    listing_performance: Iterable[MonthlyListingPerformance],
    service_ranges: Iterable[ListingServiceRange],
    settings: Optional[OccupancySettings] = None,
) -> List[EstimatedOccupancy]:
    """
    Compute estimated occupancy per month and currency.

    Only (month, currency) pairs with recorded performance produce a record.
    The rate is None when no listing is in service that month.

    Args:
        listing_performance: Monthly listing performance
        service_ranges: Inferred listing service ranges
        settings: Occupancy settings (rate precision)

    Returns:
        Occupancy records sorted by month then currency
    """
    settings = settings or OccupancySettings()

    booked_by_month: Dict[Tuple[str, str], int] = {}
    for row in listing_performance:
        key = (row.month, row.currency)
        booked_by_month[key] = booked_by_month.get(key, 0) + row.booked_nights

    in_service: Dict[Tuple[str, str], int] = {}
    for service_range in service_ranges:
        for month in service_range.months_in_service():
            key = (month, service_range.currency)
            in_service[key] = in_service.get(key, 0) + 1

    results: List[EstimatedOccupancy] = []
    for (month, currency), booked_nights in sorted(booked_by_month.items()):
        days = days_in_month(month)
        listings_in_service = in_service.get((month, currency), 0)
        available_nights = days * listings_in_service

        rate = (
            round_ratio(booked_nights / available_nights, settings.rate_precision)
            if available_nights > 0
            else None
        )
        if rate is None and booked_nights > 0:
            logger.debug(
                f"{month} {currency}: {booked_nights} booked nights but no listing in service"
            )

        results.append(
            EstimatedOccupancy(
                month=month,
                currency=currency,
                booked_nights=booked_nights,
                days_in_month=days,
                listings_in_service=listings_in_service,
                estimated_occupancy_rate=rate,
            )
        )

    return results
