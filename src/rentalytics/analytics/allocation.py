# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Monthly Allocation Engine

Splits stay-based performance transactions across calendar months in
proportion to the nights spent in each month, using a largest-remainder
correction so the allocated minor-unit amounts always reconcile exactly with
the transaction totals.

Allocation rules:
- Transactions without a listing, or of a cash flow kind, are out of
  allocation scope and skipped (not an error).
- A valid stay window (check-out after check-in, at least one night) is
  split by a calendar walk over its individual nights.
- Anything else lands 100% in the month of ``occurred_date``, with zero
  nights.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Dict, Iterable, List, Sequence

from ..core.primitives.calendar import to_year_month
from ..core.schema import CanonicalTransaction, MonthlyAllocationSlice

logger = logging.getLogger(__name__)


def nights_per_month(check_in: date, nights: int) -> Dict[str, int]:
    """
    Count the nights of a stay falling in each calendar month.

    Each night is the night starting on that date: night ``i`` is
    ``check_in + i days``. Walking individual nights (rather than dividing a
    duration) keeps month and leap-year boundaries exact.

    Args:
        check_in: First night of the stay
        nights: Number of nights

    Returns:
        Ordered mapping of ``YYYY-MM`` -> nights, chronological

    Example:
        >>> nights_per_month(date(2026, 1, 29), 19)
        {'2026-01': 3, '2026-02': 16}
    """
    result: Dict[str, int] = {}
    for offset in range(nights):
        month = to_year_month(check_in + timedelta(days=offset))
        result[month] = result.get(month, 0) + 1
    return result


def largest_remainder_distribute(total: int, ratios: Sequence[float]) -> List[int]:
    """
    Distribute an integer total across buckets, preserving the total exactly.

    Exact shares ``total * r / sum(ratios)`` are truncated toward zero; the
    leftover units then go one at a time to the buckets with the largest
    fractional remainder (ties resolved by original order). Negative totals
    mirror positive ones, so ``distribute(-t, r) == -distribute(t, r)``
    element-wise.

    Args:
        total: Integer amount in minor units
        ratios: Non-negative bucket weights; normalized by their sum

    Returns:
        One integer per ratio, summing exactly to ``total``

    Raises:
        ValueError: If ratios is empty, contains a negative value, or sums to zero

    Example:
        >>> largest_remainder_distribute(100, [1 / 3, 1 / 3, 1 / 3])
        [34, 33, 33]
        >>> largest_remainder_distribute(-100, [0.3, 0.7])
        [-30, -70]
    """
    if len(ratios) == 0:
        raise ValueError("Cannot distribute across an empty ratio set")
    if any(ratio < 0 for ratio in ratios):
        raise ValueError(f"Ratios must be non-negative, got {list(ratios)}")

    if len(ratios) == 1:
        return [total]

    weight = math.fsum(ratios)
    if weight <= 0:
        raise ValueError("Ratios must sum to a positive value")

    if total == 0:
        return [0] * len(ratios)
    if total < 0:
        return [-amount for amount in largest_remainder_distribute(-total, ratios)]

    exact = [total * ratio / weight for ratio in ratios]
    floored = [math.trunc(share) for share in exact]
    remainders = [share - base for share, base in zip(exact, floored)]

    # Stable sort keeps original order among equal remainders
    order = sorted(range(len(ratios)), key=lambda index: -remainders[index])

    remaining = total - sum(floored)
    step = 1 if remaining > 0 else -1
    position = 0
    while remaining != 0:
        floored[order[position % len(order)]] += step
        remaining -= step
        position += 1

    return floored


def allocate_transaction(transaction: CanonicalTransaction) -> List[MonthlyAllocationSlice]:
    """
    Allocate one performance transaction to months.

    The caller is responsible for scope filtering (listing present,
    performance kind); see ``allocate_performance_to_months``.
    """
    listing = transaction.listing
    if listing is None:
        raise ValueError(
            f"Transaction {transaction.transaction_id} has no listing and cannot be allocated"
        )

    if transaction.has_valid_stay:
        month_nights = nights_per_month(
            transaction.stay.check_in_date, transaction.stay.nights
        )
        total_nights = transaction.stay.nights
        months = list(month_nights)
        nights = [month_nights[month] for month in months]
        ratios = [count / total_nights for count in nights]
    else:
        months = [to_year_month(transaction.occurred_date)]
        nights = [0]
        ratios = [1.0]

    gross = largest_remainder_distribute(transaction.gross_amount.amount_minor, ratios)
    net = largest_remainder_distribute(transaction.net_amount.amount_minor, ratios)
    cleaning = largest_remainder_distribute(
        transaction.cleaning_fee_amount.amount_minor, ratios
    )
    service = largest_remainder_distribute(
        transaction.host_service_fee_amount.amount_minor, ratios
    )
    adjustment = largest_remainder_distribute(
        transaction.adjustment_amount.amount_minor, ratios
    )

    return [
        MonthlyAllocationSlice(
            transaction_id=transaction.transaction_id,
            kind=transaction.kind,
            account_id=listing.account_id,
            listing_id=listing.listing_id,
            month=month,
            currency=transaction.currency,
            nights=nights[index],
            allocation_ratio=ratios[index],
            allocated_gross_minor=gross[index],
            allocated_net_minor=net[index],
            allocated_cleaning_fee_minor=cleaning[index],
            allocated_service_fee_minor=service[index],
            allocated_adjustment_minor=adjustment[index],
        )
        for index, month in enumerate(months)
    ]


def allocate_performance_to_months(
    transactions: Iterable[CanonicalTransaction],
) -> List[MonthlyAllocationSlice]:
    """
    Allocate performance transactions to calendar months.

    - reservation, cancellation_fee, adjustment, resolution_adjustment:
      allocated by stay-night overlap when a valid stay exists, else to the
      month of occurred_date.
    - payout, resolution_payout: excluded (cash flow kinds).
    - rows without a listing: excluded.

    Args:
        transactions: Canonical transactions of any kind

    Returns:
        Flat list of slices, in transaction order then chronological month order
    """
    slices: List[MonthlyAllocationSlice] = []
    skipped = 0

    for transaction in transactions:
        if not transaction.kind.is_performance or transaction.listing is None:
            skipped += 1
            continue
        slices.extend(allocate_transaction(transaction))

    if skipped:
        logger.debug(f"Allocation skipped {skipped} out-of-scope transactions")
    logger.debug(f"Allocated transactions into {len(slices)} monthly slices")
    return slices
