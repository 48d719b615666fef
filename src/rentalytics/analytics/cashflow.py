# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Monthly cash flow aggregation from payout-like transactions.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from ..core.primitives.calendar import to_year_month
from ..core.schema import CanonicalTransaction, MonthlyCashflow

CashflowKey = Tuple[str, str, Optional[str], Optional[str]]


def _sort_key(key: CashflowKey) -> Tuple[str, str, str, str, bool, bool]:
    month, currency, account_id, listing_id = key
    # Unattributed rows (None ids) sort first
    return (
        month,
        currency,
        account_id or "",
        listing_id or "",
        account_id is not None,
        listing_id is not None,
    )


def compute_monthly_cashflow(
    transactions: Iterable[CanonicalTransaction],
) -> List[MonthlyCashflow]:
    """
    Compute monthly payouts from payout and resolution_payout transactions.

    Groups by (month, currency, account_id, listing_id), taking the month from
    ``occurred_date``. Payouts without a listing aggregate with None ids.

    Returns:
        Cash flow rows sorted by month, currency, account id, listing id
    """
    groups: Dict[CashflowKey, int] = {}

    for transaction in transactions:
        if not transaction.kind.is_cashflow:
            continue
        listing = transaction.listing
        key = (
            to_year_month(transaction.occurred_date),
            transaction.currency,
            listing.account_id if listing else None,
            listing.listing_id if listing else None,
        )
        groups[key] = groups.get(key, 0) + transaction.net_amount.amount_minor

    return [
        MonthlyCashflow(
            month=month,
            currency=currency,
            account_id=account_id,
            listing_id=listing_id,
            payouts_minor=total,
        )
        for (month, currency, account_id, listing_id), total in sorted(
            groups.items(), key=lambda entry: _sort_key(entry[0])
        )
    ]
