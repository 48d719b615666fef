# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import date

from rentalytics.analytics.cashflow import compute_monthly_cashflow
from rentalytics.core.primitives import TransactionKind


class TestMonthlyCashflow:
    def test_only_payout_kinds_counted(self, make_transaction):
        transactions = [
            make_transaction(check_in=date(2026, 1, 3), nights=2, net=9999),
            make_transaction(kind=TransactionKind.PAYOUT, net=5000, occurred=date(2026, 1, 5)),
            make_transaction(
                kind=TransactionKind.RESOLUTION_PAYOUT, net=700, occurred=date(2026, 1, 9)
            ),
        ]

        rows = compute_monthly_cashflow(transactions)

        assert len(rows) == 1
        assert rows[0].month == "2026-01"
        assert rows[0].payouts_minor == 5700

    def test_unattributed_payouts_group_with_none_ids(self, make_transaction):
        transactions = [
            make_transaction(
                kind=TransactionKind.PAYOUT,
                listing_name=None,
                net=1000,
                occurred=date(2026, 2, 1),
            ),
            make_transaction(
                kind=TransactionKind.PAYOUT,
                listing_name=None,
                net=2000,
                occurred=date(2026, 2, 20),
            ),
            make_transaction(kind=TransactionKind.PAYOUT, net=300, occurred=date(2026, 2, 3)),
        ]

        rows = compute_monthly_cashflow(transactions)

        assert len(rows) == 2
        assert rows[0].listing_id is None
        assert rows[0].account_id is None
        assert rows[0].payouts_minor == 3000
        assert rows[1].listing_id is not None
        assert rows[1].payouts_minor == 300

    def test_month_comes_from_occurred_date(self, make_transaction):
        transactions = [
            make_transaction(kind=TransactionKind.PAYOUT, net=1, occurred=date(2026, 3, 31)),
            make_transaction(kind=TransactionKind.PAYOUT, net=2, occurred=date(2026, 4, 1)),
        ]
        rows = compute_monthly_cashflow(transactions)
        assert [(row.month, row.payouts_minor) for row in rows] == [
            ("2026-03", 1),
            ("2026-04", 2),
        ]
