# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from rentalytics.core.primitives import DatasetKind, TransactionKind
from rentalytics.core.schema import (
    CanonicalTransaction,
    Money,
    StayWindow,
    parse_minor_units,
    parse_money,
)


class TestParseMinorUnits:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1,240.19", (124019, False)),
            ("-35.5", (-3550, False)),
            ("0.005", (1, False)),
            ("", (0, False)),
            ("-", (0, False)),
            ("abc", (0, True)),
            ("12.3.4", (0, True)),
        ],
    )
    def test_parsing(self, text, expected):
        assert parse_minor_units(text) == expected

    def test_parse_money(self):
        money, invalid = parse_money("99.99", "EUR")
        assert money == Money(currency="EUR", amount_minor=9999)
        assert not invalid


class TestMoney:
    def test_addition_requires_same_currency(self):
        total = Money(currency="USD", amount_minor=100) + Money(currency="USD", amount_minor=5)
        assert total.amount_minor == 105
        with pytest.raises(ValueError):
            Money(currency="USD", amount_minor=1) + Money(currency="EUR", amount_minor=1)

    def test_negation_and_zero(self):
        assert (-Money(currency="USD", amount_minor=7)).amount_minor == -7
        assert Money.zero("USD").amount_minor == 0

    def test_float_amounts_rejected(self):
        with pytest.raises(ValidationError):
            Money(currency="USD", amount_minor=1.5)


class TestCanonicalTransaction:
    def _money(self, currency: str, amount: int = 0) -> Money:
        return Money(currency=currency, amount_minor=amount)

    def test_mixed_currency_components_rejected(self):
        with pytest.raises(ValidationError):
            CanonicalTransaction(
                transaction_id="tx-1",
                kind=TransactionKind.RESERVATION,
                dataset_kind=DatasetKind.REALIZED,
                occurred_date=date(2026, 1, 1),
                net_amount=self._money("USD", 100),
                gross_amount=self._money("EUR", 100),
                host_service_fee_amount=self._money("USD"),
                cleaning_fee_amount=self._money("USD"),
                adjustment_amount=self._money("USD"),
            )

    def test_stay_validity(self):
        valid = StayWindow(
            check_in_date=date(2026, 1, 29), check_out_date=date(2026, 2, 17), nights=19
        )
        empty = StayWindow(
            check_in_date=date(2026, 1, 29), check_out_date=date(2026, 1, 29), nights=0
        )
        assert valid.is_valid
        assert not empty.is_valid
