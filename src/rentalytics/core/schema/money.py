# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Money in integer minor units.

Every monetary value in the library is an integer count of the currency's
smallest unit (cents for USD). Floating-point currency values never persist:
text amounts are parsed through ``Decimal`` straight into integers.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple

from ..primitives.model import Model
from ..primitives.types import CurrencyCode, MinorUnits

_AMOUNT_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")


class Money(Model):
    """
    A monetary amount with its currency.

    Attributes:
        currency: ISO 4217 currency code, e.g. "USD"
        amount_minor: Integer amount in minor units (cents)
    """

    currency: CurrencyCode
    amount_minor: MinorUnits

    @classmethod
    def zero(cls, currency: str) -> "Money":
        """Create a zero amount in the given currency."""
        return cls(currency=currency, amount_minor=0)

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        if other.currency != self.currency:
            raise ValueError(
                f"Cannot add {other.currency} to {self.currency}; amounts must share a currency"
            )
        return Money(currency=self.currency, amount_minor=self.amount_minor + other.amount_minor)

    def __neg__(self) -> "Money":
        return Money(currency=self.currency, amount_minor=-self.amount_minor)


def parse_minor_units(text: str) -> Tuple[int, bool]:
    """
    Parse a decimal amount string into minor units (cents).

    Handles negative values and thousands separators. Empty input and a lone
    "-" are treated as zero; anything else that is not a plain decimal number
    is reported as invalid rather than raised, since malformed amounts are a
    data-quality condition of the source file.

    Args:
        text: Amount as it appears in the source, e.g. "1,240.19" or "-35.5"

    Returns:
        Tuple of (amount_minor, invalid)

    Example:
        >>> parse_minor_units("1,240.19")
        (124019, False)
        >>> parse_minor_units("abc")
        (0, True)
    """
    trimmed = text.strip().replace(",", "")
    if trimmed in ("", "-"):
        return 0, False
    if not _AMOUNT_PATTERN.match(trimmed):
        return 0, True

    cents = (Decimal(trimmed) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents), False


def parse_money(text: str, currency: str) -> Tuple[Money, bool]:
    """Parse an amount string into ``Money``; see ``parse_minor_units``."""
    amount_minor, invalid = parse_minor_units(text)
    return Money(currency=currency, amount_minor=amount_minor), invalid
