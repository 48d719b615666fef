# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Rounding helpers shared by every output that reports a rounded number.

Rates and ratios round half-up (``0.5`` moves toward positive infinity), the
same on every platform, instead of Python's round-half-even ``round()``.
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round a float to the nearest integer, halves toward positive infinity."""
    return int(math.floor(value + 0.5))


def round_ratio(value: float, places: int = 4) -> float:
    """Round a rate or ratio to ``places`` decimals, halves toward positive infinity."""
    scale = 10**places
    return math.floor(value * scale + 0.5) / scale


def divide_round_half_up(numerator: int, denominator: int) -> int:
    """
    Exact integer division rounded half-up.

    Integer-only so large minor-unit sums never pass through a float.

    Raises:
        ZeroDivisionError: If denominator is zero
    """
    if denominator == 0:
        raise ZeroDivisionError("division by zero")
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    return (2 * numerator + denominator) // (2 * denominator)
