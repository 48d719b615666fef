# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Calendar-month helpers.

Months travel through the library as ``YYYY-MM`` strings (they sort
lexicographically in chronological order and serialize as-is). Arithmetic
on months goes through monthly ``pd.Period`` objects or
``dateutil.relativedelta`` so month lengths and leap years are never
approximated with fixed day counts.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import List, Union

import pandas as pd
from dateutil.relativedelta import relativedelta

DateLike = Union[date, str]


def to_year_month(value: DateLike) -> str:
    """Return the ``YYYY-MM`` month containing a date or ISO date string."""
    if isinstance(value, str):
        return value[:7]
    return f"{value.year:04d}-{value.month:02d}"


def to_period(month: str) -> pd.Period:
    """Convert a ``YYYY-MM`` month into a monthly ``pd.Period``."""
    return pd.Period(month, freq="M")


def period_to_month(period: pd.Period) -> str:
    return f"{period.year:04d}-{period.month:02d}"


def month_start(month: str) -> date:
    year, month_number = (int(part) for part in month.split("-"))
    return date(year, month_number, 1)


def shift_month(month: str, months: int) -> str:
    """Move a ``YYYY-MM`` month forward (positive) or backward (negative)."""
    return to_year_month(month_start(month) + relativedelta(months=months))


def next_month(month: str) -> str:
    return shift_month(month, 1)


def previous_month(month: str) -> str:
    return shift_month(month, -1)


def months_between(start: str, end: str) -> int:
    """Number of calendar months from ``start`` to ``end`` (negative if end is earlier)."""
    start_date = month_start(start)
    end_date = month_start(end)
    return (end_date.year - start_date.year) * 12 + (end_date.month - start_date.month)


def days_in_month(month: str) -> int:
    return int(to_period(month).days_in_month)


def calendar_month_number(month: str) -> int:
    """Calendar month (1-12) of a ``YYYY-MM`` month."""
    return int(month[5:7])


def month_range(start: DateLike, end: DateLike) -> List[str]:
    """
    All months from the month of ``start`` to the month of ``end``, inclusive.

    Returns an empty list when ``end`` falls in an earlier month than ``start``.
    """
    start_month = to_year_month(start)
    end_month = to_year_month(end)
    if end_month < start_month:
        return []
    periods = pd.period_range(start=start_month, end=end_month, freq="M")
    return [period_to_month(period) for period in periods]


def trailing_months(month: str, window: int) -> List[str]:
    """The ``window`` contiguous months immediately preceding ``month``, oldest first."""
    return [shift_month(month, -offset) for offset in range(window, 0, -1)]


def day_before(value: date) -> date:
    return value - timedelta(days=1)
