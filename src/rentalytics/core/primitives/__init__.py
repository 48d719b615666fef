# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
rentalytics Core Primitives

Essential building blocks shared by every analytics stage: the immutable
model base, enums, constrained types, calendar-month arithmetic, rounding
and settings.
"""

from .calendar import (
    calendar_month_number,
    day_before,
    days_in_month,
    month_range,
    month_start,
    months_between,
    next_month,
    previous_month,
    shift_month,
    to_period,
    to_year_month,
    trailing_months,
)
from .enums import (
    CASHFLOW_KINDS,
    PERFORMANCE_KINDS,
    ConfidenceTier,
    DatasetKind,
    ExclusionReason,
    FallbackPolicy,
    FallbackReason,
    RefreshStatus,
    TrailingMetric,
    TransactionKind,
)
from .model import Model
from .numeric import divide_round_half_up, round_half_up, round_ratio
from .settings import (
    AnalyticsSettings,
    ForecastSettings,
    OccupancySettings,
    RefreshSettings,
    TrailingSettings,
)
from .types import (
    CurrencyCode,
    FloatBetween0And1,
    MinorUnits,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    YearMonth,
)

__all__ = [
    # Calendar
    "calendar_month_number",
    "day_before",
    "days_in_month",
    "month_range",
    "month_start",
    "months_between",
    "next_month",
    "previous_month",
    "shift_month",
    "to_period",
    "to_year_month",
    "trailing_months",
    # Enums
    "CASHFLOW_KINDS",
    "PERFORMANCE_KINDS",
    "ConfidenceTier",
    "DatasetKind",
    "ExclusionReason",
    "FallbackPolicy",
    "FallbackReason",
    "RefreshStatus",
    "TrailingMetric",
    "TransactionKind",
    # Model
    "Model",
    # Rounding
    "divide_round_half_up",
    "round_half_up",
    "round_ratio",
    # Settings
    "AnalyticsSettings",
    "ForecastSettings",
    "OccupancySettings",
    "RefreshSettings",
    "TrailingSettings",
    # Types
    "CurrencyCode",
    "FloatBetween0And1",
    "MinorUnits",
    "NonNegativeInt",
    "PositiveFloat",
    "PositiveInt",
    "YearMonth",
]
