# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum
from typing import FrozenSet


class DatasetKind(str, Enum):
    """
    Whether a transaction comes from a finalized or an upcoming export.

    Attributes:
        REALIZED: Paid-out (finalized) activity.
        FORECAST: Upcoming (not yet paid) activity.
    """

    REALIZED = "realized"
    FORECAST = "forecast"


class TransactionKind(str, Enum):
    """
    All transaction kinds a canonical transaction can carry.

    Kinds partition into two disjoint families:
    - Performance kinds affect revenue and occupancy (allocated to months)
    - Cash flow kinds affect payouts only (never allocated)

    Use `is_performance` / `is_cashflow` rather than comparing against
    literal sets so the partition stays defined in one place.
    """

    RESERVATION = "reservation"
    ADJUSTMENT = "adjustment"
    RESOLUTION_ADJUSTMENT = "resolution_adjustment"
    CANCELLATION_FEE = "cancellation_fee"
    PAYOUT = "payout"
    RESOLUTION_PAYOUT = "resolution_payout"

    @property
    def is_performance(self) -> bool:
        return self in PERFORMANCE_KINDS

    @property
    def is_cashflow(self) -> bool:
        return self in CASHFLOW_KINDS


PERFORMANCE_KINDS: FrozenSet[TransactionKind] = frozenset(
    {
        TransactionKind.RESERVATION,
        TransactionKind.ADJUSTMENT,
        TransactionKind.RESOLUTION_ADJUSTMENT,
        TransactionKind.CANCELLATION_FEE,
    }
)

CASHFLOW_KINDS: FrozenSet[TransactionKind] = frozenset(
    {
        TransactionKind.PAYOUT,
        TransactionKind.RESOLUTION_PAYOUT,
    }
)


class TrailingMetric(str, Enum):
    """Monthly listing metrics compared against their trailing average."""

    GROSS_REVENUE = "gross_revenue_minor"
    NET_REVENUE = "net_revenue_minor"


class ConfidenceTier(str, Enum):
    """
    Coarse forecast label reflecting training-data volume.

    Not a statistical interval; it is metadata for presentation only.
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ExclusionReason(str, Enum):
    """Machine-readable reason codes for listings left out of a forecast."""

    INSUFFICIENT_LISTING_HISTORY = "insufficient_listing_history"
    INSUFFICIENT_TRAINING_DATA = "insufficient_training_data"


class RefreshStatus(str, Enum):
    """Lifecycle of the latest forecast refresh request for a dataset."""

    IDLE = "idle"
    RECOMPUTING = "recomputing"
    UP_TO_DATE = "up_to_date"
    FAILED = "failed"


class FallbackPolicy(str, Enum):
    """What a forecast refresh does when the requested scope is too small."""

    DROP_DATE_RANGE = "drop_date_range"
    NONE = "none"


class FallbackReason(str, Enum):
    """Why a forecast snapshot differs from what was requested."""

    TRAINED_ON_FULL_HISTORY = (
        "insufficient_data_in_date_range__trained_on_full_history"
    )
    INSUFFICIENT_TRAINING_DATA = "insufficient_training_data"
    INSUFFICIENT_PER_LISTING_HISTORY = "insufficient_per_listing_history"
