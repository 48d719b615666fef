# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
rentalytics Core Framework

Foundational building blocks for every analytics stage: primitives
(settings, enums, calendar arithmetic, rounding) and the canonical schema.
"""

from . import primitives, schema
from .primitives import (
    AnalyticsSettings,
    ConfidenceTier,
    DatasetKind,
    ExclusionReason,
    ForecastSettings,
    Model,
    OccupancySettings,
    RefreshSettings,
    TrailingMetric,
    TrailingSettings,
    TransactionKind,
)
from .schema import (
    CanonicalTransaction,
    EstimatedOccupancy,
    ListingRef,
    ListingServiceRange,
    Money,
    MonthlyAllocationSlice,
    MonthlyCashflow,
    MonthlyListingPerformance,
    MonthlyPortfolioPerformance,
    StayWindow,
    TrailingComparison,
    build_listing_ref,
    build_transaction_id,
)

__all__ = [
    "primitives",
    "schema",
    "AnalyticsSettings",
    "ConfidenceTier",
    "DatasetKind",
    "ExclusionReason",
    "ForecastSettings",
    "Model",
    "OccupancySettings",
    "RefreshSettings",
    "TrailingMetric",
    "TrailingSettings",
    "TransactionKind",
    "CanonicalTransaction",
    "EstimatedOccupancy",
    "ListingRef",
    "ListingServiceRange",
    "Money",
    "MonthlyAllocationSlice",
    "MonthlyCashflow",
    "MonthlyListingPerformance",
    "MonthlyPortfolioPerformance",
    "StayWindow",
    "TrailingComparison",
    "build_listing_ref",
    "build_transaction_id",
]
