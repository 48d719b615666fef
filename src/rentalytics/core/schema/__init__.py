# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Canonical schema: money, listing identity and the records that flow between
analytics stages.
"""

from .identity import (
    IDENTITY_HASH_VERSION,
    build_listing_id,
    build_listing_ref,
    build_transaction_id,
    normalize_listing_name,
    slugify,
    stable_hash,
)
from .money import Money, parse_minor_units, parse_money
from .records import (
    OCCUPANCY_DISCLAIMER,
    OCCUPANCY_LABEL,
    CanonicalTransaction,
    EstimatedOccupancy,
    ListingRef,
    ListingServiceRange,
    MonthlyAllocationSlice,
    MonthlyCashflow,
    MonthlyListingPerformance,
    MonthlyPortfolioPerformance,
    StayWindow,
    TrailingComparison,
)

__all__ = [
    "IDENTITY_HASH_VERSION",
    "build_listing_id",
    "build_listing_ref",
    "build_transaction_id",
    "normalize_listing_name",
    "slugify",
    "stable_hash",
    "Money",
    "parse_minor_units",
    "parse_money",
    "OCCUPANCY_DISCLAIMER",
    "OCCUPANCY_LABEL",
    "CanonicalTransaction",
    "EstimatedOccupancy",
    "ListingRef",
    "ListingServiceRange",
    "MonthlyAllocationSlice",
    "MonthlyCashflow",
    "MonthlyListingPerformance",
    "MonthlyPortfolioPerformance",
    "StayWindow",
    "TrailingComparison",
]
