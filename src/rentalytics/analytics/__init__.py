# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Analytics stages: allocation, performance, cash flow, occupancy, trailing
comparisons, scopes and the end-to-end pipeline.
"""

from .allocation import (
    allocate_performance_to_months,
    allocate_transaction,
    largest_remainder_distribute,
    nights_per_month,
)
from .cashflow import compute_monthly_cashflow
from .occupancy import compute_estimated_occupancy, infer_listing_service_ranges
from .performance import (
    compute_monthly_listing_performance,
    compute_monthly_portfolio_performance,
)
from .pipeline import (
    AnalyticsResult,
    AnalyticsView,
    ListingSummary,
    compute_analytics,
    compute_view,
    primary_currency,
    summarize_listings,
)
from .scope import AnalysisScope, compute_scoped_portfolio_performance
from .trailing import compute_trailing_comparisons, trailing_label

__all__ = [
    "allocate_performance_to_months",
    "allocate_transaction",
    "largest_remainder_distribute",
    "nights_per_month",
    "compute_monthly_cashflow",
    "compute_estimated_occupancy",
    "infer_listing_service_ranges",
    "compute_monthly_listing_performance",
    "compute_monthly_portfolio_performance",
    "AnalyticsResult",
    "AnalyticsView",
    "ListingSummary",
    "compute_analytics",
    "compute_view",
    "primary_currency",
    "summarize_listings",
    "AnalysisScope",
    "compute_scoped_portfolio_performance",
    "compute_trailing_comparisons",
    "trailing_label",
]
