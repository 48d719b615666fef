# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Revenue forecasting: leakage-free features, a pooled ridge-regression
model, per-listing and portfolio forecasts, and background refresh.
"""

from .features import FeatureBuildResult, build_feature_rows, group_by_listing
from .forecast import (
    build_portfolio,
    compute_revenue_forecast,
    compute_revenue_forecasts_by_currency,
    select_portfolio_group,
)
from .linalg import solve_ridge
from .model import confidence_tier, predict, train_ridge_model
from .refresh import (
    ForecastRefresher,
    ForecastSnapshot,
    RefreshFailure,
    TrainingMeta,
    TrainingScope,
    compute_forecast_snapshot,
)
from .types import (
    FEATURE_NAMES,
    NUM_FEATURES,
    ExcludedListing,
    FeatureRow,
    ForecastResult,
    ListingForecast,
    ListingOutcome,
    PortfolioForecast,
    PredictionInput,
    TrainedModel,
)

__all__ = [
    "FeatureBuildResult",
    "build_feature_rows",
    "group_by_listing",
    "build_portfolio",
    "compute_revenue_forecast",
    "compute_revenue_forecasts_by_currency",
    "select_portfolio_group",
    "solve_ridge",
    "confidence_tier",
    "predict",
    "train_ridge_model",
    "ForecastRefresher",
    "ForecastSnapshot",
    "RefreshFailure",
    "TrainingMeta",
    "TrainingScope",
    "compute_forecast_snapshot",
    "FEATURE_NAMES",
    "NUM_FEATURES",
    "ExcludedListing",
    "FeatureRow",
    "ForecastResult",
    "ListingForecast",
    "ListingOutcome",
    "PortfolioForecast",
    "PredictionInput",
    "TrainedModel",
]
