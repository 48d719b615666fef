# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Next-month gross revenue forecast for a portfolio of listings.

Orchestrates feature building, model training, per-listing predictions and
the portfolio rollup. Business-data shortfalls (too little history, too few
training rows) never raise: they produce ``ExcludedListing`` outcomes with a
stable reason code.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.primitives.enums import ExclusionReason
from ..core.primitives.numeric import round_half_up
from ..core.primitives.settings import ForecastSettings
from ..core.schema import MonthlyListingPerformance
from .features import build_feature_rows
from .model import confidence_tier, predict, train_ridge_model
from .types import (
    ExcludedListing,
    ForecastResult,
    ListingForecast,
    PortfolioForecast,
    PredictionInput,
)

logger = logging.getLogger(__name__)


def select_portfolio_group(
    forecasts: Sequence[ListingForecast],
) -> Optional[List[ListingForecast]]:
    """
    Pick the listing forecasts that make up the portfolio.

    Listings whose histories end in different months target different
    months. The largest target-month group wins; equal sizes go to the latest
    target month.
    """
    groups: Dict[str, List[ListingForecast]] = {}
    for forecast in forecasts:
        groups.setdefault(forecast.target_month, []).append(forecast)
    if not groups:
        return None
    target_month = max(groups, key=lambda month: (len(groups[month]), month))
    return groups[target_month]


def build_portfolio(
    forecasts: Sequence[ListingForecast], currency: str
) -> Optional[PortfolioForecast]:
    """Sum the selected listing forecasts; None when nothing was forecast."""
    group = select_portfolio_group(forecasts)
    if not group:
        return None

    total = sum(item.forecast_gross_revenue_minor for item in group)
    total_mae = sum(item.mae_minor for item in group)
    return PortfolioForecast(
        target_month=group[0].target_month,
        currency=currency,
        forecast_gross_revenue_minor=total,
        total_mae_minor=total_mae,
        upper_band_minor=total + total_mae,
        lower_band_minor=max(0, total - total_mae),
        listing_forecasts=tuple(group),
    )


def _insufficient_training_exclusion(
    prediction: PredictionInput, training_rows: int, min_training_rows: int
) -> ExcludedListing:
    return ExcludedListing(
        listing_id=prediction.listing_id,
        listing_name=prediction.listing_name,
        account_id=prediction.account_id,
        reason_code=ExclusionReason.INSUFFICIENT_TRAINING_DATA,
        reason_params={
            "training_rows": training_rows,
            "min_training_rows": min_training_rows,
        },
        reason=(
            f"Only {training_rows} training row(s) across all listings "
            f"(need at least {min_training_rows})"
        ),
        months_available=prediction.training_months,
    )


def compute_revenue_forecast(
    listing_performance: Iterable[MonthlyListingPerformance],
    settings: Optional[ForecastSettings] = None,
) -> ForecastResult:
    """
    Forecast next-month gross revenue for every listing of one currency.

    Args:
        listing_performance: Monthly listing performance, single currency
        settings: Forecast settings

    Returns:
        ForecastResult with one outcome per listing, sorted by listing id

    Raises:
        ValueError: If the input mixes currencies
    """
    settings = settings or ForecastSettings()
    rows = list(listing_performance)

    currencies = sorted({row.currency for row in rows})
    if len(currencies) > 1:
        raise ValueError(
            f"Revenue forecast requires a single currency, got {', '.join(currencies)}"
        )
    currency = currencies[0] if currencies else None

    built = build_feature_rows(rows, settings)
    training_count = len(built.training_rows)

    listing_forecasts: List[ListingForecast] = []
    excluded: List[ExcludedListing] = list(built.excluded)
    alpha: Optional[float] = None
    mae_cross_validated = False

    if built.prediction_inputs and training_count < settings.min_training_rows:
        logger.debug(
            f"{currency}: {training_count} training rows, below minimum "
            f"{settings.min_training_rows}; excluding {len(built.prediction_inputs)} listings"
        )
        excluded.extend(
            _insufficient_training_exclusion(
                prediction, training_count, settings.min_training_rows
            )
            for prediction in built.prediction_inputs
        )
    elif built.prediction_inputs:
        model = train_ridge_model(built.training_rows, settings)
        alpha = model.alpha
        mae_cross_validated = model.mae_cross_validated
        mae_minor = round_half_up(model.mae)

        for prediction in built.prediction_inputs:
            forecast_minor = round_half_up(predict(model, prediction.features))
            listing_forecasts.append(
                ListingForecast(
                    listing_id=prediction.listing_id,
                    listing_name=prediction.listing_name,
                    account_id=prediction.account_id,
                    currency=prediction.currency,
                    target_month=prediction.target_month,
                    forecast_gross_revenue_minor=forecast_minor,
                    mae_minor=mae_minor,
                    upper_band_minor=forecast_minor + mae_minor,
                    lower_band_minor=max(0, forecast_minor - mae_minor),
                    confidence=confidence_tier(prediction.training_months, settings),
                    training_months=prediction.training_months,
                )
            )

    outcomes = sorted([*listing_forecasts, *excluded], key=lambda item: item.listing_id)
    portfolio = build_portfolio(listing_forecasts, currency) if currency else None

    logger.debug(
        f"{currency}: {len(listing_forecasts)} listing forecasts, {len(excluded)} excluded"
    )
    return ForecastResult(
        currency=currency,
        portfolio=portfolio,
        outcomes=tuple(outcomes),
        alpha=alpha,
        mae_cross_validated=mae_cross_validated,
        training_rows=training_count,
    )


def compute_revenue_forecasts_by_currency(
    listing_performance: Iterable[MonthlyListingPerformance],
    settings: Optional[ForecastSettings] = None,
) -> Dict[str, ForecastResult]:
    """Partition listing performance by currency and forecast each partition."""
    partitions: Dict[str, List[MonthlyListingPerformance]] = {}
    for row in listing_performance:
        partitions.setdefault(row.currency, []).append(row)
    return {
        currency: compute_revenue_forecast(partitions[currency], settings)
        for currency in sorted(partitions)
    }
