# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Forecasting records.

Internal training structures are frozen dataclasses (they hold numpy arrays
and never leave the engine); everything returned to callers is a frozen
pydantic model that serializes to plain JSON.

Every listing in a forecast ends up in exactly one outcome: a
``ListingForecast`` or an ``ExcludedListing``, told apart by ``status``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Tuple, Union

import numpy as np
from pydantic import Field
from typing_extensions import Annotated

from ..core.primitives.enums import ConfidenceTier, ExclusionReason
from ..core.primitives.model import Model
from ..core.primitives.types import CurrencyCode, MinorUnits, NonNegativeInt, YearMonth

FEATURE_NAMES: Tuple[str, ...] = (
    "rev_lag1m",
    "rev_lag2m",
    "rev_roll3m",
    "rev_roll6m",
    "nights_lag1m",
    "rev_lag1m_norm",
    "rev_roll3m_norm",
    "month_sin",
    "month_cos",
    "trend",
    "listing_hist_mean",
    "listing_hist_std",
    "listing_months",
)
NUM_FEATURES = len(FEATURE_NAMES)


@dataclass(frozen=True, slots=True)
class FeatureRow:
    """
    One training sample.

    Attributes:
        features: 13 feature values (see ``FEATURE_NAMES``)
        target: Gross revenue (minor units) of the month after ``month``
        listing_id: Listing the row belongs to
        month: Anchor month of the row (``YYYY-MM``)
    """

    features: Tuple[float, ...]
    target: float
    listing_id: str
    month: str


@dataclass(frozen=True, slots=True)
class PredictionInput:
    """Feature vector for a listing's live forecast, plus the listing metadata."""

    features: Tuple[float, ...]
    listing_id: str
    listing_name: str
    account_id: str
    currency: str
    target_month: str
    training_months: int


@dataclass(frozen=True, slots=True)
class ScalerParams:
    """Standardization statistics (population std; zero std replaced by 1)."""

    feature_means: np.ndarray
    feature_stds: np.ndarray
    target_mean: float
    target_std: float


@dataclass(frozen=True, slots=True)
class TrainedModel:
    """
    Ridge regression fitted in standardized space.

    The intercept is zero in scaled space; un-standardizing the prediction
    restores the target mean.

    Attributes:
        beta: Coefficients, one per feature
        scaler: Statistics used to standardize features and target
        alpha: Chosen regularization strength
        mae: Mean absolute error in original units
        mae_cross_validated: True when ``mae`` comes from LOO-CV, False when it
            is the (biased) in-sample error
        training_rows: Number of samples the final fit used
    """

    beta: np.ndarray
    scaler: ScalerParams
    alpha: float
    mae: float
    mae_cross_validated: bool
    training_rows: int


class ListingForecast(Model):
    """Next-month gross revenue forecast for one listing."""

    status: Literal["forecast"] = "forecast"
    listing_id: str
    listing_name: str
    account_id: str
    currency: CurrencyCode
    target_month: YearMonth
    forecast_gross_revenue_minor: MinorUnits = Field(ge=0)
    mae_minor: MinorUnits = Field(ge=0)
    upper_band_minor: MinorUnits
    lower_band_minor: MinorUnits = Field(ge=0)
    confidence: ConfidenceTier
    training_months: NonNegativeInt


class ExcludedListing(Model):
    """
    A listing that could not be forecast.

    ``reason_code`` and ``reason_params`` carry everything needed for a
    localized explanation; ``reason`` is a plain-English fallback.
    """

    status: Literal["excluded"] = "excluded"
    listing_id: str
    listing_name: str
    account_id: str
    reason_code: ExclusionReason
    reason_params: Dict[str, int] = Field(default_factory=dict)
    reason: str
    months_available: NonNegativeInt


ListingOutcome = Annotated[
    Union[ListingForecast, ExcludedListing], Field(discriminator="status")
]


class PortfolioForecast(Model):
    """
    Sum of the listing forecasts sharing one target month.

    MAE is summed directly rather than in quadrature: a deliberately
    conservative band.
    """

    target_month: YearMonth
    currency: CurrencyCode
    forecast_gross_revenue_minor: MinorUnits
    total_mae_minor: MinorUnits
    upper_band_minor: MinorUnits
    lower_band_minor: MinorUnits
    listing_forecasts: Tuple[ListingForecast, ...]


class ForecastResult(Model):
    """
    Complete forecast for a single-currency dataset.

    Attributes:
        currency: Dataset currency (None for an empty dataset)
        portfolio: Portfolio rollup; None when no listing was forecast
        outcomes: One outcome per listing, sorted by listing id
        alpha: Regularization strength of the fitted model, if any
        mae_cross_validated: Whether the reported error is cross-validated
        training_rows: Pooled training rows across all listings
    """

    currency: Optional[CurrencyCode] = None
    portfolio: Optional[PortfolioForecast] = None
    outcomes: Tuple[ListingOutcome, ...] = ()
    alpha: Optional[float] = None
    mae_cross_validated: bool = False
    training_rows: NonNegativeInt = 0

    @property
    def listings(self) -> List[ListingForecast]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, ListingForecast)]

    @property
    def excluded(self) -> List[ExcludedListing]:
        return [outcome for outcome in self.outcomes if isinstance(outcome, ExcludedListing)]
