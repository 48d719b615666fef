# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import Field, field_validator, model_validator

from .enums import FallbackPolicy
from .model import Model
from .types import NonNegativeInt, PositiveFloat, PositiveInt


class OccupancySettings(Model):
    """Settings for the assumption-based occupancy estimate."""

    rate_precision: NonNegativeInt = Field(
        default=4, description="Decimal places kept on the estimated occupancy rate."
    )


class TrailingSettings(Model):
    """
    Adaptive trailing-window selection.

    The window is chosen from the number of strictly-earlier months with data
    (M). With the defaults:
        M < 3        -> no comparison
        3 <= M <= 5  -> 3-month window
        6 <= M <= 11 -> 6-month window
        M >= 12      -> 12-month window

    Each window size doubles as the minimum history needed to select it.
    """

    window_sizes: Tuple[PositiveInt, ...] = Field(
        default=(3, 6, 12),
        description="Candidate window sizes, ascending. The smallest is also the minimum history.",
    )
    delta_pct_precision: NonNegativeInt = Field(
        default=4, description="Decimal places kept on delta percentages."
    )

    @field_validator("window_sizes")
    @classmethod
    def check_ascending(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if not value:
            raise ValueError("window_sizes must contain at least one window")
        if list(value) != sorted(set(value)):
            raise ValueError("window_sizes must be strictly ascending")
        return value

    def select_window(self, history_months: int) -> Optional[int]:
        """Pick the largest window whose size does not exceed the available history."""
        selected = None
        for size in self.window_sizes:
            if history_months >= size:
                selected = size
        return selected


class ForecastSettings(Model):
    """
    Ridge-regression forecasting configuration.

    Usage Examples:
        # Library defaults
        settings = ForecastSettings()

        # Wider alpha search for noisy portfolios
        settings = ForecastSettings(alpha_candidates=(0.1, 1.0, 10.0, 100.0, 1000.0))
    """

    min_listing_months: PositiveInt = Field(
        default=3,
        description="Months of history a listing needs before it can be forecast.",
    )
    min_training_rows: PositiveInt = Field(
        default=3,
        description="Pooled training rows needed before any model is fitted.",
    )
    alpha_candidates: Tuple[PositiveFloat, ...] = Field(
        default=(0.1, 1.0, 10.0, 100.0),
        description="Regularization strengths searched by leave-one-out cross-validation.",
    )
    default_alpha: PositiveFloat = Field(
        default=10.0,
        description="Regularization strength used when there are too few samples for LOO-CV.",
    )
    min_samples_for_loo: PositiveInt = Field(
        default=5,
        description="Training samples required before alpha is chosen by LOO-CV.",
    )
    high_confidence_months: PositiveInt = Field(
        default=18, description="Training months at or above which confidence is high."
    )
    medium_confidence_months: PositiveInt = Field(
        default=9, description="Training months at or above which confidence is medium."
    )

    @model_validator(mode="after")
    def check_thresholds(self) -> "ForecastSettings":
        if not self.alpha_candidates:
            raise ValueError("alpha_candidates must contain at least one value")
        if self.medium_confidence_months > self.high_confidence_months:
            raise ValueError(
                "medium_confidence_months cannot exceed high_confidence_months"
            )
        return self


class RefreshSettings(Model):
    """Minimum training scope for a forecast refresh, and what to do below it."""

    min_training_rows: PositiveInt = Field(
        default=3, description="Listing-month rows required in the training scope."
    )
    min_training_months: PositiveInt = Field(
        default=3, description="Distinct months required in the training scope."
    )
    fallback: FallbackPolicy = Field(
        default=FallbackPolicy.DROP_DATE_RANGE,
        description="Retry on full history when a date-ranged scope is too small.",
    )


# --- Main Settings Class ---


class AnalyticsSettings(Model):
    """Analytics settings

    Groups every tunable of the analytics pipeline by functional area. The
    defaults reproduce the documented behaviour exactly.
    """

    occupancy: OccupancySettings = Field(default_factory=OccupancySettings)
    trailing: TrailingSettings = Field(default_factory=TrailingSettings)
    forecast: ForecastSettings = Field(default_factory=ForecastSettings)
    refresh: RefreshSettings = Field(default_factory=RefreshSettings)
