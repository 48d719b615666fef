# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Pooled ridge-regression revenue model.

One model is fitted across every listing of a single-currency dataset. The
features and target are standardized, coefficients are solved in scaled
space, and predictions are mapped back to minor units. Only ``predict`` clamps
at zero; cross-validation and in-sample errors are measured unclamped.
Alpha is chosen by leave-one-out cross-validation when there are enough
samples.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from ..core.primitives.enums import ConfidenceTier
from ..core.primitives.settings import ForecastSettings
from .linalg import solve_ridge
from .types import FeatureRow, ScalerParams, TrainedModel

logger = logging.getLogger(__name__)


def rows_to_arrays(rows: Sequence[FeatureRow]) -> Tuple[np.ndarray, np.ndarray]:
    X = np.array([row.features for row in rows], dtype=float)
    y = np.array([row.target for row in rows], dtype=float)
    return X, y


def compute_scaler_params(X: np.ndarray, y: np.ndarray) -> ScalerParams:
    """Population mean/std per column; zero std becomes 1 so scaling is a no-op."""
    feature_means = X.mean(axis=0)
    feature_stds = X.std(axis=0)
    feature_stds = np.where(feature_stds == 0, 1.0, feature_stds)

    target_mean = float(y.mean())
    target_std = float(y.std())
    if target_std == 0:
        target_std = 1.0

    return ScalerParams(
        feature_means=feature_means,
        feature_stds=feature_stds,
        target_mean=target_mean,
        target_std=target_std,
    )


def scale_features(X: np.ndarray, scaler: ScalerParams) -> np.ndarray:
    return (X - scaler.feature_means) / scaler.feature_stds


def scale_target(y: np.ndarray, scaler: ScalerParams) -> np.ndarray:
    return (y - scaler.target_mean) / scaler.target_std


def _fit(X: np.ndarray, y: np.ndarray, alpha: float) -> Tuple[np.ndarray, ScalerParams]:
    scaler = compute_scaler_params(X, y)
    beta = solve_ridge(scale_features(X, scaler), scale_target(y, scaler), alpha)
    return beta, scaler


def _predict_scaled(X: np.ndarray, beta: np.ndarray, scaler: ScalerParams) -> np.ndarray:
    """Predictions in original units, not clamped; errors are scored on these."""
    scaled = scale_features(X, scaler) @ beta
    return scaled * scaler.target_std + scaler.target_mean


def loo_cross_validation(X: np.ndarray, y: np.ndarray, alpha: float) -> float:
    """
    Leave-one-out mean absolute error for one alpha, in original units.

    Each fold standardizes on its held-in rows only, so the held-out row
    never influences the scaling it is evaluated with.
    """
    n = X.shape[0]
    errors = np.empty(n)
    mask = np.ones(n, dtype=bool)
    for held_out in range(n):
        mask[held_out] = False
        beta, scaler = _fit(X[mask], y[mask], alpha)
        prediction = _predict_scaled(X[held_out : held_out + 1], beta, scaler)[0]
        errors[held_out] = abs(prediction - y[held_out])
        mask[held_out] = True
    return float(errors.mean())


def select_alpha(
    X: np.ndarray, y: np.ndarray, alpha_candidates: Sequence[float]
) -> Tuple[float, float]:
    """Alpha with the lowest LOO MAE (earliest candidate wins ties), and that MAE."""
    best_alpha: Optional[float] = None
    best_mae = float("inf")
    for alpha in alpha_candidates:
        mae = loo_cross_validation(X, y, alpha)
        logger.debug(f"alpha={alpha}: LOO MAE {mae:.2f}")
        if mae < best_mae:
            best_alpha, best_mae = alpha, mae
    assert best_alpha is not None
    return best_alpha, best_mae


def train_ridge_model(
    rows: Sequence[FeatureRow],
    settings: Optional[ForecastSettings] = None,
) -> TrainedModel:
    """
    Fit the pooled ridge model.

    With at least ``settings.min_samples_for_loo`` rows, alpha comes from
    LOO-CV and the reported MAE is cross-validated. Otherwise the default
    alpha is used and the MAE is in-sample (optimistic).

    Raises:
        ValueError: If ``rows`` is empty
    """
    settings = settings or ForecastSettings()
    if not rows:
        raise ValueError("Cannot train a model without training rows")

    X, y = rows_to_arrays(rows)
    n = len(rows)

    if n >= settings.min_samples_for_loo:
        alpha, mae = select_alpha(X, y, settings.alpha_candidates)
        beta, scaler = _fit(X, y, alpha)
        cross_validated = True
    else:
        alpha = settings.default_alpha
        beta, scaler = _fit(X, y, alpha)
        mae = float(np.abs(_predict_scaled(X, beta, scaler) - y).mean())
        cross_validated = False

    logger.debug(
        f"Trained ridge model on {n} rows: alpha={alpha}, MAE={mae:.2f} "
        f"({'LOO-CV' if cross_validated else 'in-sample'})"
    )
    return TrainedModel(
        beta=beta,
        scaler=scaler,
        alpha=alpha,
        mae=mae,
        mae_cross_validated=cross_validated,
        training_rows=n,
    )


def predict(model: TrainedModel, features: Sequence[float]) -> float:
    """Predict gross revenue (minor units, unrounded) for one feature vector; never negative."""
    X = np.asarray(features, dtype=float).reshape(1, -1)
    return max(0.0, float(_predict_scaled(X, model.beta, model.scaler)[0]))


def confidence_tier(
    training_months: int, settings: Optional[ForecastSettings] = None
) -> ConfidenceTier:
    settings = settings or ForecastSettings()
    if training_months >= settings.high_confidence_months:
        return ConfidenceTier.HIGH
    if training_months >= settings.medium_confidence_months:
        return ConfidenceTier.MEDIUM
    return ConfidenceTier.LOW
