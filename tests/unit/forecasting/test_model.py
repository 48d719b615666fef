# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import numpy as np
import pytest

from rentalytics.core.primitives import ConfidenceTier, ForecastSettings
from rentalytics.forecasting.linalg import solve_ridge
from rentalytics.forecasting.model import (
    compute_scaler_params,
    confidence_tier,
    loo_cross_validation,
    predict,
    scale_features,
    scale_target,
    select_alpha,
    train_ridge_model,
)
from rentalytics.forecasting.types import NUM_FEATURES, FeatureRow


def _rows(targets, slope=1.0):
    rows = []
    for index, target in enumerate(targets):
        features = tuple(float(index * (column + 1)) for column in range(NUM_FEATURES))
        rows.append(
            FeatureRow(
                features=features,
                target=float(target) * slope,
                listing_id="a",
                month=f"2025-{index % 12 + 1:02d}",
            )
        )
    return rows


def _manual_loo(X, y, alpha, scaler_for):
    errors = []
    for held_out in range(len(y)):
        mask = np.arange(len(y)) != held_out
        scaler = scaler_for(mask)
        beta = solve_ridge(
            scale_features(X[mask], scaler), scale_target(y[mask], scaler), alpha
        )
        scaled = (scale_features(X[held_out : held_out + 1], scaler) @ beta)[0]
        prediction = scaled * scaler.target_std + scaler.target_mean
        errors.append(abs(prediction - y[held_out]))
    return float(np.mean(errors))


class TestScaler:
    def test_population_statistics(self):
        X = np.array([[1.0, 5.0], [3.0, 5.0]])
        y = np.array([10.0, 10.0])

        scaler = compute_scaler_params(X, y)

        assert np.allclose(scaler.feature_means, [2.0, 5.0])
        # Population std of [1, 3] is 1; constant column falls back to 1
        assert np.allclose(scaler.feature_stds, [1.0, 1.0])
        assert scaler.target_mean == 10.0
        assert scaler.target_std == 1.0


class TestTraining:
    def test_few_samples_use_default_alpha_and_in_sample_mae(self):
        model = train_ridge_model(_rows([100, 200, 300, 400]))

        assert model.alpha == ForecastSettings().default_alpha
        assert not model.mae_cross_validated
        assert model.training_rows == 4
        assert model.mae >= 0

    def test_enough_samples_use_loo(self):
        rows = _rows([100, 250, 180, 420, 390, 510, 470])

        model = train_ridge_model(rows)

        assert model.mae_cross_validated
        assert model.alpha in ForecastSettings().alpha_candidates
        X = np.array([row.features for row in rows])
        y = np.array([row.target for row in rows])
        expected_alpha, expected_mae = select_alpha(X, y, ForecastSettings().alpha_candidates)
        assert model.alpha == expected_alpha
        assert model.mae == pytest.approx(expected_mae)

    def test_selected_alpha_has_lowest_loo_error(self):
        rows = _rows([100, 250, 180, 420, 390, 510, 470])
        X = np.array([row.features for row in rows])
        y = np.array([row.target for row in rows])
        candidates = (0.1, 1.0, 10.0, 100.0)

        alpha, mae = select_alpha(X, y, candidates)

        errors = [loo_cross_validation(X, y, candidate) for candidate in candidates]
        assert mae == min(errors)
        assert alpha == candidates[errors.index(min(errors))]

    def test_in_sample_mae_scores_unclamped_predictions(self):
        rows = _rows([0, 0, 0, 1000])
        X = np.array([row.features for row in rows])
        y = np.array([row.target for row in rows])

        model = train_ridge_model(rows)

        raw = scale_features(X, model.scaler) @ model.beta
        raw = raw * model.scaler.target_std + model.scaler.target_mean
        # The shrunken trend undershoots zero on the first month
        assert raw[0] < 0
        assert model.mae == pytest.approx(float(np.abs(raw - y).mean()))
        assert model.mae > float(np.abs(np.maximum(raw, 0.0) - y).mean())

    def test_loo_folds_scale_on_held_in_rows_only(self):
        rng = np.random.default_rng(7)
        X = rng.normal(size=(7, NUM_FEATURES))
        X[3, 0] = 1e6
        y = np.array([0.0, 0.0, 5000.0, 0.0, 0.0, 8000.0, 0.0])
        global_scaler = compute_scaler_params(X, y)

        mae = loo_cross_validation(X, y, 1.0)

        per_fold = _manual_loo(
            X, y, 1.0, lambda mask: compute_scaler_params(X[mask], y[mask])
        )
        shared = _manual_loo(X, y, 1.0, lambda mask: global_scaler)
        assert mae == pytest.approx(per_fold, rel=1e-9)
        assert mae != pytest.approx(shared, rel=1e-3)

    def test_ties_go_to_first_candidate(self):
        rows = _rows([300] * 6)
        model = train_ridge_model(rows)
        assert model.alpha == 0.1
        assert model.mae == pytest.approx(0.0)

    def test_empty_rows_raise(self):
        with pytest.raises(ValueError):
            train_ridge_model([])


class TestPredict:
    def test_learns_linear_trend(self):
        rows = _rows(range(0, 1200, 100))
        model = train_ridge_model(rows, ForecastSettings(alpha_candidates=(0.1,)))

        prediction = predict(model, rows[-1].features)

        assert prediction == pytest.approx(rows[-1].target, rel=0.05)

    def test_predictions_never_negative(self):
        rows = _rows([500, 400, 300, 200, 100, 0])
        model = train_ridge_model(rows)

        far_future = tuple(float(40 * (column + 1)) for column in range(NUM_FEATURES))

        assert predict(model, far_future) == 0.0


class TestConfidenceTier:
    @pytest.mark.parametrize(
        "months, tier",
        [
            (3, ConfidenceTier.LOW),
            (8, ConfidenceTier.LOW),
            (9, ConfidenceTier.MEDIUM),
            (17, ConfidenceTier.MEDIUM),
            (18, ConfidenceTier.HIGH),
            (40, ConfidenceTier.HIGH),
        ],
    )
    def test_thresholds(self, months, tier):
        assert confidence_tier(months) == tier
