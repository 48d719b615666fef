# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import numpy as np
import pytest

from rentalytics.forecasting.linalg import (
    add_regularization,
    back_solve,
    cholesky,
    forward_solve,
    gram_matrix,
    solve_ridge,
)


@pytest.fixture
def design():
    rng = np.random.default_rng(7)
    X = rng.normal(size=(20, 4))
    y = X @ np.array([1.5, -2.0, 0.0, 0.5]) + rng.normal(scale=0.1, size=20)
    return X, y


class TestTriangularSolves:
    def test_cholesky_reconstructs(self, design):
        X, _ = design
        matrix = add_regularization(gram_matrix(X), 1.0)
        L = cholesky(matrix)
        assert np.allclose(L, np.tril(L))
        assert np.allclose(L @ L.T, matrix)

    def test_forward_then_back_solves_system(self, design):
        X, y = design
        matrix = add_regularization(gram_matrix(X), 0.5)
        L = cholesky(matrix)
        b = X.T @ y
        x = back_solve(L, forward_solve(L, b))
        assert np.allclose(matrix @ x, b)

    def test_regularization_does_not_mutate(self):
        gram = np.eye(2)
        add_regularization(gram, 3.0)
        assert np.array_equal(gram, np.eye(2))


class TestSolveRidge:
    def test_matches_closed_form(self, design):
        X, y = design
        alpha = 2.0
        expected = np.linalg.solve(X.T @ X + alpha * np.eye(X.shape[1]), X.T @ y)
        assert np.allclose(solve_ridge(X, y, alpha), expected)

    def test_small_alpha_approaches_least_squares(self, design):
        X, y = design
        expected, *_ = np.linalg.lstsq(X, y, rcond=None)
        assert np.allclose(solve_ridge(X, y, 1e-9), expected, atol=1e-6)

    def test_handles_singular_gram(self):
        X = np.array([[1.0, 1.0], [2.0, 2.0], [3.0, 3.0]])
        y = np.array([1.0, 2.0, 3.0])
        beta = solve_ridge(X, y, 1.0)
        assert beta[0] == pytest.approx(beta[1])

    def test_shape_mismatch_raises(self, design):
        X, y = design
        with pytest.raises(ValueError):
            solve_ridge(X, y[:-1], 1.0)

    def test_non_matrix_raises(self):
        with pytest.raises(ValueError):
            solve_ridge(np.ones(3), np.ones(3), 1.0)

    def test_non_positive_alpha_raises(self, design):
        X, y = design
        with pytest.raises(ValueError):
            solve_ridge(X, y, 0.0)
