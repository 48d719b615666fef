# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Ridge regression solver.

Solves ``(XᵀX + αI) β = Xᵀy`` through a Cholesky factorization followed by a
forward and a back substitution. ``XᵀX + αI`` is symmetric positive definite
for any ``α > 0``, so the factorization always exists.
"""

from __future__ import annotations

import numpy as np
from scipy.linalg import solve_triangular


def gram_matrix(X: np.ndarray) -> np.ndarray:
    """Compute ``XᵀX``."""
    return X.T @ X


def add_regularization(gram: np.ndarray, alpha: float) -> np.ndarray:
    """Return ``gram + alpha * I`` without modifying ``gram``."""
    return gram + alpha * np.eye(gram.shape[0])


def cholesky(matrix: np.ndarray) -> np.ndarray:
    """Lower-triangular ``L`` with ``L Lᵀ = matrix``."""
    return np.linalg.cholesky(matrix)


def forward_solve(L: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Solve ``L z = b`` for lower-triangular ``L``."""
    return solve_triangular(L, b, lower=True)


def back_solve(L: np.ndarray, z: np.ndarray) -> np.ndarray:
    """Solve ``Lᵀ x = z`` for lower-triangular ``L``."""
    return solve_triangular(L, z, lower=True, trans="T")


def solve_ridge(X: np.ndarray, y: np.ndarray, alpha: float) -> np.ndarray:
    """
    Fit ridge coefficients.

    Args:
        X: Design matrix, shape (n_samples, n_features)
        y: Targets, shape (n_samples,)
        alpha: Regularization strength (> 0)

    Returns:
        Coefficient vector, shape (n_features,)

    Raises:
        ValueError: If the shapes of ``X`` and ``y`` do not agree, or alpha is
            not positive
    """
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float)
    if X.ndim != 2:
        raise ValueError(f"X must be 2-dimensional, got shape {X.shape}")
    if y.ndim != 1:
        raise ValueError(f"y must be 1-dimensional, got shape {y.shape}")
    if X.shape[0] != y.shape[0]:
        raise ValueError(
            f"X has {X.shape[0]} rows but y has {y.shape[0]} values"
        )
    if alpha <= 0:
        raise ValueError(f"alpha must be positive, got {alpha}")

    L = cholesky(add_regularization(gram_matrix(X), alpha))
    z = forward_solve(L, X.T @ y)
    return back_solve(L, z)
