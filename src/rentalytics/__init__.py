# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

import importlib
import logging
import warnings

# Silence pandas FutureWarning related to monthly frequency alias 'M'.
# rentalytics keys every month as a monthly Period and suppresses this
# warning to reduce log noise during analysis.
warnings.filterwarnings(
    "ignore",
    message=".*'M' is deprecated and will be removed in a future version.*",
    category=FutureWarning,
)

"""
rentalytics - Short-Term Rental Portfolio Analytics

Deterministic monthly analytics for short-term rental hosts: stay-night
revenue allocation, listing and portfolio performance, cash flow,
assumption-based occupancy, trailing comparisons and next-month revenue
forecasts.

Key Entry Points:
- rentalytics.analytics.compute_analytics() - Full pipeline over canonical transactions
- rentalytics.forecasting.compute_revenue_forecast() - Ridge-regression forecast
- rentalytics.forecasting.ForecastRefresher - Background, last-request-wins retraining
- rentalytics.reporting.* - pandas views of the records

Example Usage:
    ```python
    from rentalytics.analytics import compute_analytics

    result = compute_analytics(transactions)
    for row in result.realized.portfolio_performance:
        print(row.month, row.currency, row.gross_revenue_minor)

    usd = result.forecasts.get("USD")
    if usd and usd.portfolio:
        print(usd.portfolio.target_month, usd.portfolio.forecast_gross_revenue_minor)
    ```
"""

__version__ = "0.1.0"

# Libraries leave handler configuration to the application.
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "analytics",
    "core",
    "forecasting",
    "reporting",
]


_LAZY_MODULES = {
    "analytics": "rentalytics.analytics",
    "core": "rentalytics.core",
    "forecasting": "rentalytics.forecasting",
    "reporting": "rentalytics.reporting",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'rentalytics' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
