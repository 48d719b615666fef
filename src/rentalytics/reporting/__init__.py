# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Reporting helpers: pandas views of analytics records.
"""

from .frames import forecast_outcomes_frame, records_to_frame, revenue_pivot

__all__ = [
    "forecast_outcomes_frame",
    "records_to_frame",
    "revenue_pivot",
]
