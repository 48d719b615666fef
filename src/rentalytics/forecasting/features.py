# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Feature engineering for the revenue forecast.

Each row is anchored at a month index ``i`` of a listing's chronological
history and predicts the gross revenue of month ``i + 1``. Every feature of
row ``i`` is computed from observations at indices strictly below ``i`` (or
from calendar labels alone), so no row can see the value it is trained to
predict or anything after it.

Row layout for a listing with ``n`` months:
    - indices 0 and 1: history only (no row)
    - training rows for ``i`` in ``range(2, n - 1)``
    - one prediction input anchored at ``n - 1`` for the month after the last
      observed month
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from ..core.primitives.calendar import calendar_month_number, months_between, next_month
from ..core.primitives.enums import ExclusionReason
from ..core.primitives.settings import ForecastSettings
from ..core.schema import MonthlyListingPerformance
from .types import NUM_FEATURES, ExcludedListing, FeatureRow, PredictionInput

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ListingHistory:
    """Chronological monthly performance of one listing."""

    listing_id: str
    listing_name: str
    account_id: str
    currency: str
    months: List[MonthlyListingPerformance] = field(default_factory=list)


@dataclass(slots=True)
class FeatureBuildResult:
    training_rows: List[FeatureRow]
    prediction_inputs: List[PredictionInput]
    excluded: List[ExcludedListing]


def group_by_listing(rows: Iterable[MonthlyListingPerformance]) -> List[ListingHistory]:
    """Group listing performance by listing id; groups and months sorted."""
    groups: Dict[str, ListingHistory] = {}
    for row in rows:
        history = groups.get(row.listing_id)
        if history is None:
            history = groups[row.listing_id] = ListingHistory(
                listing_id=row.listing_id,
                listing_name=row.listing_name,
                account_id=row.account_id,
                currency=row.currency,
            )
        history.months.append(row)

    for history in groups.values():
        history.months.sort(key=lambda item: item.month)
    return [groups[listing_id] for listing_id in sorted(groups)]


def rolling_average(values: np.ndarray, end: int, window: int) -> float:
    """Mean of the last ``window`` values before index ``end`` (exclusive); 0 if none."""
    start = max(0, end - window)
    if start >= end:
        return 0.0
    return float(values[start:end].mean())


class _ListingFeatureBuilder:
    """Builds leakage-free feature vectors for one listing's history."""

    def __init__(self, history: ListingHistory):
        self.history = history
        self.month_labels = [row.month for row in history.months]
        self.revenues = np.array(
            [row.gross_revenue_minor for row in history.months], dtype=float
        )
        self.nights = np.array([row.booked_nights for row in history.months], dtype=float)

        # prefix[k] = sum of revenues[:k]
        self.prefix_sum = np.concatenate(([0.0], np.cumsum(self.revenues)))
        self.prefix_sum_sq = np.concatenate(([0.0], np.cumsum(self.revenues**2)))

    def history_stats(self, i: int) -> Tuple[float, float]:
        """Mean and population std of ``revenues[:i]``."""
        if i == 0:
            return 0.0, 0.0
        mean = self.prefix_sum[i] / i
        if i == 1:
            return float(mean), 0.0
        variance = self.prefix_sum_sq[i] / i - mean * mean
        return float(mean), math.sqrt(max(0.0, float(variance)))

    def features(self, i: int) -> Tuple[float, ...]:
        """Feature vector for the row anchored at index ``i``."""
        revenues = self.revenues
        month = self.month_labels[i]
        month_number = calendar_month_number(month)
        hist_mean, hist_std = self.history_stats(i)

        lag1 = float(revenues[i - 1]) if i >= 1 else 0.0
        lag2 = float(revenues[i - 2]) if i >= 2 else 0.0
        roll3 = rolling_average(revenues, i, 3)
        roll6 = rolling_average(revenues, i, 6)
        nights_lag1 = float(self.nights[i - 1]) if i >= 1 else 0.0

        vector = (
            lag1,
            lag2,
            roll3,
            roll6,
            nights_lag1,
            lag1 / (hist_mean + 1),
            roll3 / (hist_mean + 1),
            math.sin(2 * math.pi * month_number / 12),
            math.cos(2 * math.pi * month_number / 12),
            float(months_between(self.month_labels[0], month)),
            hist_mean,
            hist_std,
            float(i),
        )
        assert len(vector) == NUM_FEATURES
        return vector


def build_feature_rows(
    rows: Iterable[MonthlyListingPerformance],
    settings: Optional[ForecastSettings] = None,
) -> FeatureBuildResult:
    """
    Build training rows and prediction inputs from listing performance.

    Listings with fewer than ``settings.min_listing_months`` months are
    excluded with reason ``insufficient_listing_history``.

    Args:
        rows: Single-currency monthly listing performance
        settings: Forecast settings

    Returns:
        FeatureBuildResult with pooled training rows, one prediction input per
        eligible listing, and the excluded listings
    """
    settings = settings or ForecastSettings()
    min_months = settings.min_listing_months

    training_rows: List[FeatureRow] = []
    prediction_inputs: List[PredictionInput] = []
    excluded: List[ExcludedListing] = []

    for history in group_by_listing(rows):
        n = len(history.months)
        if n < min_months:
            excluded.append(
                ExcludedListing(
                    listing_id=history.listing_id,
                    listing_name=history.listing_name,
                    account_id=history.account_id,
                    reason_code=ExclusionReason.INSUFFICIENT_LISTING_HISTORY,
                    reason_params={"months_available": n, "min_months": min_months},
                    reason=f"Only {n} month(s) of data (need at least {min_months})",
                    months_available=n,
                )
            )
            continue

        builder = _ListingFeatureBuilder(history)
        for i in range(2, n - 1):
            training_rows.append(
                FeatureRow(
                    features=builder.features(i),
                    target=float(builder.revenues[i + 1]),
                    listing_id=history.listing_id,
                    month=builder.month_labels[i],
                )
            )

        last = n - 1
        prediction_inputs.append(
            PredictionInput(
                features=builder.features(last),
                listing_id=history.listing_id,
                listing_name=history.listing_name,
                account_id=history.account_id,
                currency=history.currency,
                target_month=next_month(builder.month_labels[last]),
                training_months=n,
            )
        )

    logger.debug(
        f"Built {len(training_rows)} training rows, {len(prediction_inputs)} prediction "
        f"inputs, {len(excluded)} excluded listings"
    )
    return FeatureBuildResult(
        training_rows=training_rows,
        prediction_inputs=prediction_inputs,
        excluded=excluded,
    )
