# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Trailing comparison computation.

Compares each month of a listing against the average of the N calendar
months immediately before it, for net and gross revenue. N adapts to the
history available (see ``TrailingSettings``). The window is contiguous by
construction: months inside it with no recorded data count as zero, so the
divisor is always N.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from ..core.primitives.calendar import trailing_months
from ..core.primitives.enums import TrailingMetric
from ..core.primitives.numeric import divide_round_half_up, round_ratio
from ..core.primitives.settings import TrailingSettings
from ..core.schema import MonthlyListingPerformance, TrailingComparison

METRICS: Tuple[TrailingMetric, ...] = tuple(
    sorted(TrailingMetric, key=lambda metric: metric.value)
)


def trailing_label(window_months: int) -> str:
    return f"vs trailing {window_months}-month average"


def compute_trailing_comparisons(
    listing_performance: Iterable[MonthlyListingPerformance],
    settings: Optional[TrailingSettings] = None,
) -> List[TrailingComparison]:
    """
    Compute trailing-average comparisons per (listing_id, currency).

    For each month with data, M is the count of strictly earlier months with
    data for the same listing and currency. With default settings M < 3
    yields no comparison; otherwise the window is 3, 6 or 12 months.

        baseline  = round(window_sum / window_size)
        delta     = current - baseline
        delta_pct = delta / |baseline|, or None when baseline == 0

    Returns:
        Comparisons sorted by month then metric (then listing, currency)
    """
    settings = settings or TrailingSettings()

    groups: Dict[Tuple[str, str], Dict[str, MonthlyListingPerformance]] = {}
    for row in listing_performance:
        groups.setdefault((row.listing_id, row.currency), {})[row.month] = row

    results: List[TrailingComparison] = []
    for (listing_id, currency), by_month in groups.items():
        months = sorted(by_month)
        for history_months, month in enumerate(months):
            window = settings.select_window(history_months)
            if window is None:
                continue

            current = by_month[month]
            window_rows = [by_month.get(previous) for previous in trailing_months(month, window)]

            for metric in METRICS:
                window_sum = sum(
                    getattr(row, metric.value) for row in window_rows if row is not None
                )
                baseline = divide_round_half_up(window_sum, window)
                current_value = getattr(current, metric.value)
                delta = current_value - baseline
                delta_pct = (
                    round_ratio(delta / abs(baseline), settings.delta_pct_precision)
                    if baseline != 0
                    else None
                )

                results.append(
                    TrailingComparison(
                        month=month,
                        account_id=current.account_id,
                        listing_id=listing_id,
                        currency=currency,
                        metric=metric,
                        trailing_window_months=window,
                        baseline_minor=baseline,
                        current_minor=current_value,
                        delta_minor=delta,
                        delta_pct=delta_pct,
                        label=trailing_label(window),
                    )
                )

    results.sort(
        key=lambda item: (item.month, item.metric.value, item.listing_id, item.currency)
    )
    return results
