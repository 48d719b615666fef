# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Background forecast refresh.

A forecast is retrained whenever the user changes the training scope
(currency, accounts, listings, month range). Training runs off the caller's
thread, and only the most recently requested scope of a dataset may publish
its result: a slow, superseded request finishing late is discarded.

Key Components:
    - TrainingScope: normalized training filter with a stable ``key``
    - TrainingMeta: size of the rows a scope selects
    - ForecastSnapshot: outcome of one refresh, including any fallback
    - compute_forecast_snapshot: synchronous filter -> check -> train step
    - ForecastRefresher: thread-pool runner with last-request-wins publishing
"""

from __future__ import annotations

import concurrent.futures
import itertools
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import Field, field_validator

from ..core.primitives.enums import FallbackPolicy, FallbackReason, RefreshStatus
from ..core.primitives.model import Model
from ..core.primitives.settings import AnalyticsSettings, RefreshSettings
from ..core.primitives.types import CurrencyCode, NonNegativeInt, YearMonth
from ..core.schema import MonthlyListingPerformance
from .forecast import compute_revenue_forecast
from .types import ForecastResult

logger = logging.getLogger(__name__)


class TrainingScope(Model):
    """
    Rows a forecast is trained on.

    Empty id tuples mean "all". Ids are stored sorted and de-duplicated so
    that equivalent scopes compare (and key) equal.
    """

    currency: CurrencyCode
    account_ids: Tuple[str, ...] = Field(default=())
    listing_ids: Tuple[str, ...] = Field(default=())
    date_range_start: Optional[YearMonth] = None
    date_range_end: Optional[YearMonth] = None

    @field_validator("account_ids", "listing_ids")
    @classmethod
    def normalize_ids(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(sorted(set(value)))

    @property
    def key(self) -> str:
        return self.model_dump_json()

    @property
    def has_date_range(self) -> bool:
        return self.date_range_start is not None or self.date_range_end is not None

    def without_date_range(self) -> "TrainingScope":
        return self.model_copy(update={"date_range_start": None, "date_range_end": None})

    def includes(self, row: MonthlyListingPerformance) -> bool:
        if row.currency != self.currency:
            return False
        if self.account_ids and row.account_id not in self.account_ids:
            return False
        if self.listing_ids and row.listing_id not in self.listing_ids:
            return False
        if self.date_range_start is not None and row.month < self.date_range_start:
            return False
        if self.date_range_end is not None and row.month > self.date_range_end:
            return False
        return True

    def filter(
        self, rows: Iterable[MonthlyListingPerformance]
    ) -> List[MonthlyListingPerformance]:
        return [row for row in rows if self.includes(row)]


class TrainingMeta(Model):
    """Size of a training selection."""

    row_count: NonNegativeInt
    distinct_months: NonNegativeInt
    listing_count: NonNegativeInt
    start_month: Optional[YearMonth] = None
    end_month: Optional[YearMonth] = None

    @classmethod
    def from_rows(cls, rows: Iterable[MonthlyListingPerformance]) -> "TrainingMeta":
        rows = list(rows)
        months = sorted({row.month for row in rows})
        return cls(
            row_count=len(rows),
            distinct_months=len(months),
            listing_count=len({row.listing_id for row in rows}),
            start_month=months[0] if months else None,
            end_month=months[-1] if months else None,
        )

    def is_sufficient(self, settings: RefreshSettings) -> bool:
        return (
            self.row_count >= settings.min_training_rows
            and self.distinct_months >= settings.min_training_months
        )


class ForecastSnapshot(Model):
    """
    Result of one forecast refresh.

    Attributes:
        dataset_id: Dataset the refresh ran against
        request_id: Request that produced the snapshot
        desired_scope: Scope the caller asked for
        effective_scope: Scope actually trained on (differs after a fallback)
        used_fallback: Whether the date range was dropped
        fallback_reason: Why the snapshot differs from the request, or why
            there is no result
        trained_at: UTC time the snapshot was computed
        training_meta: Size of the effective training selection
        result: Forecast, or None when nothing could be forecast
    """

    dataset_id: Optional[str] = None
    request_id: Optional[int] = None
    desired_scope: TrainingScope
    effective_scope: TrainingScope
    used_fallback: bool = False
    fallback_reason: Optional[FallbackReason] = None
    trained_at: datetime
    training_meta: TrainingMeta
    result: Optional[ForecastResult] = None


def compute_forecast_snapshot(
    listing_performance: Iterable[MonthlyListingPerformance],
    scope: TrainingScope,
    settings: Optional[AnalyticsSettings] = None,
    dataset_id: Optional[str] = None,
    request_id: Optional[int] = None,
) -> ForecastSnapshot:
    """
    Train a forecast on the rows selected by ``scope``.

    When the scope selects too little data, it carries a month range, and
    the fallback policy allows it, training is retried on the same scope
    without the month range. If the data is still insufficient there is no
    result and the reason is ``insufficient_training_data``. A forecast with
    no forecastable listing also yields no result, with reason
    ``insufficient_per_listing_history`` unless a fallback reason is already
    set.
    """
    settings = settings or AnalyticsSettings()
    refresh_settings = settings.refresh
    rows = list(listing_performance)

    effective_scope = scope
    selected = scope.filter(rows)
    meta = TrainingMeta.from_rows(selected)
    used_fallback = False
    fallback_reason: Optional[FallbackReason] = None

    if (
        not meta.is_sufficient(refresh_settings)
        and scope.has_date_range
        and refresh_settings.fallback == FallbackPolicy.DROP_DATE_RANGE
    ):
        fallback_scope = scope.without_date_range()
        fallback_rows = fallback_scope.filter(rows)
        fallback_meta = TrainingMeta.from_rows(fallback_rows)
        if fallback_meta.is_sufficient(refresh_settings):
            logger.debug(
                f"Scope {scope.key} selects {meta.row_count} rows; training on full history"
            )
            effective_scope = fallback_scope
            selected = fallback_rows
            meta = fallback_meta
            used_fallback = True
            fallback_reason = FallbackReason.TRAINED_ON_FULL_HISTORY

    result: Optional[ForecastResult] = None
    if not meta.is_sufficient(refresh_settings):
        fallback_reason = fallback_reason or FallbackReason.INSUFFICIENT_TRAINING_DATA
    else:
        forecast = compute_revenue_forecast(selected, settings.forecast)
        if forecast.listings:
            result = forecast
        else:
            fallback_reason = (
                fallback_reason or FallbackReason.INSUFFICIENT_PER_LISTING_HISTORY
            )

    return ForecastSnapshot(
        dataset_id=dataset_id,
        request_id=request_id,
        desired_scope=scope,
        effective_scope=effective_scope,
        used_fallback=used_fallback,
        fallback_reason=fallback_reason,
        trained_at=datetime.now(timezone.utc),
        training_meta=meta,
        result=result,
    )


class RefreshFailure(Model):
    """A refresh request that raised instead of producing a snapshot."""

    dataset_id: str
    request_id: int
    error: str


class ForecastRefresher:
    """
    Runs forecast refreshes on a thread pool, latest request wins.

    Each ``submit`` takes a new, strictly increasing request id. Submitting
    for a dataset cancels that dataset's previous request if it has not
    started, and a request that finishes after a newer one was submitted is
    never published. Datasets are independent of one another.

    Usage:
        with ForecastRefresher() as refresher:
            refresher.load_dataset("upload-1", realized_listing_performance)
            refresher.submit("upload-1", TrainingScope(currency="USD"))
            snapshot = refresher.wait("upload-1")
    """

    def __init__(self, settings: Optional[AnalyticsSettings] = None, max_workers: int = 2):
        self.settings = settings or AnalyticsSettings()
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="forecast-refresh"
        )
        self._lock = threading.Lock()
        self._request_ids = itertools.count(1)
        self._datasets: Dict[str, Tuple[MonthlyListingPerformance, ...]] = {}
        self._latest_request: Dict[str, int] = {}
        self._pending: Dict[str, concurrent.futures.Future] = {}
        self._snapshots: Dict[str, ForecastSnapshot] = {}
        self._failures: Dict[str, RefreshFailure] = {}

    def __enter__(self) -> "ForecastRefresher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def load_dataset(
        self, dataset_id: str, listing_performance: Iterable[MonthlyListingPerformance]
    ) -> None:
        """Register (or replace) the realized listing performance of a dataset."""
        with self._lock:
            self._datasets[dataset_id] = tuple(listing_performance)
            pending = self._pending.pop(dataset_id, None)
            if pending is not None:
                pending.cancel()
            # Anything still running was computed on the old rows.
            self._latest_request.pop(dataset_id, None)
            self._snapshots.pop(dataset_id, None)
            self._failures.pop(dataset_id, None)

    def submit(self, dataset_id: str, scope: TrainingScope) -> int:
        """
        Queue a refresh of ``dataset_id`` for ``scope``.

        Returns:
            The request id

        Raises:
            KeyError: If the dataset was never loaded
        """
        with self._lock:
            if dataset_id not in self._datasets:
                raise KeyError(f"Dataset '{dataset_id}' is not loaded")
            rows = self._datasets[dataset_id]
            request_id = next(self._request_ids)
            self._latest_request[dataset_id] = request_id

            previous = self._pending.get(dataset_id)
            if previous is not None and previous.cancel():
                logger.debug(f"Cancelled superseded refresh for dataset '{dataset_id}'")

            future = self._executor.submit(self._run, dataset_id, request_id, rows, scope)
            self._pending[dataset_id] = future
        return request_id

    def _is_latest(self, dataset_id: str, request_id: int) -> bool:
        return self._latest_request.get(dataset_id) == request_id

    def _run(
        self,
        dataset_id: str,
        request_id: int,
        rows: Tuple[MonthlyListingPerformance, ...],
        scope: TrainingScope,
    ) -> Optional[ForecastSnapshot]:
        with self._lock:
            if not self._is_latest(dataset_id, request_id):
                logger.debug(
                    f"Skipping superseded refresh {request_id} for dataset '{dataset_id}'"
                )
                return None

        try:
            snapshot = compute_forecast_snapshot(
                rows, scope, self.settings, dataset_id=dataset_id, request_id=request_id
            )
        except Exception as exc:
            logger.warning(
                f"Forecast refresh {request_id} for dataset '{dataset_id}' failed: {exc}"
            )
            with self._lock:
                if self._is_latest(dataset_id, request_id):
                    self._failures[dataset_id] = RefreshFailure(
                        dataset_id=dataset_id, request_id=request_id, error=str(exc)
                    )
            raise

        with self._lock:
            if not self._is_latest(dataset_id, request_id):
                logger.debug(
                    f"Discarding stale refresh {request_id} for dataset '{dataset_id}'"
                )
                return snapshot
            self._snapshots[dataset_id] = snapshot
            self._failures.pop(dataset_id, None)

        meta = snapshot.training_meta
        logger.info(
            f"Forecast refresh {request_id} for dataset '{dataset_id}': "
            f"{meta.row_count} rows, {meta.listing_count} listings, "
            f"fallback={snapshot.fallback_reason.value if snapshot.fallback_reason else None}"
        )
        return snapshot

    def latest_snapshot(self, dataset_id: str) -> Optional[ForecastSnapshot]:
        """Most recently published snapshot of ``dataset_id``."""
        with self._lock:
            return self._snapshots.get(dataset_id)

    def last_failure(self, dataset_id: str) -> Optional[RefreshFailure]:
        with self._lock:
            return self._failures.get(dataset_id)

    def status(self, dataset_id: str) -> RefreshStatus:
        with self._lock:
            request_id = self._latest_request.get(dataset_id)
            if request_id is None:
                return RefreshStatus.IDLE
            failure = self._failures.get(dataset_id)
            if failure is not None and failure.request_id == request_id:
                return RefreshStatus.FAILED
            snapshot = self._snapshots.get(dataset_id)
            if snapshot is not None and snapshot.request_id == request_id:
                return RefreshStatus.UP_TO_DATE
            return RefreshStatus.RECOMPUTING

    def wait(
        self, dataset_id: str, timeout: Optional[float] = None
    ) -> Optional[ForecastSnapshot]:
        """
        Block until the latest request of ``dataset_id`` has finished.

        Returns:
            The published snapshot (None if the latest request failed and
            nothing was published before)

        Raises:
            TimeoutError: If ``timeout`` elapses first
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                future = self._pending.get(dataset_id)
            if future is None:
                break
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            done, _ = concurrent.futures.wait([future], timeout=remaining)
            if not done:
                raise TimeoutError(
                    f"Forecast refresh for dataset '{dataset_id}' did not finish in {timeout}s"
                )
            with self._lock:
                if self._pending.get(dataset_id) is future:
                    break
        return self.latest_snapshot(dataset_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)
