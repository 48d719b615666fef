# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Canonical records shared by every analytics stage.

Inputs (``CanonicalTransaction``) arrive from an importer collaborator; the
outputs (slices, performance, cash flow, occupancy, trailing comparisons) are
plain serializable records meant for direct transport to a presentation
layer. ``model_dump(mode="json")`` renders money as integer minor units,
dates as ``YYYY-MM-DD`` and months as ``YYYY-MM``.
"""

from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import model_validator

from ..primitives.calendar import day_before, month_range
from ..primitives.enums import DatasetKind, TrailingMetric, TransactionKind
from ..primitives.model import Model
from ..primitives.types import (
    CurrencyCode,
    FloatBetween0And1,
    MinorUnits,
    NonNegativeInt,
    YearMonth,
)
from .money import Money

OCCUPANCY_LABEL = "Estimated Occupancy (Assumption-Based)"
OCCUPANCY_DISCLAIMER = (
    "booked nights / (days_in_month * listings_in_service); not true occupancy"
)


class ListingRef(Model):
    """
    Identifies a listing within an account.

    Attributes:
        account_id: Account the listing belongs to
        listing_name: Listing name exactly as it appeared in the source
        normalized_listing_name: Case/whitespace/Unicode-normalized name
        listing_id: Deterministic id derived from (account_id, normalized name)
    """

    account_id: str
    listing_name: str
    normalized_listing_name: str
    listing_id: str


class StayWindow(Model):
    """
    Check-in/check-out window of a stay-based transaction.

    ``check_out_date`` is exclusive: the guest departs that day, so the last
    occupied night is the night before.
    """

    check_in_date: date
    check_out_date: date
    nights: NonNegativeInt

    @property
    def is_valid(self) -> bool:
        """A stay is usable for allocation when it spans at least one night."""
        return self.check_out_date > self.check_in_date and self.nights > 0


class CanonicalTransaction(Model):
    """
    Normalized transaction produced by an importer.

    Attributes:
        transaction_id: Deterministic row fingerprint
        kind: Transaction kind (performance or cash flow family)
        dataset_kind: Realized (paid) or forecast (upcoming) dataset
        occurred_date: Date the transaction appeared in the export
        listing: Listing reference; None for unattributed payout-like rows
        stay: Stay window; None for non-stay rows
        net_amount: Net amount (Amount, or Paid out for payouts)
        gross_amount: Gross earnings
        host_service_fee_amount: Host service fee (host-positive)
        cleaning_fee_amount: Cleaning fee, signed as in the source
        adjustment_amount: Adjustment component for adjustment-like kinds, else 0
    """

    transaction_id: str
    kind: TransactionKind
    dataset_kind: DatasetKind
    occurred_date: date
    listing: Optional[ListingRef] = None
    stay: Optional[StayWindow] = None

    net_amount: Money
    gross_amount: Money
    host_service_fee_amount: Money
    cleaning_fee_amount: Money
    adjustment_amount: Money

    @model_validator(mode="after")
    def check_single_currency(self) -> "CanonicalTransaction":
        """All money components of one transaction share its currency."""
        currency = self.net_amount.currency
        for field_name in (
            "gross_amount",
            "host_service_fee_amount",
            "cleaning_fee_amount",
            "adjustment_amount",
        ):
            component: Money = getattr(self, field_name)
            if component.currency != currency:
                raise ValueError(
                    f"{field_name} is in {component.currency} but net_amount is in {currency}"
                )
        return self

    @property
    def currency(self) -> str:
        return self.net_amount.currency

    @property
    def has_valid_stay(self) -> bool:
        return self.stay is not None and self.stay.is_valid


class MonthlyAllocationSlice(Model):
    """
    One transaction's contribution to one calendar month.

    Attributes:
        allocation_ratio: nights_in_month / total_nights (1.0 for non-stay rows)
        nights: Nights of the stay falling in this month (0 for non-stay rows)
    """

    transaction_id: str
    kind: TransactionKind
    account_id: str
    listing_id: str
    month: YearMonth
    currency: CurrencyCode
    nights: NonNegativeInt
    allocation_ratio: FloatBetween0And1

    allocated_gross_minor: MinorUnits
    allocated_net_minor: MinorUnits
    allocated_cleaning_fee_minor: MinorUnits
    allocated_service_fee_minor: MinorUnits
    allocated_adjustment_minor: MinorUnits


class MonthlyListingPerformance(Model):
    """
    Aggregated performance of one listing in one month and currency.

    Net revenue is broken down into four mutually exclusive category sums
    (reservation, adjustment, resolution adjustment, cancellation fee) that
    always add up to ``net_revenue_minor``.
    """

    month: YearMonth
    account_id: str
    listing_id: str
    listing_name: str
    currency: CurrencyCode
    booked_nights: NonNegativeInt

    gross_revenue_minor: MinorUnits
    net_revenue_minor: MinorUnits
    cleaning_fees_minor: MinorUnits
    service_fees_minor: MinorUnits

    reservation_revenue_minor: MinorUnits
    adjustment_revenue_minor: MinorUnits
    resolution_adjustment_revenue_minor: MinorUnits
    cancellation_fee_revenue_minor: MinorUnits

    @property
    def category_revenue_minor(self) -> int:
        """Sum of the four net revenue categories."""
        return (
            self.reservation_revenue_minor
            + self.adjustment_revenue_minor
            + self.resolution_adjustment_revenue_minor
            + self.cancellation_fee_revenue_minor
        )


class MonthlyPortfolioPerformance(Model):
    """Aggregated performance of every listing in scope for one month and currency."""

    month: YearMonth
    currency: CurrencyCode
    booked_nights: NonNegativeInt
    gross_revenue_minor: MinorUnits
    net_revenue_minor: MinorUnits
    cleaning_fees_minor: MinorUnits
    service_fees_minor: MinorUnits


class MonthlyCashflow(Model):
    """
    Payouts for one month and currency, per listing where attributable.

    Payouts without a listing aggregate with ``account_id`` and
    ``listing_id`` set to None.
    """

    month: YearMonth
    currency: CurrencyCode
    account_id: Optional[str] = None
    listing_id: Optional[str] = None
    payouts_minor: MinorUnits


class ListingServiceRange(Model):
    """
    Calendar span during which a listing is presumed actively rentable.

    Inferred from the first observed check-in and the last observed
    (exclusive) check-out of the listing's stays.
    """

    listing_id: str
    currency: CurrencyCode
    first_stay_start: date
    last_stay_end: date

    @property
    def last_occupied_night(self) -> date:
        return day_before(self.last_stay_end)

    def months_in_service(self) -> List[str]:
        """
        Months the listing is in service, first stay month through the month
        of the last occupied night.

        A range ending on the 1st of a month does not put that month in
        service, since check-out is exclusive.
        """
        return month_range(self.first_stay_start, self.last_occupied_night)


class EstimatedOccupancy(Model):
    """
    Assumption-based occupancy for one month and currency.

    ``estimated_occupancy_rate`` is None (never 0 or NaN) when no listing is
    in service. Every record carries a fixed disclaimer: this is a heuristic,
    not verified availability.
    """

    month: YearMonth
    currency: CurrencyCode
    booked_nights: NonNegativeInt
    days_in_month: NonNegativeInt
    listings_in_service: NonNegativeInt
    estimated_occupancy_rate: Optional[float] = None
    label: Literal["Estimated Occupancy (Assumption-Based)"] = OCCUPANCY_LABEL
    disclaimer: Literal[
        "booked nights / (days_in_month * listings_in_service); not true occupancy"
    ] = OCCUPANCY_DISCLAIMER


class TrailingComparison(Model):
    """Current month versus the trailing-window average of one listing metric."""

    month: YearMonth
    account_id: str
    listing_id: str
    currency: CurrencyCode
    metric: TrailingMetric
    trailing_window_months: int
    baseline_minor: MinorUnits
    current_minor: MinorUnits
    delta_minor: MinorUnits
    delta_pct: Optional[float] = None
    label: str
