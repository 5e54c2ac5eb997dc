"""
Advance (lump-sum) payment distribution.

A lump sum received from a renter is spread over consecutive billing
periods starting at the current month. Periods that are already fully
paid are skipped; a period with an earlier partial payment only receives
what is still missing. The monthly expected rent is read once at the
start of a run and used for every period of that run.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional

from rentcore_backend.errors import ValidationError

from .periods import Period, iter_periods, local_today
from .snapshots import PaymentSnapshot, RenterSnapshot
from .status import ZERO, derive_status, to_money

logger = logging.getLogger(__name__)

# Ten years ahead; reaching it ends the run without an error
MAX_ADVANCE_PERIODS = 120
ADVANCE_NOTE_TAG = "(Advance Distribution)"


@dataclass(frozen=True)
class DistributionPlan:
    rows: List[PaymentSnapshot]
    remaining: Decimal
    periods_visited: int


@dataclass(frozen=True)
class DistributionResult:
    success: bool
    months_affected: int
    records_created: List[PaymentSnapshot] = field(default_factory=list)
    remaining: Decimal = ZERO

    def to_dict(self):
        return {
            "success": self.success,
            "months_affected": self.months_affected,
            "records_created": [r.to_dict() for r in self.records_created],
            "remaining": float(self.remaining),
        }


def parse_amount(value, field_name="lump_sum") -> Decimal:
    if value is None or isinstance(value, bool) or value == "":
        raise ValidationError(f"{field_name} is required", code="invalid_amount")
    try:
        amount = to_money(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field_name} must be a number", code="invalid_amount")
    if not amount.is_finite() or amount <= ZERO:
        raise ValidationError(f"{field_name} must be greater than zero", code="invalid_amount")
    return amount


def advance_note(notes: Optional[str]) -> str:
    return f"{ADVANCE_NOTE_TAG} {notes or ''}".strip()


def plan_distribution(
    renter: RenterSnapshot,
    lump_sum,
    existing_payments,
    start: Period,
    payment_mode: str = "cash",
    notes: str = "",
    collection_date: Optional[date] = None,
    collector_id: Optional[str] = None,
    max_periods: int = MAX_ADVANCE_PERIODS,
) -> DistributionPlan:
    """Work out the payment rows for a lump sum without touching storage."""
    monthly_expected = renter.monthly_expected
    if monthly_expected <= ZERO:
        raise ValidationError("This renter has no active rent required", code="no_active_rent")

    collected = {}
    entries = {}
    for p in existing_payments:
        if p.renter_id != renter.id:
            continue
        collected[p.period_month] = collected.get(p.period_month, ZERO) + to_money(p.received_amount)
        entries[p.period_month] = max(entries.get(p.period_month, 0), p.entry_no + 1)

    remaining = to_money(lump_sum)
    rows = []
    visited = 0

    for period in iter_periods(start, max_periods):
        if remaining <= ZERO:
            break
        visited += 1

        already = collected.get(period.label, ZERO)
        deficit = max(ZERO, monthly_expected - already)
        if deficit == ZERO:
            continue

        applied = min(deficit, remaining)
        rows.append(PaymentSnapshot(
            id=None,
            renter_id=renter.id,
            period_month=period.label,
            entry_no=entries.get(period.label, 0),
            expected_amount=monthly_expected,
            received_amount=applied,
            status=derive_status(monthly_expected, already + applied).value,
            payment_mode=payment_mode or "cash",
            notes=advance_note(notes),
            collection_date=collection_date,
            collector_user_id=collector_id,
        ))
        remaining -= applied

    return DistributionPlan(rows=rows, remaining=remaining, periods_visited=visited)


class AdvanceDistributor:
    """Runs a distribution against a store: snapshot, plan, atomic insert."""

    def __init__(self, store, clock: Optional[Callable[[], date]] = None, timezone: Optional[str] = None,
                 max_periods: int = MAX_ADVANCE_PERIODS):
        self.store = store
        self.clock = clock or (lambda: local_today(timezone))
        self.max_periods = max_periods

    def distribute(self, renter_id, lump_sum, payment_mode="cash", notes="",
                   collection_date=None, collector_id=None) -> DistributionResult:
        if renter_id in (None, ""):
            raise ValidationError("renter_id is required", code="invalid_renter")
        amount = parse_amount(lump_sum)

        renter = self.store.get_renter(renter_id)
        if renter.monthly_expected <= ZERO:
            raise ValidationError("This renter has no active rent required", code="no_active_rent")

        today = self.clock()
        start = Period.from_date(today)
        window = list(iter_periods(start, self.max_periods))
        existing = self.store.payments_for_renter(renter.id, periods=window)

        plan = plan_distribution(
            renter,
            amount,
            existing,
            start,
            payment_mode=payment_mode,
            notes=notes,
            collection_date=collection_date or today,
            collector_id=collector_id,
            max_periods=self.max_periods,
        )
        if plan.remaining > ZERO and plan.periods_visited >= self.max_periods:
            logger.warning(
                "Advance for renter %s stopped after %d periods with %s undistributed",
                renter.renter_code, plan.periods_visited, plan.remaining,
            )

        created = self.store.insert_payments(plan.rows)
        logger.info(
            "Advance of %s for renter %s spread over %d period(s) from %s",
            amount, renter.renter_code, len(created), start.label,
        )
        return DistributionResult(
            success=True,
            months_affected=len(created),
            records_created=created,
            remaining=plan.remaining,
        )
