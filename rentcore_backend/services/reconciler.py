"""
Monthly payment-status reconciliation and defaulter ranking.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List

from .periods import Period
from .snapshots import RenterSnapshot
from .status import ZERO, PaymentStatus, derive_status, pending_amount, severity, to_money


@dataclass(frozen=True)
class DepositSummary:
    expected: Decimal
    collected: Decimal
    remaining: Decimal

    @classmethod
    def for_renter(cls, renter: RenterSnapshot) -> "DepositSummary":
        return cls(
            expected=renter.deposit_expected,
            collected=renter.deposit_collected,
            remaining=renter.deposit_remaining,
        )

    def to_dict(self):
        return {
            "expected": float(self.expected),
            "collected": float(self.collected),
            "remaining": float(self.remaining),
        }


@dataclass(frozen=True)
class RenterStatus:
    renter: RenterSnapshot
    period: Period
    status: PaymentStatus
    expected: Decimal
    collected: Decimal
    pending: Decimal
    severity: int
    deposit: DepositSummary

    def to_dict(self, with_deposit=False):
        data = {
            "renter": self.renter.to_dict(),
            "period": self.period.label,
            "status": self.status.value,
            "expected": float(self.expected),
            "collected": float(self.collected),
            "pending": float(self.pending),
            "severity": self.severity,
        }
        if with_deposit:
            data["deposit"] = self.deposit.to_dict()
        return data


def _collected_by_renter(payments, label) -> Dict[int, Decimal]:
    totals = {}
    for p in payments:
        if p.period_month != label:
            continue
        totals[p.renter_id] = totals.get(p.renter_id, ZERO) + to_money(p.received_amount)
    return totals


def reconcile(period, renters: Iterable[RenterSnapshot], payments) -> List[RenterStatus]:
    """One status per renter that holds at least one shop, in input order."""
    period = Period.parse(period)
    collected_by_renter = _collected_by_renter(payments, period.label)

    results = []
    for renter in renters:
        if not renter.assignments:
            continue
        expected = renter.monthly_expected
        collected = collected_by_renter.get(renter.id, ZERO)
        status = derive_status(expected, collected)
        results.append(RenterStatus(
            renter=renter,
            period=period,
            status=status,
            expected=expected,
            collected=collected,
            pending=pending_amount(expected, collected),
            severity=severity(status),
            deposit=DepositSummary.for_renter(renter),
        ))
    return results


def _rank_key(item: RenterStatus):
    return (-item.severity, -item.pending, item.renter.renter_code, item.renter.id)


def rank_defaulters(statuses: Iterable[RenterStatus], include_paid: bool = False) -> List[RenterStatus]:
    """Most severe first: unpaid, then partial, then paid; larger dues first within a tier."""
    keep = {PaymentStatus.UNPAID, PaymentStatus.PARTIAL}
    if include_paid:
        keep.add(PaymentStatus.PAID)
    return sorted((s for s in statuses if s.status in keep), key=_rank_key)


def summarize(statuses: Iterable[RenterStatus]) -> dict:
    statuses = list(statuses)
    counts = {s.value: 0 for s in PaymentStatus}
    for s in statuses:
        counts[s.status.value] += 1

    expected = sum((s.expected for s in statuses), ZERO)
    collected = sum((s.collected for s in statuses), ZERO)
    return {
        "renters": len(statuses),
        "total_expected": float(expected),
        "total_collected": float(collected),
        "total_pending": float(sum((s.pending for s in statuses), ZERO)),
        "collection_rate": float(collected / expected * 100) if expected > 0 else 0,
        "counts": counts,
        "deposit_expected": float(sum((s.deposit.expected for s in statuses), ZERO)),
        "deposit_collected": float(sum((s.deposit.collected for s in statuses), ZERO)),
    }


def period_statuses(renter: RenterSnapshot, payments, periods) -> List[dict]:
    """
    Status of each requested period for one renter.

    A direct collection always takes the first ledger slot of a month, so a
    month is only ``selectable`` while that slot is free. A partly paid month
    is topped up through an advance instead, flagged by ``top_up``.
    """
    expected = renter.monthly_expected
    out = []
    for period in periods:
        period = Period.parse(period)
        collected = _collected_by_renter(payments, period.label).get(renter.id, ZERO)
        status = derive_status(expected, collected)
        has_payment = any(
            p.renter_id == renter.id and p.period_month == period.label and p.entry_no == 0
            for p in payments
        )
        open_month = status not in (PaymentStatus.PAID, PaymentStatus.NO_RENT_DUE)
        out.append({
            "period": period.label,
            "status": status.value,
            "expected": float(expected),
            "collected": float(collected),
            "pending": float(pending_amount(expected, collected)),
            "has_payment": has_payment,
            "selectable": open_month and not has_payment,
            "top_up": "advance" if open_month and has_payment else None,
        })
    return out

