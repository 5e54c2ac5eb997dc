from decimal import Decimal

import pytest

from rentcore_backend.errors import ValidationError
from rentcore_backend.services.periods import Period
from rentcore_backend.services.reconciler import period_statuses, rank_defaulters, reconcile, summarize
from rentcore_backend.services.snapshots import RenterSnapshot
from rentcore_backend.services.status import PaymentStatus

FEB = "Feb-2026"


@pytest.fixture
def portfolio(renter_snapshot, payment_snapshot):
    renters = [
        renter_snapshot(renter_id=1, code="R-001", rents=(5000,)),        # paid
        renter_snapshot(renter_id=2, code="R-002", rents=(3000, 2000)),   # partial, 1500 pending
        renter_snapshot(renter_id=3, code="R-003", rents=(4000,)),        # unpaid, 4000 pending
        renter_snapshot(renter_id=4, code="R-004", rents=(8000,)),        # unpaid, 8000 pending
        renter_snapshot(renter_id=5, code="R-005", rents=(6000,)),        # partial, 5000 pending
        renter_snapshot(renter_id=6, code="R-006", rents=(2500,), inactive=(0,)),  # no rent due
    ]
    payments = [
        payment_snapshot(1, FEB, 5000),
        payment_snapshot(2, FEB, 2000, entry_no=0),
        payment_snapshot(2, FEB, 1500, entry_no=1),
        payment_snapshot(5, FEB, 1000, expected=6000),
        payment_snapshot(3, "Jan-2026", 4000, expected=4000),  # other month, ignored
    ]
    return renters, payments


def by_code(statuses):
    return {s.renter.renter_code: s for s in statuses}


class TestReconcile:
    def test_statuses(self, portfolio):
        renters, payments = portfolio
        statuses = by_code(reconcile(FEB, renters, payments))

        assert statuses["R-001"].status is PaymentStatus.PAID
        assert statuses["R-002"].status is PaymentStatus.PARTIAL
        assert statuses["R-003"].status is PaymentStatus.UNPAID
        assert statuses["R-004"].status is PaymentStatus.UNPAID
        assert statuses["R-005"].status is PaymentStatus.PARTIAL
        assert statuses["R-006"].status is PaymentStatus.NO_RENT_DUE

    def test_multiple_entries_are_summed(self, portfolio):
        renters, payments = portfolio
        s = by_code(reconcile(FEB, renters, payments))["R-002"]

        assert s.expected == Decimal("5000.00")
        assert s.collected == Decimal("3500.00")
        assert s.pending == Decimal("1500.00")

    def test_zero_rent_active_shop_is_no_rent_due(self, renter_snapshot):
        renter = renter_snapshot(rents=(0,))
        [s] = reconcile(FEB, [renter], [])

        assert s.status is PaymentStatus.NO_RENT_DUE
        assert s.pending == Decimal("0.00")

    def test_renter_without_assignments_is_skipped(self):
        bare = RenterSnapshot(id=9, renter_code="R-009", name="Nobody")
        assert reconcile(FEB, [bare], []) == []

    def test_accepts_iso_month(self, portfolio):
        renters, payments = portfolio
        assert reconcile("2026-02", renters, payments) == reconcile(FEB, renters, payments)

    @pytest.mark.parametrize("period", [None, ""])
    def test_missing_period(self, portfolio, period):
        renters, payments = portfolio
        with pytest.raises(ValidationError):
            reconcile(period, renters, payments)

    def test_deposit_summary(self, renter_snapshot):
        renter = renter_snapshot(rents=(1000, 1000), deposits=[(10000, 4000), (5000, 7000)])
        [s] = reconcile(FEB, [renter], [])

        assert s.deposit.expected == Decimal("15000")
        assert s.deposit.collected == Decimal("11000")
        assert s.deposit.remaining == Decimal("4000.00")
        assert s.to_dict(with_deposit=True)["deposit"] == {
            "expected": 15000.0, "collected": 11000.0, "remaining": 4000.0,
        }


class TestRanking:
    def test_severity_then_pending(self, portfolio):
        renters, payments = portfolio
        ranked = rank_defaulters(reconcile(FEB, renters, payments))

        assert [s.renter.renter_code for s in ranked] == ["R-004", "R-003", "R-005", "R-002"]

    def test_include_paid_puts_paid_last(self, portfolio):
        renters, payments = portfolio
        ranked = rank_defaulters(reconcile(FEB, renters, payments), include_paid=True)

        assert ranked[-1].renter.renter_code == "R-001"
        assert all(s.status is not PaymentStatus.NO_RENT_DUE for s in ranked)

    def test_ties_break_on_renter_code(self, renter_snapshot):
        renters = [
            renter_snapshot(renter_id=3, code="R-C", rents=(1000,)),
            renter_snapshot(renter_id=1, code="R-A", rents=(1000,)),
            renter_snapshot(renter_id=2, code="R-B", rents=(1000,)),
        ]
        ranked = rank_defaulters(reconcile(FEB, renters, []))
        assert [s.renter.renter_code for s in ranked] == ["R-A", "R-B", "R-C"]

    def test_reconciliation_is_repeatable(self, portfolio):
        renters, payments = portfolio
        first = [s.to_dict(with_deposit=True) for s in rank_defaulters(reconcile(FEB, renters, payments), True)]
        second = [s.to_dict(with_deposit=True) for s in rank_defaulters(reconcile(FEB, renters, payments), True)]

        assert first == second
        # input order must not matter either
        shuffled = rank_defaulters(reconcile(FEB, list(reversed(renters)), list(reversed(payments))), True)
        assert [s.to_dict(with_deposit=True) for s in shuffled] == first


class TestSummaries:
    def test_summarize(self, portfolio):
        renters, payments = portfolio
        summary = summarize(reconcile(FEB, renters, payments))

        assert summary["renters"] == 6
        assert summary["counts"] == {"paid": 1, "partial": 2, "unpaid": 2, "no rent due": 1}
        assert summary["total_expected"] == 28000.0
        assert summary["total_collected"] == 9500.0
        assert summary["total_pending"] == 18500.0

    def test_period_statuses_only_offer_months_without_a_payment(self, renter_snapshot, payment_snapshot):
        renter = renter_snapshot(rents=(5000,))
        payments = [payment_snapshot(renter.id, "Jan-2026", 5000), payment_snapshot(renter.id, FEB, 2000)]

        rows = period_statuses(renter, payments, [Period(2026, 1), Period(2026, 2), Period(2026, 3)])

        assert [(r["period"], r["status"], r["selectable"], r["top_up"]) for r in rows] == [
            ("Jan-2026", "paid", False, None),
            ("Feb-2026", "partial", False, "advance"),
            ("Mar-2026", "unpaid", True, None),
        ]
        assert rows[1]["pending"] == 3000.0
        assert rows[1]["has_payment"] is True

    def test_zero_amount_row_still_blocks_direct_collection(self, renter_snapshot, payment_snapshot):
        renter = renter_snapshot(rents=(5000,))
        [row] = period_statuses(renter, [payment_snapshot(renter.id, FEB, 0)], [Period(2026, 2)])

        assert row["status"] == "unpaid"
        assert row["selectable"] is False
        assert row["top_up"] == "advance"
