"""
Direct collection and payment corrections.
"""
import logging
from datetime import date, datetime
from decimal import ROUND_DOWN

from rentcore_backend.errors import ValidationError

from .advance import parse_amount
from .periods import Period, local_today
from .snapshots import PaymentSnapshot
from .status import CENT, ZERO, PaymentStatus, derive_status, to_money

logger = logging.getLogger(__name__)

MULTI_MONTH_NOTE = "(Part of multi-month payment)"
EDITABLE_FIELDS = ("received_amount", "payment_mode", "collection_date", "notes")


def parse_date(value, field_name="collection_date"):
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must use YYYY-MM-DD", code="invalid_date")


def split_evenly(total, parts):
    """Split a total into `parts` cent amounts; the last part absorbs rounding."""
    share = (total / parts).quantize(CENT, rounding=ROUND_DOWN)
    shares = [share] * parts
    shares[-1] = total - share * (parts - 1)
    return shares


def record_collection(store, renter_id, periods, received_amount, payment_mode="cash", notes="",
                      collection_date=None, collector_id=None, timezone=None):
    """
    Record money collected over the counter for one or more months.

    The amount is split evenly over the selected months and every month gets
    its primary ledger row. Months that are already fully paid, or that
    already hold their primary row, are refused before anything is written.
    """
    if not periods:
        raise ValidationError("Please select at least one month", code="no_periods")
    selected = []
    for p in periods:
        period = Period.parse(p)
        if period not in selected:
            selected.append(period)

    amount = parse_amount(received_amount, "received_amount")
    if amount < CENT * len(selected):
        raise ValidationError("received_amount is too small to split over the selected months",
                              code="invalid_amount")

    renter = store.get_renter(renter_id)
    expected = renter.monthly_expected
    if expected <= ZERO:
        raise ValidationError("This renter has no active rent required", code="no_active_rent")

    existing = store.payments_for_renter(renter.id, periods=selected)
    collected = {}
    taken = set()
    for p in existing:
        collected[p.period_month] = collected.get(p.period_month, ZERO) + p.received_amount
        if p.entry_no == 0:
            taken.add(p.period_month)

    paid_already = [p.label for p in selected
                    if derive_status(expected, collected.get(p.label, ZERO)) == PaymentStatus.PAID]
    if paid_already:
        raise ValidationError(
            f"Already fully paid: {', '.join(paid_already)}",
            code="period_already_paid",
        )

    # the month's primary row exists; the balance goes through an advance top-up
    has_payment = [p.label for p in selected if p.label in taken]
    if has_payment:
        raise ValidationError(
            f"Payment already recorded for {', '.join(has_payment)}; use an advance payment for the balance",
            code="period_has_payment",
        )

    note = (notes or "").strip()
    if len(selected) > 1:
        note = f"{note} {MULTI_MONTH_NOTE}".strip()
    when = parse_date(collection_date) or local_today(timezone)

    rows = [
        PaymentSnapshot(
            id=None,
            renter_id=renter.id,
            period_month=period.label,
            entry_no=0,
            expected_amount=expected,
            received_amount=share,
            status=derive_status(expected, share).value,
            payment_mode=payment_mode or "cash",
            notes=note,
            collection_date=when,
            collector_user_id=collector_id,
        )
        for period, share in zip(selected, split_evenly(amount, len(selected)))
    ]
    created = store.insert_payments(rows)
    logger.info("Collection of %s for renter %s over %s", amount, renter.renter_code,
                [p.label for p in selected])
    return renter, created


def edit_payment(store, payment_id, **changes):
    """Correct amount, mode, date or notes of a recorded payment and re-derive its status."""
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot edit: {', '.join(sorted(unknown))}", code="invalid_field")

    current = store.get_payment(payment_id)
    updates = {}

    if "received_amount" in changes:
        value = changes["received_amount"]
        amount = to_money(0) if value in (0, "0") else parse_amount(value, "received_amount")
        updates["received_amount"] = amount
    if "payment_mode" in changes:
        updates["payment_mode"] = changes["payment_mode"] or "cash"
    if "collection_date" in changes:
        updates["collection_date"] = parse_date(changes["collection_date"])
    if "notes" in changes:
        updates["notes"] = changes["notes"] or ""

    received = updates.get("received_amount", current.received_amount)
    others = sum(
        (p.received_amount for p in store.payments_for_renter(current.renter_id, periods=[current.period_month])
         if p.id != current.id),
        ZERO,
    )
    updates["status"] = derive_status(current.expected_amount, others + received).value

    updated = store.update_payment(payment_id, **updates)
    logger.info("Payment %s corrected: %s", payment_id, sorted(changes))
    return updated
