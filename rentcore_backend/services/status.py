"""
Payment status derivation.

Every place that needs paid / partial / unpaid goes through
``derive_status`` so the collector screens, the defaulter report and the
advance distributor always agree.
"""
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


class PaymentStatus(str, Enum):
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"
    NO_RENT_DUE = "no rent due"

    def __str__(self):
        return self.value


SEVERITY = {
    PaymentStatus.UNPAID: 3,
    PaymentStatus.PARTIAL: 2,
    PaymentStatus.PAID: 1,
    PaymentStatus.NO_RENT_DUE: 0,
}


def to_money(value) -> Decimal:
    """Coerce numbers and numeric strings to a 2-place Decimal."""
    if value is None or value == "":
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def derive_status(expected, collected) -> PaymentStatus:
    expected = to_money(expected)
    collected = to_money(collected)

    if expected <= ZERO:
        return PaymentStatus.NO_RENT_DUE
    if collected >= expected:
        return PaymentStatus.PAID
    if collected > ZERO:
        return PaymentStatus.PARTIAL
    return PaymentStatus.UNPAID


def severity(status) -> int:
    return SEVERITY[PaymentStatus(status)]


def pending_amount(expected, collected) -> Decimal:
    return max(ZERO, to_money(expected) - to_money(collected))
