"""
Typed, read-only views of the rows the services compute over.

The store converts ORM rows into these once; the distributor and the
reconciler never touch the session or a loosely shaped dict.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from .status import ZERO, pending_amount, to_money


@dataclass(frozen=True)
class ShopSnapshot:
    id: int
    shop_no: str
    rent_amount: Decimal
    is_active: bool = True
    complex_name: Optional[str] = None

    @classmethod
    def from_model(cls, shop) -> "ShopSnapshot":
        return cls(
            id=shop.id,
            shop_no=shop.shop_no,
            rent_amount=to_money(shop.rent_amount),
            is_active=bool(shop.is_active),
            complex_name=shop.complex.name if shop.complex else None,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "shop_no": self.shop_no,
            "rent_amount": float(self.rent_amount),
            "is_active": self.is_active,
            "complex_name": self.complex_name,
        }


@dataclass(frozen=True)
class AssignmentSnapshot:
    id: int
    renter_id: int
    shop: ShopSnapshot
    expected_deposit: Decimal = ZERO
    deposit_amount: Decimal = ZERO

    @classmethod
    def from_model(cls, rs) -> "AssignmentSnapshot":
        return cls(
            id=rs.id,
            renter_id=rs.renter_id,
            shop=ShopSnapshot.from_model(rs.shop),
            expected_deposit=to_money(rs.expected_deposit),
            deposit_amount=to_money(rs.deposit_amount),
        )

    @property
    def active_rent(self) -> Decimal:
        return self.shop.rent_amount if self.shop.is_active else ZERO


@dataclass(frozen=True)
class RenterSnapshot:
    id: int
    renter_code: str
    name: str
    phone: str = ""
    assignments: Tuple[AssignmentSnapshot, ...] = field(default_factory=tuple)

    @classmethod
    def from_model(cls, renter) -> "RenterSnapshot":
        return cls(
            id=renter.id,
            renter_code=renter.renter_code,
            name=renter.name,
            phone=renter.phone or "",
            assignments=tuple(
                AssignmentSnapshot.from_model(rs)
                for rs in sorted(renter.assignments, key=lambda a: a.id or 0)
                if rs.shop is not None
            ),
        )

    @property
    def monthly_expected(self) -> Decimal:
        """Combined rent of the renter's active shops."""
        return sum((a.active_rent for a in self.assignments), ZERO)

    @property
    def active_shops(self):
        return [a.shop for a in self.assignments if a.shop.is_active]

    @property
    def deposit_expected(self) -> Decimal:
        return sum((a.expected_deposit for a in self.assignments), ZERO)

    @property
    def deposit_collected(self) -> Decimal:
        return sum((a.deposit_amount for a in self.assignments), ZERO)

    @property
    def deposit_remaining(self) -> Decimal:
        return pending_amount(self.deposit_expected, self.deposit_collected)

    def to_dict(self):
        return {
            "id": self.id,
            "renter_code": self.renter_code,
            "name": self.name,
            "phone": self.phone,
            "shops": [a.shop.to_dict() for a in self.assignments],
        }


@dataclass(frozen=True)
class PaymentSnapshot:
    id: Optional[int]
    renter_id: int
    period_month: str
    expected_amount: Decimal
    received_amount: Decimal
    status: str
    entry_no: int = 0
    payment_mode: str = "cash"
    notes: str = ""
    collection_date: Optional[date] = None
    collector_user_id: Optional[str] = None

    @classmethod
    def from_model(cls, p) -> "PaymentSnapshot":
        return cls(
            id=p.id,
            renter_id=p.renter_id,
            period_month=p.period_month,
            expected_amount=to_money(p.expected_amount),
            received_amount=to_money(p.received_amount),
            status=p.status,
            entry_no=p.entry_no or 0,
            payment_mode=p.payment_mode or "cash",
            notes=p.notes or "",
            collection_date=p.collection_date,
            collector_user_id=p.collector_user_id,
        )

    def to_dict(self):
        return {
            "id": self.id,
            "renter_id": self.renter_id,
            "period_month": self.period_month,
            "entry_no": self.entry_no,
            "expected_amount": float(self.expected_amount),
            "received_amount": float(self.received_amount),
            "status": str(self.status),
            "payment_mode": self.payment_mode,
            "notes": self.notes,
            "collection_date": self.collection_date.isoformat() if self.collection_date else None,
            "collector_user_id": self.collector_user_id,
        }
