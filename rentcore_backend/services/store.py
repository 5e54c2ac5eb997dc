"""
Data-store collaborator for the rent services.

``RentStore`` is the only piece of the services layer that talks to
SQLAlchemy. It hands out typed snapshots and performs the atomic
multi-row payment insert the advance distributor relies on.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from rentcore_backend.errors import ConflictError, NotFoundError
from rentcore_backend.extensions import db
from rentcore_backend.models import Renter, RenterShop, RentPayment, Shop

from .periods import Period
from .snapshots import PaymentSnapshot, RenterSnapshot

logger = logging.getLogger(__name__)

DUPLICATE_PAYMENT_MESSAGE = "Payment for this month already exists"


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(orig or exc).lower()


class RentStore:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    # ---------------- Reads ----------------

    def _renter_query(self):
        return self.session.query(Renter).options(
            selectinload(Renter.assignments).selectinload(RenterShop.shop).selectinload(Shop.complex)
        )

    def get_renter(self, renter_id) -> RenterSnapshot:
        renter = self._renter_query().filter(Renter.id == renter_id).one_or_none()
        if renter is None:
            raise NotFoundError("Renter not found", code="renter_not_found")
        return RenterSnapshot.from_model(renter)

    def list_renters(self):
        renters = self._renter_query().order_by(Renter.renter_code.desc()).all()
        return [RenterSnapshot.from_model(r) for r in renters]

    def payments_for_renter(self, renter_id, periods=None):
        query = self.session.query(RentPayment).filter(RentPayment.renter_id == renter_id)
        if periods is not None:
            labels = [Period.parse(p).label for p in periods]
            if not labels:
                return []
            query = query.filter(RentPayment.period_month.in_(labels))
        rows = query.order_by(RentPayment.period_month, RentPayment.entry_no).all()
        return [PaymentSnapshot.from_model(p) for p in rows]

    def payments_for_period(self, period):
        label = Period.parse(period).label
        rows = (
            self.session.query(RentPayment)
            .filter(RentPayment.period_month == label)
            .order_by(RentPayment.renter_id, RentPayment.entry_no)
            .all()
        )
        return [PaymentSnapshot.from_model(p) for p in rows]

    def get_payment(self, payment_id) -> PaymentSnapshot:
        payment = self.session.get(RentPayment, payment_id)
        if payment is None:
            raise NotFoundError("Payment not found", code="payment_not_found")
        return PaymentSnapshot.from_model(payment)

    def history_for_collector(self, user_id, limit=100):
        rows = (
            self.session.query(RentPayment)
            .filter(RentPayment.collector_user_id == user_id)
            .order_by(RentPayment.created_at.desc(), RentPayment.id.desc())
            .limit(limit)
            .all()
        )
        return [p.serialize() for p in rows]

    # ---------------- Writes ----------------

    def insert_payments(self, rows):
        """Insert all rows in one transaction; nothing is kept if any row fails."""
        if not rows:
            return []

        models = [
            RentPayment(
                renter_id=row.renter_id,
                collector_user_id=row.collector_user_id,
                period_month=row.period_month,
                entry_no=row.entry_no,
                expected_amount=row.expected_amount,
                received_amount=row.received_amount,
                status=str(row.status),
                payment_mode=row.payment_mode,
                notes=row.notes,
                collection_date=row.collection_date,
            )
            for row in rows
        ]

        try:
            self.session.add_all(models)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            if is_unique_violation(e):
                logger.warning(
                    "Payment insert rolled back, duplicate renter/period among %s",
                    [r.period_month for r in rows],
                )
                raise ConflictError(DUPLICATE_PAYMENT_MESSAGE, code="payment_exists") from e
            raise
        except Exception:
            self.session.rollback()
            raise

        return [PaymentSnapshot.from_model(m) for m in models]

    def update_payment(self, payment_id, **changes) -> PaymentSnapshot:
        payment = self.session.get(RentPayment, payment_id)
        if payment is None:
            raise NotFoundError("Payment not found", code="payment_not_found")

        for field, value in changes.items():
            setattr(payment, field, str(value) if field == "status" else value)

        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return PaymentSnapshot.from_model(payment)
