from datetime import date
from decimal import Decimal

import pytest
from flask_jwt_extended import create_access_token

from rentcore_backend import create_app
from rentcore_backend.config import TestingConfig
from rentcore_backend.extensions import db as _db
from rentcore_backend.models import Complex, Profile, Renter, RenterShop, RentPayment, Shop
from rentcore_backend.services.snapshots import (
    AssignmentSnapshot, PaymentSnapshot, RenterSnapshot, ShopSnapshot,
)
from rentcore_backend.services.store import RentStore

# Fixed "today" for everything that is not an HTTP round trip
TODAY = date(2026, 2, 10)


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return _db.session


@pytest.fixture
def store(session):
    return RentStore(session)


@pytest.fixture
def make_renter(session):
    """Create a renter holding one shop per rent amount."""
    counter = {"shop": 0}

    def _make(code, rents=(5000,), inactive=(), deposits=None, name=None):
        complex_ = session.query(Complex).filter_by(name="Main Market").first()
        if complex_ is None:
            complex_ = Complex(name="Main Market")
            session.add(complex_)

        renter = Renter(renter_code=code, name=name or f"Renter {code}", phone="")
        session.add(renter)
        for i, rent in enumerate(rents):
            counter["shop"] += 1
            shop = Shop(
                shop_no=f"S-{counter['shop']}",
                complex=complex_,
                rent_amount=Decimal(str(rent)),
                is_active=i not in inactive,
            )
            expected_deposit, deposit_amount = (deposits[i] if deposits else (0, 0))
            session.add(RenterShop(
                renter=renter,
                shop=shop,
                expected_deposit=Decimal(str(expected_deposit)),
                deposit_amount=Decimal(str(deposit_amount)),
            ))
        session.commit()
        return renter

    return _make


@pytest.fixture
def add_payment(session):
    def _add(renter, period_month, received, expected=5000, entry_no=0, status=None, collector=None):
        payment = RentPayment(
            renter_id=renter.id,
            period_month=period_month,
            entry_no=entry_no,
            expected_amount=Decimal(str(expected)),
            received_amount=Decimal(str(received)),
            status=status or ("paid" if Decimal(str(received)) >= Decimal(str(expected)) else "partial"),
            collection_date=TODAY,
            collector_user_id=collector.id if collector else None,
        )
        session.add(payment)
        session.commit()
        return payment

    return _add


@pytest.fixture
def make_user(session):
    def _make(role="collector", email=None, password="secret123"):
        user = Profile(email=email or f"{role}@example.com", role=role, full_name=role.title())
        user.set_password(password)
        session.add(user)
        session.commit()
        return user

    return _make


@pytest.fixture
def auth_headers(app, make_user):
    """Bearer headers for a freshly created user of the given role."""
    def _headers(role="collector"):
        user = make_user(role=role)
        token = create_access_token(identity=user.id, additional_claims={"role": role, "email": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _headers


# ---------------- Plain snapshots for the pure functions ----------------

@pytest.fixture
def renter_snapshot():
    def _make(renter_id=1, code="R-001", rents=(3000, 2000), inactive=(), deposits=None):
        assignments = []
        for i, rent in enumerate(rents):
            expected_deposit, deposit_amount = (deposits[i] if deposits else (0, 0))
            assignments.append(AssignmentSnapshot(
                id=renter_id * 100 + i,
                renter_id=renter_id,
                shop=ShopSnapshot(
                    id=renter_id * 100 + i,
                    shop_no=f"{code}-S{i}",
                    rent_amount=Decimal(str(rent)).quantize(Decimal("0.01")),
                    is_active=i not in inactive,
                ),
                expected_deposit=Decimal(str(expected_deposit)),
                deposit_amount=Decimal(str(deposit_amount)),
            ))
        return RenterSnapshot(id=renter_id, renter_code=code, name=f"Renter {code}",
                              assignments=tuple(assignments))

    return _make


@pytest.fixture
def payment_snapshot():
    def _make(renter_id, period_month, received, expected=5000, entry_no=0):
        return PaymentSnapshot(
            id=None,
            renter_id=renter_id,
            period_month=period_month,
            expected_amount=Decimal(str(expected)),
            received_amount=Decimal(str(received)),
            status="paid" if received >= expected else "partial",
            entry_no=entry_no,
        )

    return _make
