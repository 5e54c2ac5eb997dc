from datetime import datetime
from rentcore_backend.extensions import db


class Renter(db.Model):
    __tablename__ = 'renters'

    id = db.Column(db.Integer, primary_key=True)
    renter_code = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), default='')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Deleting a renter removes its shop links and its payment ledger
    assignments = db.relationship('RenterShop', back_populates='renter', cascade='all, delete-orphan', lazy=True)
    payments = db.relationship('RentPayment', back_populates='renter', cascade='all, delete-orphan', lazy=True)

    def __repr__(self):
        return f'<Renter {self.renter_code}: {self.name}>'

    def serialize(self):
        return {
            "id": self.id,
            "renter_code": self.renter_code,
            "name": self.name,
            "phone": self.phone,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class RenterShop(db.Model):
    """Links a renter to a shop; carries the security deposit for that shop."""
    __tablename__ = 'renter_shops'
    __table_args__ = (
        db.UniqueConstraint('renter_id', 'shop_id', name='uq_renter_shop'),
    )

    id = db.Column(db.Integer, primary_key=True)
    renter_id = db.Column(db.Integer, db.ForeignKey('renters.id', ondelete='CASCADE'), nullable=False, index=True)
    shop_id = db.Column(db.Integer, db.ForeignKey('shops.id', ondelete='CASCADE'), nullable=False)

    expected_deposit = db.Column(db.Numeric(10, 2), default=0)
    deposit_amount = db.Column(db.Numeric(10, 2), default=0)  # collected so far
    deposit_date = db.Column(db.Date, nullable=True)
    deposit_remarks = db.Column(db.Text, default='')

    renter = db.relationship('Renter', back_populates='assignments')
    shop = db.relationship('Shop', back_populates='assignments')

    def serialize(self):
        return {
            "id": self.id,
            "renter_id": self.renter_id,
            "shop_id": self.shop_id,
            "expected_deposit": float(self.expected_deposit or 0),
            "deposit_amount": float(self.deposit_amount or 0),
            "deposit_date": self.deposit_date.isoformat() if self.deposit_date else None,
            "deposit_remarks": self.deposit_remarks,
            "shop": self.shop.serialize() if self.shop else None,
        }
