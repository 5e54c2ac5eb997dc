from datetime import datetime, date
from rentcore_backend.extensions import db


class RentPayment(db.Model):
    __tablename__ = 'rent_payments'
    # entry_no 0 is the primary record of a period; advance top-ups take the next free slot
    __table_args__ = (
        db.UniqueConstraint('renter_id', 'period_month', 'entry_no', name='uq_rent_payment_period_entry'),
    )

    id = db.Column(db.Integer, primary_key=True)
    renter_id = db.Column(db.Integer, db.ForeignKey('renters.id', ondelete='CASCADE'), nullable=False, index=True)
    collector_user_id = db.Column(db.String(36), db.ForeignKey('profiles.id'), nullable=True, index=True)

    period_month = db.Column(db.String(16), nullable=False, index=True)  # e.g. "Feb-2026"
    entry_no = db.Column(db.Integer, nullable=False, default=0)

    # Financial details
    expected_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    received_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    status = db.Column(db.String(20), nullable=False)  # 'paid', 'partial', 'unpaid'
    payment_mode = db.Column(db.String(20), default='cash')
    notes = db.Column(db.Text, default='')
    collection_date = db.Column(db.Date, default=date.today)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    renter = db.relationship('Renter', back_populates='payments')
    collector = db.relationship('Profile', lazy=True)

    def __repr__(self):
        return f'<RentPayment {self.id}: Renter {self.renter_id}, {self.period_month}, {self.received_amount}/{self.expected_amount}>'

    def serialize(self):
        return {
            "id": self.id,
            "renter_id": self.renter_id,
            "collector_user_id": self.collector_user_id,
            "period_month": self.period_month,
            "entry_no": self.entry_no,
            "expected_amount": float(self.expected_amount or 0),
            "received_amount": float(self.received_amount or 0),
            "status": self.status,
            "payment_mode": self.payment_mode,
            "notes": self.notes,
            "collection_date": self.collection_date.isoformat() if self.collection_date else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "renter_code": self.renter.renter_code if self.renter else None,
            "renter_name": self.renter.name if self.renter else None,
        }
