from datetime import datetime
from rentcore_backend.extensions import db


class Complex(db.Model):
    __tablename__ = 'complexes'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    shops = db.relationship('Shop', back_populates='complex', lazy=True)

    def serialize(self):
        return {"id": self.id, "name": self.name}


class Shop(db.Model):
    __tablename__ = 'shops'
    __table_args__ = (
        db.UniqueConstraint('shop_no', 'complex_id', name='uq_shop_complex'),
    )

    id = db.Column(db.Integer, primary_key=True)
    shop_no = db.Column(db.String(64), nullable=False)
    complex_id = db.Column(db.Integer, db.ForeignKey('complexes.id'), nullable=True)
    category = db.Column(db.String(64), default='Numeric')

    rent_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    rent_collection_day = db.Column(db.Integer, nullable=False, default=1)
    # Inactive shops never count towards expected rent
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    complex = db.relationship('Complex', back_populates='shops')
    assignments = db.relationship('RenterShop', back_populates='shop', cascade='all, delete', lazy=True)

    def __repr__(self):
        return f'<Shop {self.shop_no}: {self.rent_amount} active={self.is_active}>'

    def serialize(self):
        return {
            "id": self.id,
            "shop_no": self.shop_no,
            "complex_id": self.complex_id,
            "complex_name": self.complex.name if self.complex else None,
            "category": self.category,
            "rent_amount": float(self.rent_amount or 0),
            "rent_collection_day": self.rent_collection_day,
            "is_active": self.is_active,
        }
