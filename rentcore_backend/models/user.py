import uuid
from datetime import datetime
from passlib.hash import pbkdf2_sha256 as hasher
from rentcore_backend.extensions import db


class Profile(db.Model):
    __tablename__ = 'profiles'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255), nullable=False, default='')
    role = db.Column(db.String(20), nullable=False, default='collector')  # 'admin', 'collector', 'owner'
    is_approved = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def set_password(self, raw):
        self.password_hash = hasher.hash(raw)

    def check_password(self, raw):
        return hasher.verify(raw, self.password_hash)

    def serialize(self):
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "is_approved": self.is_approved,
        }
