from flask_login import UserMixin

from agromart.extensions import db
from agromart.models.base import ObjectIdMixin, TimestampMixin


class User(UserMixin, ObjectIdMixin, TimestampMixin, db.Model):
    __tablename__ = "users"

    ROLES = ("farmer", "admin")

    full_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    phone = db.Column(db.String(16), nullable=False, default="")
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(24), nullable=False, default="farmer", index=True)
    last_login = db.Column(db.DateTime(timezone=True), nullable=True)

    reservations = db.relationship("Reservation", back_populates="user", lazy="dynamic")

    def to_dict(self):
        return {"id": self.id, "full_name": self.full_name, "email": self.email, "role": self.role}
