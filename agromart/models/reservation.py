from agromart.extensions import db
from agromart.models.base import ObjectIdMixin, SerializerMixin, TimestampMixin


class Reservation(ObjectIdMixin, TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "reservations"

    ITEM_TYPES = ("crop", "tool")
    STATUSES = ("pending", "confirmed", "cancelled", "completed")

    user_id = db.Column(db.String(24), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Points at a listing (crop) or equipment row (tool) depending on item_type.
    item_id = db.Column(db.String(24), nullable=False, index=True)
    item_type = db.Column(db.String(8), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    rental_hours = db.Column(db.Integer, nullable=False, default=0)
    preferred_date = db.Column(db.DateTime(timezone=True), nullable=True)
    start_date = db.Column(db.DateTime(timezone=True), nullable=True)
    end_date = db.Column(db.DateTime(timezone=True), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)
    notes = db.Column(db.Text, nullable=True)

    user = db.relationship("User", back_populates="reservations")

    public_fields = (
        "id",
        "user_id",
        "item_id",
        "item_type",
        "quantity",
        "rental_hours",
        "preferred_date",
        "start_date",
        "end_date",
        "status",
        "notes",
        "created_at",
        "updated_at",
    )

    __table_args__ = (db.Index("ix_reservations_user_created", "user_id", "created_at"),)
