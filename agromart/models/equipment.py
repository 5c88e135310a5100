from agromart.extensions import db
from agromart.models.base import ObjectIdMixin, SerializerMixin, TimestampMixin, as_utc, utcnow


class Equipment(ObjectIdMixin, TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "equipment"

    CATEGORIES = ("Tractor", "Tiller", "Harvester")

    name = db.Column(db.String(140), nullable=False, unique=True, index=True)
    category = db.Column(db.String(24), nullable=False, index=True)
    price_per_hour = db.Column(db.Numeric(10, 2), nullable=False)
    available_from = db.Column(db.DateTime(timezone=True), nullable=False)
    available_to = db.Column(db.DateTime(timezone=True), nullable=False)
    pickup_option = db.Column(db.String(120), nullable=True)
    rental_terms = db.Column(db.Text, nullable=True)
    image_path = db.Column(db.String(500), nullable=True)

    public_fields = (
        "id",
        "name",
        "category",
        "price_per_hour",
        "available_from",
        "available_to",
        "pickup_option",
        "rental_terms",
        "image_path",
        "created_at",
        "updated_at",
    )

    __table_args__ = (
        db.CheckConstraint("price_per_hour > 0", name="ck_equipment_price_positive"),
        db.CheckConstraint("available_from < available_to", name="ck_equipment_window_ordered"),
    )

    def is_available_at(self, moment):
        return as_utc(self.available_from) <= moment <= as_utc(self.available_to)

    computed_fields = ("is_available",)

    @property
    def is_available(self):
        return self.is_available_at(utcnow())
