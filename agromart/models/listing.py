from agromart.extensions import db
from agromart.models.base import ObjectIdMixin, SerializerMixin, TimestampMixin


class Listing(ObjectIdMixin, TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "listings"

    DELIVERY_OPTIONS = ("pickup", "delivery", "both")

    name = db.Column(db.String(140), nullable=False, index=True)
    category = db.Column(db.String(80), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    location = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    delivery_option = db.Column(db.String(16), nullable=False, default="pickup")
    image_path = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    public_fields = (
        "id",
        "name",
        "category",
        "quantity",
        "price",
        "location",
        "description",
        "delivery_option",
        "image_path",
        "is_active",
        "created_at",
        "updated_at",
    )

    __table_args__ = (
        db.Index("ix_listings_category_active", "category", "is_active"),
        db.CheckConstraint("quantity >= 0", name="ck_listing_quantity_non_negative"),
        db.CheckConstraint("price >= 0", name="ck_listing_price_non_negative"),
    )
