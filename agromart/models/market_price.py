from agromart.extensions import db
from agromart.models.base import ObjectIdMixin, SerializerMixin, TimestampMixin


class MarketPrice(ObjectIdMixin, TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "market_prices"

    commodity = db.Column(db.String(120), nullable=False, index=True)
    unit = db.Column(db.String(24), nullable=False, default="kg")
    min_price = db.Column(db.Numeric(12, 2), nullable=False)
    max_price = db.Column(db.Numeric(12, 2), nullable=False)
    avg_price = db.Column(db.Numeric(12, 2), nullable=False)
    market = db.Column(db.String(120), nullable=True)
    price_date = db.Column(db.Date, nullable=False, index=True)

    public_fields = ("id", "commodity", "unit", "min_price", "max_price", "avg_price", "market", "price_date")

    __table_args__ = (
        db.UniqueConstraint("commodity", "market", "price_date", name="uq_market_price_day"),
    )
