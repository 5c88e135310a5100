import logging
from decimal import Decimal

from sqlalchemy import func

from agromart.errors import ValidationFailed
from agromart.extensions import cache, db
from agromart.models import MarketPrice
from agromart.services.store import transaction
from agromart.utils import clean_text, is_blank, parse_date, parse_decimal, require_fields

logger = logging.getLogger(__name__)


class MarketService:
    @staticmethod
    @cache.memoize(timeout=300)
    def today_prices():
        """Prices for the most recent trading day on record, as plain dicts."""
        latest = db.session.query(func.max(MarketPrice.price_date)).scalar()
        if latest is None:
            return {"date": None, "prices": []}
        rows = (
            MarketPrice.query.filter_by(price_date=latest)
            .order_by(MarketPrice.commodity.asc(), MarketPrice.market.asc())
            .all()
        )
        return {"date": latest.isoformat(), "prices": [row.to_dict() for row in rows]}

    @staticmethod
    def record_price(payload):
        require_fields(payload, ("commodity", "min_price", "max_price", "price_date"))
        min_price = parse_decimal(payload["min_price"], "Min price")
        max_price = parse_decimal(payload["max_price"], "Max price")
        if min_price < 0 or max_price < min_price:
            raise ValidationFailed("Prices must satisfy 0 <= min_price <= max_price.")
        if is_blank(payload.get("avg_price")):
            avg_price = ((min_price + max_price) / 2).quantize(Decimal("0.01"))
        else:
            avg_price = parse_decimal(payload["avg_price"], "Average price")
            if not min_price <= avg_price <= max_price:
                raise ValidationFailed("Average price must lie between min_price and max_price.")

        price = MarketPrice(
            commodity=str(payload["commodity"]).strip(),
            unit=clean_text(payload.get("unit")) or "kg",
            min_price=min_price,
            max_price=max_price,
            avg_price=avg_price,
            market=clean_text(payload.get("market")),
            price_date=parse_date(payload["price_date"], "price"),
        )
        with transaction("A price for this commodity, market and day already exists.") as session:
            session.add(price)
        cache.delete_memoized(MarketService.today_prices)
        logger.info("Recorded %s price for %s", price.commodity, price.price_date)
        return price
