from agromart.models.equipment import Equipment
from agromart.models.listing import Listing
from agromart.models.market_price import MarketPrice
from agromart.models.reservation import Reservation
from agromart.models.user import User

__all__ = [
    "User",
    "Listing",
    "Equipment",
    "Reservation",
    "MarketPrice",
]
