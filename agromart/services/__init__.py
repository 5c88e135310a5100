from agromart.services.attachments import ImageAttachment
from agromart.services.auth_service import AuthService
from agromart.services.equipment_service import EquipmentService
from agromart.services.file_service import FileService
from agromart.services.listing_service import ListingService
from agromart.services.market_service import MarketService
from agromart.services.query_builder import QueryBuilder
from agromart.services.reservation_service import ReservationService

__all__ = [
    "AuthService",
    "EquipmentService",
    "FileService",
    "ImageAttachment",
    "ListingService",
    "MarketService",
    "QueryBuilder",
    "ReservationService",
]
