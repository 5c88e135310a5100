import logging
import math

from agromart.decorators import ensure_object_id
from agromart.errors import Forbidden, NotFound, ValidationFailed
from agromart.extensions import db
from agromart.models import Equipment, Listing, Reservation
from agromart.models.base import utcnow
from agromart.services.store import get_or_404, transaction
from agromart.utils import clean_text, is_blank, normalize_payload, parse_datetime, parse_int

logger = logging.getLogger(__name__)

FIELD_ALIASES = {
    "itemId": "item_id",
    "itemType": "item_type",
    "rentalHours": "rental_hours",
    "preferredDate": "preferred_date",
    "startDate": "start_date",
    "endDate": "end_date",
    "prebooking_id": "reservation_id",
}
ITEM_MODELS = {"crop": Listing, "tool": Equipment}


class ReservationService:
    @staticmethod
    def _positive(value, label):
        number = parse_int(value, label)
        if number <= 0:
            raise ValidationFailed(f"{label} must be greater than zero.")
        return number

    @staticmethod
    def _crop_fields(payload):
        if is_blank(payload.get("quantity")):
            raise ValidationFailed("Quantity is required.")
        preferred = payload.get("preferred_date")
        return {
            "quantity": ReservationService._positive(payload["quantity"], "Quantity"),
            "preferred_date": utcnow() if is_blank(preferred) else parse_datetime(preferred, "preferred"),
        }

    @staticmethod
    def _tool_fields(payload):
        start = None if is_blank(payload.get("start_date")) else parse_datetime(payload["start_date"], "start")
        end = None if is_blank(payload.get("end_date")) else parse_datetime(payload["end_date"], "end")
        if start and end and start >= end:
            raise ValidationFailed("End date must be after start date.")

        raw_hours = payload.get("rental_hours")
        if is_blank(raw_hours) and start and end:
            hours = math.ceil((end - start).total_seconds() / 3600)
        elif is_blank(raw_hours):
            raise ValidationFailed("Rental hours are required.")
        else:
            hours = ReservationService._positive(raw_hours, "Rental hours")
        return {"rental_hours": hours, "start_date": start, "end_date": end}

    @staticmethod
    def create_reservation(user_id, payload):
        payload = normalize_payload(payload, FIELD_ALIASES)
        if is_blank(payload.get("item_id")):
            raise ValidationFailed("Item reference is required.")
        item_id = ensure_object_id(str(payload["item_id"]).strip(), "item ID")

        item_type = str(payload.get("item_type") or "").strip().lower()
        if item_type not in Reservation.ITEM_TYPES:
            raise ValidationFailed(f"Invalid item type. Must be one of: {', '.join(Reservation.ITEM_TYPES)}")

        if item_type == "crop":
            values = ReservationService._crop_fields(payload)
        else:
            values = ReservationService._tool_fields(payload)

        if db.session.get(ITEM_MODELS[item_type], item_id) is None:
            raise NotFound("Item not found")

        reservation = Reservation(
            user_id=user_id,
            item_id=item_id,
            item_type=item_type,
            status="pending",
            notes=clean_text(payload.get("notes")),
            **values,
        )
        with transaction() as session:
            session.add(reservation)
        logger.info("Reservation %s created for user %s (%s %s)", reservation.id, user_id, item_type, item_id)
        return reservation

    @staticmethod
    def list_for_user(user_id):
        user_id = ensure_object_id(user_id, "user ID")
        return (
            Reservation.query.filter_by(user_id=user_id)
            .order_by(Reservation.created_at.desc(), Reservation.id.asc())
            .all()
        )

    @staticmethod
    def update_status(payload, actor=None):
        payload = normalize_payload(payload, FIELD_ALIASES)
        if is_blank(payload.get("reservation_id")):
            raise ValidationFailed("Reservation ID is required.")
        reservation_id = ensure_object_id(str(payload["reservation_id"]).strip(), "reservation ID")

        status = str(payload.get("status") or "").strip().lower()
        if status not in Reservation.STATUSES:
            raise ValidationFailed(f"Invalid status. Must be one of: {', '.join(Reservation.STATUSES)}")

        reservation = get_or_404(Reservation, reservation_id, "Reservation")
        if actor is not None and actor.role != "admin" and reservation.user_id != actor.id:
            raise Forbidden("You can only update your own reservations.")
        previous = reservation.status
        # Any listed status may follow any other.
        with transaction():
            reservation.status = status
            reservation.updated_at = utcnow()
        logger.info("Reservation %s status %s -> %s", reservation.id, previous, status)
        return reservation
