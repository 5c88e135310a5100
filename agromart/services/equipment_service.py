import logging

from agromart.decorators import ensure_object_id
from agromart.errors import ValidationFailed
from agromart.models import Equipment
from agromart.models.base import as_utc
from agromart.services.attachments import ImageAttachment
from agromart.services.file_service import FileService
from agromart.services.query_builder import QueryBuilder
from agromart.services.store import get_or_404, transaction
from agromart.utils import (
    clean_text,
    is_blank,
    normalize_payload,
    parse_datetime,
    parse_decimal,
    reject_disallowed_fields,
    require_fields,
)

logger = logging.getLogger(__name__)

FIELD_ALIASES = {
    "toolName": "name",
    "rentalPricePerHour": "price_per_hour",
    "availableFrom": "available_from",
    "availableTo": "available_to",
    "pickupOption": "pickup_option",
    "rentalTerms": "rental_terms",
}
REQUIRED_FIELDS = ("name", "category", "price_per_hour", "available_from", "available_to")
UPDATABLE_FIELDS = (
    "name",
    "category",
    "price_per_hour",
    "available_from",
    "available_to",
    "pickup_option",
    "rental_terms",
)
UPLOAD_SUBFOLDER = "equipment"
DUPLICATE_MESSAGE = "Machine with this name already exists"


class EquipmentService:
    @staticmethod
    def _clean(payload):
        values = {}
        if "name" in payload:
            if is_blank(payload["name"]):
                raise ValidationFailed("Name cannot be empty.")
            values["name"] = str(payload["name"]).strip()
        if "category" in payload:
            category = str(payload["category"] or "").strip()
            if category not in Equipment.CATEGORIES:
                raise ValidationFailed(f"Invalid category. Must be one of: {', '.join(Equipment.CATEGORIES)}")
            values["category"] = category
        if "price_per_hour" in payload:
            price = parse_decimal(payload["price_per_hour"], "Rental price per hour")
            if not price.is_finite() or price <= 0:
                raise ValidationFailed("Rental price per hour must be a positive number.")
            values["price_per_hour"] = price
        for name, label in (("available_from", "available from"), ("available_to", "available to")):
            if name in payload:
                values[name] = parse_datetime(payload[name], label)
        for name in ("pickup_option", "rental_terms"):
            if name in payload:
                values[name] = clean_text(payload[name])

        if "available_from" in values and "available_to" in values:
            EquipmentService._check_window(values["available_from"], values["available_to"])
        return values

    @staticmethod
    def _check_window(available_from, available_to):
        if available_from >= available_to:
            raise ValidationFailed("Available To date must be after Available From date")

    @staticmethod
    def list_equipment(args, default_limit=10, max_limit=100):
        builder = QueryBuilder(Equipment, default_limit=default_limit, max_limit=max_limit)
        return builder.execute(builder.parse(args))

    @staticmethod
    def get_equipment(equipment_id):
        return get_or_404(Equipment, ensure_object_id(equipment_id, "machine ID"), "Machine")

    @staticmethod
    def create_equipment(payload, image, upload_root):
        payload = normalize_payload(payload, FIELD_ALIASES)
        require_fields(payload, REQUIRED_FIELDS)
        values = EquipmentService._clean({k: v for k, v in payload.items() if k in UPDATABLE_FIELDS})

        with ImageAttachment(image, upload_root, UPLOAD_SUBFOLDER) as attachment:
            equipment = Equipment(image_path=attachment.path, **values)
            # Single transaction so any follow-up writes land or fail together.
            with transaction(DUPLICATE_MESSAGE) as session:
                session.add(equipment)
            attachment.commit()

        logger.info("Machine %s created", equipment.id)
        return equipment

    @staticmethod
    def update_equipment(equipment_id, payload, image, upload_root):
        equipment_id = ensure_object_id(equipment_id, "machine ID")
        equipment = get_or_404(Equipment, equipment_id, "Machine")

        payload = normalize_payload(payload, FIELD_ALIASES)
        reject_disallowed_fields(payload, UPDATABLE_FIELDS)
        values = EquipmentService._clean(payload)
        if "available_from" in values or "available_to" in values:
            EquipmentService._check_window(
                values.get("available_from", as_utc(equipment.available_from)),
                values.get("available_to", as_utc(equipment.available_to)),
            )

        with ImageAttachment(image, upload_root, UPLOAD_SUBFOLDER, previous_path=equipment.image_path) as attachment:
            with transaction(DUPLICATE_MESSAGE):
                for name, value in values.items():
                    setattr(equipment, name, value)
                if attachment.staged:
                    equipment.image_path = attachment.path
            attachment.commit()

        logger.info("Machine %s updated", equipment.id)
        return equipment

    @staticmethod
    def delete_equipment(equipment_id, upload_root):
        equipment = get_or_404(Equipment, ensure_object_id(equipment_id, "machine ID"), "Machine")
        image_path = equipment.image_path
        with transaction() as session:
            session.delete(equipment)
        FileService.delete_file(image_path, upload_root)
        logger.info("Machine %s deleted", equipment_id)
        return True
