import logging

from sqlalchemy import or_

from agromart.decorators import ensure_object_id
from agromart.errors import ValidationFailed
from agromart.models import Listing
from agromart.services.attachments import ImageAttachment
from agromart.services.file_service import FileService
from agromart.services.query_builder import QueryBuilder
from agromart.services.store import get_or_404, transaction
from agromart.utils import (
    clean_text,
    is_blank,
    normalize_payload,
    parse_bool,
    parse_decimal,
    parse_int,
    reject_disallowed_fields,
    require_fields,
)

logger = logging.getLogger(__name__)

FIELD_ALIASES = {
    "productName": "name",
    "deliveryOption": "delivery_option",
    "isActive": "is_active",
}
REQUIRED_FIELDS = ("name", "category", "quantity", "price", "location")
UPDATABLE_FIELDS = ("name", "category", "quantity", "price", "location", "description", "delivery_option", "is_active")
UPLOAD_SUBFOLDER = "listings"


class ListingService:
    @staticmethod
    def _clean(payload):
        """Validate and convert the supplied fields; absent fields are left out."""
        values = {}
        for name in ("name", "category", "location"):
            if name in payload:
                if is_blank(payload[name]):
                    raise ValidationFailed(f"{name.capitalize()} cannot be empty.")
                values[name] = str(payload[name]).strip()
        if "description" in payload:
            values["description"] = clean_text(payload["description"])
        if "quantity" in payload:
            values["quantity"] = parse_int(payload["quantity"], "Quantity")
            if values["quantity"] < 0:
                raise ValidationFailed("Quantity cannot be negative.")
        if "price" in payload:
            values["price"] = parse_decimal(payload["price"], "Price")
            if not values["price"].is_finite() or values["price"] < 0:
                raise ValidationFailed("Price must be a non-negative number.")
        if "delivery_option" in payload:
            option = str(payload["delivery_option"] or "pickup").strip().lower()
            if option not in Listing.DELIVERY_OPTIONS:
                raise ValidationFailed(
                    f"Invalid delivery option. Must be one of: {', '.join(Listing.DELIVERY_OPTIONS)}"
                )
            values["delivery_option"] = option
        if "is_active" in payload:
            values["is_active"] = parse_bool(payload["is_active"], "Is active")
        return values

    @staticmethod
    def builder(default_limit=10, max_limit=100):
        return QueryBuilder(Listing, default_limit=default_limit, max_limit=max_limit, extra_reserved=("search",))

    @staticmethod
    def list_listings(args, default_limit=10, max_limit=100):
        builder = ListingService.builder(default_limit, max_limit)
        list_query = builder.parse(args)
        query = Listing.query
        if not any(expression.field == "is_active" for expression in list_query.filters):
            query = query.filter(Listing.is_active.is_(True))
        search = (list_query.extras.get("search") or "").strip()
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Listing.name.ilike(pattern), Listing.description.ilike(pattern)))
        return builder.execute(list_query, base_query=query)

    @staticmethod
    def list_by_category(category):
        return (
            Listing.query.filter_by(category=category, is_active=True)
            .order_by(Listing.created_at.desc())
            .all()
        )

    @staticmethod
    def get_listing(listing_id):
        return get_or_404(Listing, ensure_object_id(listing_id, "listing ID"), "Listing")

    @staticmethod
    def create_listing(payload, image, upload_root):
        payload = normalize_payload(payload, FIELD_ALIASES)
        require_fields(payload, REQUIRED_FIELDS)
        values = ListingService._clean({k: v for k, v in payload.items() if k in UPDATABLE_FIELDS})

        with ImageAttachment(image, upload_root, UPLOAD_SUBFOLDER) as attachment:
            listing = Listing(image_path=attachment.path, **values)
            with transaction("A listing with these details already exists.") as session:
                session.add(listing)
            attachment.commit()

        logger.info("Listing %s created", listing.id)
        return listing

    @staticmethod
    def update_listing(listing_id, payload, image, upload_root):
        listing_id = ensure_object_id(listing_id, "listing ID")
        listing = get_or_404(Listing, listing_id, "Listing")

        payload = normalize_payload(payload, FIELD_ALIASES)
        reject_disallowed_fields(payload, UPDATABLE_FIELDS)
        values = ListingService._clean(payload)

        with ImageAttachment(image, upload_root, UPLOAD_SUBFOLDER, previous_path=listing.image_path) as attachment:
            with transaction("A listing with these details already exists."):
                for name, value in values.items():
                    setattr(listing, name, value)
                if attachment.staged:
                    listing.image_path = attachment.path
            attachment.commit()

        logger.info("Listing %s updated (%s)", listing.id, ", ".join(sorted(values)) or "image only")
        return listing

    @staticmethod
    def delete_listing(listing_id, upload_root):
        listing = get_or_404(Listing, ensure_object_id(listing_id, "listing ID"), "Listing")
        image_path = listing.image_path
        with transaction() as session:
            session.delete(listing)
        # The record is gone first; a crash here can only orphan the file.
        FileService.delete_file(image_path, upload_root)
        logger.info("Listing %s deleted", listing_id)
        return True
