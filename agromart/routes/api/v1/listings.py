from flask import Blueprint, jsonify, request

from agromart.decorators import object_id_required, role_required
from agromart.routes.api.v1.helpers import query_limits, request_payload, upload_root
from agromart.services import ListingService

api_listing_bp = Blueprint("api_listing", __name__)

IMAGE_FIELD_NAMES = ("image", "productImage")


def _uploaded_image():
    for name in IMAGE_FIELD_NAMES:
        storage = request.files.get(name)
        if storage and storage.filename:
            return storage
    return None


@api_listing_bp.get("")
def list_listings():
    page = ListingService.list_listings(request.args, **query_limits())
    return jsonify(page.to_dict())


@api_listing_bp.get("/category/<category>")
def listings_by_category(category):
    rows = ListingService.list_by_category(category)
    return jsonify({"success": True, "count": len(rows), "data": [row.to_dict() for row in rows]})


@api_listing_bp.get("/<listing_id>")
@object_id_required("listing_id", "listing ID")
def get_listing(listing_id):
    listing = ListingService.get_listing(listing_id)
    return jsonify({"success": True, "data": listing.to_dict()})


@api_listing_bp.post("")
@role_required("admin")
def create_listing():
    listing = ListingService.create_listing(request_payload(), _uploaded_image(), upload_root())
    return jsonify({"success": True, "message": "Listing created successfully", "data": listing.to_dict()}), 201


@api_listing_bp.put("/<listing_id>")
@role_required("admin")
@object_id_required("listing_id", "listing ID")
def update_listing(listing_id):
    listing = ListingService.update_listing(listing_id, request_payload(), _uploaded_image(), upload_root())
    return jsonify({"success": True, "message": "Listing updated successfully", "data": listing.to_dict()})


@api_listing_bp.delete("/<listing_id>")
@role_required("admin")
@object_id_required("listing_id", "listing ID")
def delete_listing(listing_id):
    ListingService.delete_listing(listing_id, upload_root())
    return jsonify({"success": True, "message": "Listing deleted successfully"})
