from flask import Blueprint, jsonify, request

from agromart.decorators import object_id_required, role_required
from agromart.routes.api.v1.helpers import query_limits, request_payload, upload_root
from agromart.services import EquipmentService

api_equipment_bp = Blueprint("api_equipment", __name__)


def _uploaded_image():
    storage = request.files.get("image") or request.files.get("toolImage")
    return storage if storage and storage.filename else None


@api_equipment_bp.get("")
def list_equipment():
    page = EquipmentService.list_equipment(request.args, **query_limits())
    return jsonify(page.to_dict())


@api_equipment_bp.get("/<equipment_id>")
@object_id_required("equipment_id", "machine ID")
def get_equipment(equipment_id):
    equipment = EquipmentService.get_equipment(equipment_id)
    return jsonify({"success": True, "data": equipment.to_dict()})


@api_equipment_bp.post("")
@role_required("admin")
def create_equipment():
    equipment = EquipmentService.create_equipment(request_payload(), _uploaded_image(), upload_root())
    return jsonify({"success": True, "data": equipment.to_dict()}), 201


@api_equipment_bp.put("/<equipment_id>")
@role_required("admin")
@object_id_required("equipment_id", "machine ID")
def update_equipment(equipment_id):
    equipment = EquipmentService.update_equipment(equipment_id, request_payload(), _uploaded_image(), upload_root())
    return jsonify({"success": True, "data": equipment.to_dict()})


@api_equipment_bp.delete("/<equipment_id>")
@role_required("admin")
@object_id_required("equipment_id", "machine ID")
def delete_equipment(equipment_id):
    EquipmentService.delete_equipment(equipment_id, upload_root())
    return jsonify({"success": True, "data": {}})
