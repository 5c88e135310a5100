from flask import Blueprint, abort, jsonify
from flask_login import current_user, login_required

from agromart.decorators import object_id_required
from agromart.routes.api.v1.helpers import request_payload
from agromart.services import ReservationService

api_reservation_bp = Blueprint("api_reservation", __name__)


@api_reservation_bp.post("")
@login_required
def create_reservation():
    reservation = ReservationService.create_reservation(current_user.id, request_payload())
    return jsonify({"success": True, "message": "Reservation created", "data": reservation.to_dict()}), 201


@api_reservation_bp.get("/user/<user_id>")
@login_required
@object_id_required("user_id", "user ID")
def user_reservations(user_id):
    if current_user.role != "admin" and current_user.id != user_id:
        abort(403)
    rows = ReservationService.list_for_user(user_id)
    return jsonify({"success": True, "count": len(rows), "data": [row.to_dict() for row in rows]})


@api_reservation_bp.patch("/status")
@login_required
def update_status():
    reservation = ReservationService.update_status(request_payload(), actor=current_user)
    return jsonify({"success": True, "message": "Reservation status updated", "data": reservation.to_dict()})
