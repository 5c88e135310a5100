from flask import Blueprint, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from agromart.extensions import limiter
from agromart.routes.api.v1.helpers import request_payload
from agromart.services import AuthService

api_auth_bp = Blueprint("api_auth", __name__)


@api_auth_bp.post("/register")
@limiter.limit("20 per minute")
def api_register():
    payload = request_payload()
    user = AuthService.register_user(
        full_name=payload.get("full_name") or payload.get("name", ""),
        email=payload.get("email", ""),
        password=payload.get("password", ""),
        phone=payload.get("phone", ""),
    )
    login_user(user)
    return jsonify({"success": True, "data": user.to_dict()}), 201


@api_auth_bp.post("/login")
@limiter.limit("30 per minute")
def api_login():
    payload = request_payload()
    user = AuthService.authenticate_user(payload.get("email", ""), payload.get("password", ""))
    login_user(user)
    return jsonify({"success": True, "data": user.to_dict()})


@api_auth_bp.post("/logout")
@login_required
def api_logout():
    logout_user()
    return jsonify({"success": True})


@api_auth_bp.get("/me")
@login_required
def api_me():
    return jsonify({"success": True, "data": current_user.to_dict()})
