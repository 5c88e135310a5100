from flask import Blueprint, current_app, jsonify, send_from_directory

public_bp = Blueprint("public", __name__)


@public_bp.get("/")
def index():
    return jsonify({"success": True, "message": "AgroMart API is running"})


@public_bp.get("/uploads/<path:filename>")
def uploaded_file(filename):
    return send_from_directory(current_app.config["UPLOAD_DIR"], filename)
