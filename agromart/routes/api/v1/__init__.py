from flask import Blueprint

from agromart.extensions import csrf
from agromart.routes.api.v1.auth import api_auth_bp
from agromart.routes.api.v1.equipment import api_equipment_bp
from agromart.routes.api.v1.listings import api_listing_bp
from agromart.routes.api.v1.market import api_market_bp
from agromart.routes.api.v1.reservations import api_reservation_bp

api_v1_bp = Blueprint("api_v1", __name__)
api_v1_bp.register_blueprint(api_auth_bp, url_prefix="/auth")
api_v1_bp.register_blueprint(api_listing_bp, url_prefix="/listings")
api_v1_bp.register_blueprint(api_equipment_bp, url_prefix="/equipment")
api_v1_bp.register_blueprint(api_reservation_bp, url_prefix="/reservations")
api_v1_bp.register_blueprint(api_market_bp, url_prefix="/prices")

for blueprint in (api_v1_bp, api_auth_bp, api_listing_bp, api_equipment_bp, api_reservation_bp, api_market_bp):
    csrf.exempt(blueprint)
