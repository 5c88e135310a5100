from flask import Blueprint, jsonify

from agromart.decorators import role_required
from agromart.routes.api.v1.helpers import request_payload
from agromart.services import MarketService

api_market_bp = Blueprint("api_market", __name__)


@api_market_bp.get("/today")
def today_prices():
    return jsonify({"success": True, **MarketService.today_prices()})


@api_market_bp.post("")
@role_required("admin")
def record_price():
    price = MarketService.record_price(request_payload())
    return jsonify({"success": True, "data": price.to_dict()}), 201
