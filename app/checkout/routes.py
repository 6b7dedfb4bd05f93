# app/checkout/routes.py
from flask import request, jsonify

from ..services.checkout import place_order
from ..utils.api import api_ok, iso_utc
from ..utils.decorators import principal_required, current_principal
from ..utils.money import to_float
from . import bp


@bp.post("")
@principal_required
def checkout():
    """
    Body: {
      "shipping": {firstName, lastName, address, city, postal, phone},
      "items": [{"productId": int, "quantity": int, "size": str?}]
    }
    """
    buyer = current_principal()
    result = place_order(buyer.id, request.get_json(silent=True) or {})

    data = {
        "success": True,
        "orderId": result.order_id,
        "orderDate": iso_utc(result.order_date),
        "newBalance": to_float(result.new_balance),
    }
    return jsonify({**api_ok("order placed", data), **data}), 200
