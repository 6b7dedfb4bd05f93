# app/cart/routes.py
from __future__ import annotations
from flask import request

from ..extensions import db
from ..model import Product
from ..services import cart_service
from ..utils.api import ok, err
from ..utils.decorators import principal_required, current_principal
from . import bp


# ---- helpers ---------------------------------------------------------------

def _parse_qty(v):
    if isinstance(v, bool):
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _line_args(data: dict, need_qty: bool = True):
    """Returns (product, size, qty, error_response)."""
    product_id = _parse_qty(data.get("productId"))
    if not product_id:
        return None, None, None, err("productId is required", 400)

    qty = None
    if need_qty:
        qty = _parse_qty(data.get("quantity", 1))
        if qty is None or qty < 1:
            return None, None, None, err("Invalid quantity", 400)

    product: Product | None = db.session.get(Product, product_id)
    if not product:
        return None, None, None, err("product not found", 404)

    size = (str(data.get("size")).strip() if data.get("size") else "") or None
    if need_qty and product.is_sized:
        if not size:
            return None, None, None, err("size is required for this product", 400)
        if size not in {s.size for s in product.sizes}:
            return None, None, None, err(f"size {size} not offered", 404)
    elif need_qty and size:
        return None, None, None, err("this product has no sizes", 400)

    return product, size, qty, None


# ---- endpoints -------------------------------------------------------------

@bp.get("")
@principal_required
def get_cart():
    return ok("cart", {"items": cart_service.lines(current_principal().id)})


@bp.post("")
@principal_required
def add_item():
    """
    Body: { "productId": int, "size": str?, "quantity": int }
    """
    data = request.get_json(silent=True) or {}
    product, size, qty, error = _line_args(data)
    if error:
        return error

    user_id = current_principal().id
    cart_service.add_line(user_id, product.id, qty, size)
    return ok("item added", {"items": cart_service.lines(user_id)}, status=201)


@bp.put("")
@bp.patch("")
@principal_required
def update_item():
    """
    Body: { "productId": int, "size": str?, "quantity": int }
    """
    data = request.get_json(silent=True) or {}
    if "quantity" not in data:
        return err("quantity is required", 400)
    product, size, qty, error = _line_args(data)
    if error:
        return error

    user_id = current_principal().id
    if not cart_service.set_quantity(user_id, product.id, qty, size):
        return err("item not found in this cart", 404)
    return ok("item updated", {"items": cart_service.lines(user_id)})


@bp.delete("")
@principal_required
def remove_item():
    """
    Body: { "productId": int, "size": str? }
    """
    data = request.get_json(silent=True) or {}
    product, size, _, error = _line_args(data, need_qty=False)
    if error:
        return error

    user_id = current_principal().id
    if not cart_service.remove_line(user_id, product.id, size):
        return err("item not found in this cart", 404)
    return ok("item removed", {"items": cart_service.lines(user_id)})
