# app/order/routes.py
from ..services import orders
from ..utils.api import ok
from ..utils.decorators import principal_required, current_principal
from . import bp


@bp.get("")
@principal_required
def list_orders():
    """The signed-in buyer's orders, newest first, each with its lines."""
    items = [o.as_api() for o in orders.orders_for(current_principal().id)]
    return ok("orders", {"orders": items})
