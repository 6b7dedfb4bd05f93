# app/users/routes.py
from ..services import ledger
from ..utils.api import ok, err
from ..utils.money import to_float
from . import bp


@bp.get("/<int:user_id>/balance")
def get_balance(user_id: int):
    balance = ledger.balance_of(user_id)
    if balance is None:
        return err("User not found", 404)
    return ok("balance", {"balance": to_float(balance)})
