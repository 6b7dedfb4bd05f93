# app/services/checkout.py
"""Turn a buyer's cart lines into a placed order.

Prices are resolved up front from a catalog snapshot. Then a single
transaction locks every principal involved (ascending id), moves the money,
writes the order and its lines, takes the stock and clears the cart. The
confirmation mail is queued only after that transaction has committed.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from flask import current_app
from sqlalchemy import delete, select

from ..extensions import db
from ..model import Cart, CartItem, User
from ..errors import CheckoutError, ValidationError, NotFoundError
from ..utils.money import D, round_money
from . import catalog, inventory, ledger, notifier, orders
from .uow import unit_of_work

SHIPPING_FIELDS = ("firstName", "lastName", "address", "city", "postal", "phone")


@dataclass(frozen=True)
class CheckoutLine:
    product_id: int
    quantity: int
    size: str | None = None


@dataclass(frozen=True)
class CheckoutResult:
    order_id: int
    order_date: datetime
    new_balance: Decimal


# ---- input -----------------------------------------------------------------

def _parse_int(v):
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError:
            return None
    return None


def parse_shipping(shipping) -> dict:
    if not isinstance(shipping, dict):
        shipping = {}
    cleaned = {}
    for f in SHIPPING_FIELDS:
        v = shipping.get(f)
        if not isinstance(v, str) or not v.strip():
            raise ValidationError(f"Missing shipping.{f}", {"field": f"shipping.{f}"})
        cleaned[f] = v.strip()
    return cleaned


def parse_lines(items) -> list[CheckoutLine]:
    if not isinstance(items, list) or not items:
        raise ValidationError("Cart is empty")

    lines = []
    for idx, raw in enumerate(items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{idx}] must be an object")
        pid = _parse_int(raw.get("productId"))
        if pid is None:
            raise ValidationError(f"items[{idx}].productId is required", {"field": f"items[{idx}].productId"})
        qty = _parse_int(raw.get("quantity"))
        if qty is None or qty < 1:
            raise ValidationError(f"items[{idx}].quantity must be >= 1", {"field": f"items[{idx}].quantity"})
        size = raw.get("size")
        size = str(size).strip() if size not in (None, "") else None
        lines.append(CheckoutLine(product_id=pid, quantity=qty, size=size or None))
    return lines


def flatten_address(shipping: dict) -> str:
    return f"{shipping['address']}, {shipping['city']} {shipping['postal']}"


# ---- pricing ---------------------------------------------------------------

def settle(lines, products) -> tuple[Decimal, list[tuple[int, Decimal]]]:
    """Grand total and per-seller credits as [(seller_id, amount)] by ascending seller id.

    Lines for the same seller merge into one credit, so the credits always
    sum to the total.
    """
    total = D(0)
    by_seller = defaultdict(lambda: D(0))
    for line in lines:
        meta = products.get(line.product_id)
        if meta is None:
            raise NotFoundError(f"Invalid product {line.product_id}", {"productId": line.product_id})
        amount = round_money(meta.price * line.quantity)
        total += amount
        by_seller[meta.seller_id] += amount
    return round_money(total), sorted(by_seller.items())


# ---- checkout --------------------------------------------------------------

def _clear_cart(buyer_id: int) -> None:
    cart_ids = select(Cart.id).where(Cart.user_id == buyer_id).scalar_subquery()
    db.session.execute(
        delete(CartItem)
        .where(CartItem.cart_id == cart_ids)
        .execution_options(synchronize_session=False)
    )


def place_order(buyer_id: int, payload: dict) -> CheckoutResult:
    payload = payload if isinstance(payload, dict) else {}
    lines = parse_lines(payload.get("items"))
    shipping = parse_shipping(payload.get("shipping"))

    products = catalog.snapshot(line.product_id for line in lines)
    total, credits = settle(lines, products)

    try:
        with unit_of_work(current_app.config.get("CHECKOUT_STATEMENT_TIMEOUT_MS")):
            ledger.lock_principals([buyer_id, *(sid for sid, _ in credits)])
            new_balance = ledger.debit(buyer_id, total)
            for seller_id, amount in credits:
                ledger.credit(seller_id, amount)

            order_id, order_date = orders.create_order(buyer_id, total, flatten_address(shipping))
            for line in lines:
                orders.add_order_item(
                    order_id, line.product_id, line.quantity, products[line.product_id].price, line.size
                )
                inventory.decrement(line.product_id, line.quantity, line.size)

            _clear_cart(buyer_id)
    except CheckoutError as e:
        current_app.logger.info("checkout aborted buyer=%s: %s %s", buyer_id, type(e).__name__, e.message)
        raise

    current_app.logger.info("order %s placed buyer=%s total=%s sellers=%s", order_id, buyer_id, total, len(credits))
    _queue_confirmation(buyer_id, order_id, shipping, lines, products)
    return CheckoutResult(order_id=order_id, order_date=order_date, new_balance=round_money(new_balance))


def _queue_confirmation(buyer_id, order_id, shipping, lines, products) -> None:
    """Best effort; the order is already committed whatever happens here."""
    try:
        balance = ledger.balance_of(buyer_id)
        email = db.session.execute(select(User.email).where(User.id == buyer_id)).scalar_one()
        html = notifier.render_order_confirmation(
            f"{shipping['firstName']} {shipping['lastName']}",
            shipping,
            [
                {
                    "name": products[line.product_id].name,
                    "size": line.size,
                    "quantity": line.quantity,
                    "price": products[line.product_id].price,
                }
                for line in lines
            ],
            balance,
        )
        notifier.enqueue(email, notifier.ORDER_CONFIRMATION_SUBJECT, html, order_id=order_id)
    except Exception:
        db.session.rollback()
        current_app.logger.exception("order %s committed but confirmation was not queued", order_id)
