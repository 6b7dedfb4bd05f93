# app/services/orders.py
from sqlalchemy import select

from ..extensions import db
from ..model import Order, OrderItem
from ..model.order import ORDER_PLACED, PAYMENT_PAID
from ..utils.money import round_money


def create_order(buyer_id: int, total, shipping_text: str):
    """Insert the order header and return (order_id, order_date)."""
    order = Order(
        user_id=buyer_id,
        status=ORDER_PLACED,
        payment_status=PAYMENT_PAID,
        total_amount=round_money(total),
        shipping_address=shipping_text,
    )
    db.session.add(order)
    db.session.flush()
    return order.id, order.order_date


def add_order_item(order_id: int, product_id: int, quantity: int, price, size: str | None = None):
    item = OrderItem(
        order_id=order_id,
        product_id=product_id,
        quantity=quantity,
        price=round_money(price),
        size=size or None,
    )
    db.session.add(item)
    db.session.flush()
    return item.id


def orders_for(user_id: int):
    return db.session.execute(
        select(Order).where(Order.user_id == user_id).order_by(Order.order_date.desc(), Order.id.desc())
    ).scalars().all()
