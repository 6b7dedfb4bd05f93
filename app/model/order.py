from datetime import datetime, timezone
from ..extensions import db
from ..utils.api import iso_utc

ORDER_PLACED = "PLACED"
PAYMENT_PAID = "PAID"


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=ORDER_PLACED, index=True)
    payment_status = db.Column(db.String(20), nullable=False, default=PAYMENT_PAID)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    shipping_address = db.Column(db.Text, nullable=False)   # "<address>, <city> <postal>"
    order_date = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None), index=True)

    items = db.relationship(
        "OrderItem",
        backref="order",
        lazy="selectin",
        order_by="OrderItem.id.asc()",
    )

    def as_api(self):
        return {
            "order_id": self.id,
            "order_date": iso_utc(self.order_date),
            "status": self.status,
            "payment_status": self.payment_status,
            "total_amount": float(self.total_amount or 0),
            "shipping_address": self.shipping_address,
            "items": [i.as_api() for i in self.items],
        }


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False)   # unit price frozen at checkout
    size = db.Column(db.String(32), nullable=True)

    product = db.relationship("Product", lazy="joined")

    def as_api(self):
        return {
            "order_item_id": self.id,
            "product_id": self.product_id,
            "name": self.product.name if self.product else None,
            "size": self.size,
            "quantity": self.quantity,
            "price": float(self.price or 0),
        }
