# app/model/product.py
from sqlalchemy.sql import func
from ..extensions import db


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    seller_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # NULL for sized products; their stock lives in product_sizes
    stock_qty = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    sizes = db.relationship(
        "ProductSize",
        backref="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProductSize.position.asc()",
    )

    @property
    def is_sized(self) -> bool:
        return bool(self.sizes)


class ProductSize(db.Model):
    """One stock row per (product, size) so each size locks independently."""
    __tablename__ = "product_sizes"
    __table_args__ = (db.UniqueConstraint("product_id", "size", name="uq_product_size"),)

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    size = db.Column(db.String(32), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    position = db.Column(db.Integer, nullable=False, default=0)
