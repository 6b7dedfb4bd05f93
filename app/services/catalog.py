# app/services/catalog.py
from dataclasses import dataclass
from decimal import Decimal
from sqlalchemy import select

from ..extensions import db
from ..model import Product
from ..utils.money import round_money


@dataclass(frozen=True)
class ProductSnapshot:
    name: str
    price: Decimal
    seller_id: int


def snapshot(product_ids) -> dict[int, ProductSnapshot]:
    """Point-in-time {product_id: ProductSnapshot} for the given ids; unknown ids are absent."""
    ids = set(product_ids)
    if not ids:
        return {}
    rows = db.session.execute(
        select(Product.id, Product.name, Product.price, Product.seller_id).where(Product.id.in_(ids))
    ).all()
    return {
        pid: ProductSnapshot(name=name, price=round_money(price), seller_id=seller_id)
        for pid, name, price, seller_id in rows
    }
