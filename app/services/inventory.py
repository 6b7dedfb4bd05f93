# app/services/inventory.py
from sqlalchemy import select, update

from ..extensions import db
from ..model import Product, ProductSize
from ..errors import NotFoundError, OutOfStockError, ValidationError


def _decrement_size(product_id: int, quantity: int, size: str) -> int:
    row = db.session.execute(
        select(ProductSize)
        .where(ProductSize.product_id == product_id, ProductSize.size == size)
        .with_for_update()
    ).scalar_one_or_none()
    if row is None:
        raise NotFoundError(f"size {size} not offered for product {product_id}")
    if row.stock < quantity:
        raise OutOfStockError(
            f"product {product_id} size {size} is out of stock",
            {"productId": product_id, "size": size, "available": row.stock},
        )
    row.stock = row.stock - quantity
    db.session.flush()
    return row.stock


def _decrement_scalar(product_id: int, quantity: int) -> None:
    # relative update; the WHERE guard keeps stock_qty from going negative
    res = db.session.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock_qty >= quantity)
        .values(stock_qty=Product.stock_qty - quantity)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 1:
        return

    stock = db.session.execute(
        select(Product.id, Product.stock_qty).where(Product.id == product_id)
    ).first()
    if stock is None:
        raise NotFoundError(f"Invalid product {product_id}")
    if stock.stock_qty is None:
        raise ValidationError(f"size is required for product {product_id}")
    raise OutOfStockError(
        f"product {product_id} is out of stock",
        {"productId": product_id, "available": stock.stock_qty},
    )


def decrement(product_id: int, quantity: int, size: str | None = None) -> None:
    """Take `quantity` units of a product (or one of its sizes) out of stock.

    Raises OutOfStockError instead of letting stock go below zero.
    """
    if quantity < 1:
        raise ValidationError("quantity must be >= 1")
    if size:
        _decrement_size(product_id, quantity, size)
    else:
        _decrement_scalar(product_id, quantity)

