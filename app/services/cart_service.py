# app/services/cart_service.py
from sqlalchemy import select

from ..extensions import db
from ..model import Cart, CartItem


def get_cart(user_id: int, create: bool = False) -> Cart | None:
    cart = db.session.execute(select(Cart).where(Cart.user_id == user_id)).scalar_one_or_none()
    if cart is None and create:
        cart = Cart(user_id=user_id)
        db.session.add(cart)
        db.session.flush()
    return cart


def find_line(cart: Cart, product_id: int, size: str | None) -> CartItem | None:
    size = size or ""
    return next((i for i in cart.items if i.product_id == product_id and i.size == size), None)


def add_line(user_id: int, product_id: int, quantity: int, size: str | None = None) -> Cart:
    """Create the cart on first use; adding an existing (product, size) line merges quantities."""
    cart = get_cart(user_id, create=True)
    item = find_line(cart, product_id, size)
    if item:
        item.quantity = item.quantity + quantity
    else:
        cart.items.append(CartItem(product_id=product_id, size=size or "", quantity=quantity))
    db.session.commit()
    return cart


def set_quantity(user_id: int, product_id: int, quantity: int, size: str | None = None) -> bool:
    cart = get_cart(user_id)
    item = find_line(cart, product_id, size) if cart else None
    if not item:
        return False
    item.quantity = quantity
    db.session.commit()
    return True


def remove_line(user_id: int, product_id: int, size: str | None = None) -> bool:
    cart = get_cart(user_id)
    item = find_line(cart, product_id, size) if cart else None
    if not item:
        return False
    # delete-orphan cascade removes the row
    cart.items.remove(item)
    db.session.commit()
    return True


def lines(user_id: int) -> list[dict]:
    cart = get_cart(user_id)
    return [i.as_api() for i in cart.items] if cart else []
