# ------ app/model/__init__.py ------

from .user import User
from .product import Product, ProductSize
from .cart import Cart, CartItem
from .order import Order, OrderItem
from .notification import Notification

__all__ = [
    "User",
    "Product",
    "ProductSize",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "Notification",
]
