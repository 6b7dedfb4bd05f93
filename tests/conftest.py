import itertools

import pytest
from flask_jwt_extended import create_access_token
from sqlalchemy import func, select

from app import create_app
from app.extensions import db
from app.model import Cart, CartItem, Order, OrderItem, Product, ProductSize, User
from app.services import notifier
from app.utils.money import D


@pytest.fixture()
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
        "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
        "MAIL_BACKEND": "memory",
        "LOG_LEVEL": "WARNING",
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def mailbox(app):
    with app.app_context():
        return notifier.get_backend()


@pytest.fixture()
def make_user(app):
    counter = itertools.count(1)

    def _make(balance=0, name=None):
        n = next(counter)
        with app.app_context():
            u = User(email=f"user{n}@example.com", name=name or f"User {n}", balance=D(balance))
            db.session.add(u)
            db.session.commit()
            return u.id
    return _make


@pytest.fixture()
def make_product(app):
    def _make(seller_id, price, stock_qty=None, sizes=None, name="Product"):
        with app.app_context():
            p = Product(name=name, price=D(price), seller_id=seller_id, stock_qty=stock_qty)
            for pos, (size, stock) in enumerate(sizes or []):
                p.sizes.append(ProductSize(size=size, stock=stock, position=pos))
            db.session.add(p)
            db.session.commit()
            return p.id
    return _make


@pytest.fixture()
def auth_headers(app):
    def _headers(user_id):
        with app.app_context():
            token = create_access_token(identity=str(user_id))
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture()
def fill_cart(app):
    def _fill(user_id, lines):
        with app.app_context():
            cart = Cart(user_id=user_id)
            for product_id, quantity, size in lines:
                cart.items.append(CartItem(product_id=product_id, quantity=quantity, size=size or ""))
            db.session.add(cart)
            db.session.commit()
    return _fill


class DbState:
    """Reads committed state straight from the database."""

    def __init__(self, app):
        self.app = app

    def _scalar(self, stmt):
        with self.app.app_context():
            return db.session.execute(stmt).scalar()

    def balance(self, user_id):
        return D(self._scalar(select(User.balance).where(User.id == user_id)))

    def stock(self, product_id, size=None):
        if size:
            return self._scalar(
                select(ProductSize.stock).where(ProductSize.product_id == product_id, ProductSize.size == size)
            )
        return self._scalar(select(Product.stock_qty).where(Product.id == product_id))

    def order_count(self):
        return self._scalar(select(func.count(Order.id)))

    def order_item_count(self):
        return self._scalar(select(func.count(OrderItem.id)))

    def cart_count(self, user_id):
        return self._scalar(
            select(func.count(CartItem.id)).select_from(CartItem).join(Cart, Cart.id == CartItem.cart_id).where(Cart.user_id == user_id)
        )


@pytest.fixture()
def db_state(app):
    return DbState(app)


SHIPPING = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "address": "12 Analytical St",
    "city": "London",
    "postal": "N1 9GU",
    "phone": "+44 20 7946 0000",
}


@pytest.fixture()
def shipping():
    return dict(SHIPPING)
