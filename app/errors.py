# app/errors.py
from flask import jsonify

from .utils.api import api_error


class CheckoutError(Exception):
    """Base class for failures surfaced to API clients."""
    status_code = 400

    def __init__(self, message, data=None):
        super().__init__(message)
        self.message = message
        self.data = data


class ValidationError(CheckoutError):
    pass


class NotFoundError(CheckoutError):
    pass


class InsufficientFundsError(CheckoutError):
    pass


class OutOfStockError(CheckoutError):
    pass


class PersistenceError(CheckoutError):
    """Unexpected failure once a transaction is open; always rolled back."""
    status_code = 500


def register_error_handlers(app):
    @app.errorhandler(CheckoutError)
    def handle_checkout_error(e):
        data = {"error": type(e).__name__, **(e.data or {})}
        r = jsonify({**api_error(e.message, data), "success": False})
        r.status_code = e.status_code
        return r

    @app.errorhandler(500)
    def handle_internal_error(e):
        r = jsonify(api_error("Internal error"))
        r.status_code = 500
        return r
