# ------- app/utils/decorators.py -------
from functools import wraps
from flask import jsonify, g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from ..extensions import db
from ..utils.api import api_error
from ..model.user import User


def _unauthorized(message="Not authenticated"):
    r = jsonify(api_error(message)); r.status_code = 401; return r


def register_jwt_handlers(jwt):
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return _unauthorized()

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return _unauthorized("Invalid token")

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return _unauthorized("Token expired")


def _current_user():
    verify_jwt_in_request()
    uid = get_jwt_identity()
    try:
        uid = int(uid)
    except (TypeError, ValueError):
        uid = None
    return db.session.get(User, uid) if uid else None


def current_principal() -> User:
    return g.principal


def principal_required(fn):
    """Resolve the bearer token to a User; 401 when the token or the user is missing."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        u = _current_user()
        if not u:
            return _unauthorized()
        g.principal = u
        return fn(*args, **kwargs)
    return wrapper
