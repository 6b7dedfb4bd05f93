# --- app/model/user.py ---
from sqlalchemy.sql import func
from ..extensions import db


class User(db.Model):
    """Buyers and sellers alike; balance is only touched through the ledger."""
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(180), nullable=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    balance = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, server_default=func.now())
