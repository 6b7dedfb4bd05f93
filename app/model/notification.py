#  --- app/model/notification.py ---
from sqlalchemy.sql import func
from ..extensions import db

PENDING = "pending"
SENT = "sent"
FAILED = "failed"


class Notification(db.Model):
    """Outbox row: written after an order commits, drained by the worker."""
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)
    recipient = db.Column(db.String(255), nullable=False)
    subject = db.Column(db.String(255), nullable=False)
    html = db.Column(db.Text, nullable=False)

    status = db.Column(db.String(16), nullable=False, default=PENDING, index=True)
    attempts = db.Column(db.Integer, nullable=False, default=0)
    max_attempts = db.Column(db.Integer, nullable=False, default=3)
    last_error = db.Column(db.String(512), nullable=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    sent_at = db.Column(db.DateTime, nullable=True)
