# app/services/notifier.py
"""Order confirmation mail: render, enqueue in the outbox, drain to a backend.

Checkout only ever enqueues. Delivery happens in `drain`, run by the
`flask notifications` commands, so a slow or broken mail server can never
turn a committed order into a failed request.
"""
import smtplib
from datetime import datetime, timezone
from email.message import EmailMessage

from flask import current_app, render_template
from sqlalchemy import select

from ..extensions import db
from ..model import Notification
from ..model.notification import PENDING, SENT, FAILED
from ..utils.money import round_money

ORDER_CONFIRMATION_SUBJECT = "Your Order Confirmation"


# ---- backends --------------------------------------------------------------

class ConsoleBackend:
    def send(self, recipient, subject, html):
        current_app.logger.info("mail to=%s subject=%r (%d bytes)", recipient, subject, len(html))


class MemoryBackend:
    def __init__(self):
        self.outbox = []

    def send(self, recipient, subject, html):
        self.outbox.append({"to": recipient, "subject": subject, "html": html})


class SmtpBackend:
    def __init__(self, config):
        self.server = config["MAIL_SERVER"]
        self.port = config["MAIL_PORT"]
        self.username = config.get("MAIL_USERNAME")
        self.password = config.get("MAIL_PASSWORD")
        self.use_tls = config.get("MAIL_USE_TLS", True)
        self.sender = config["MAIL_SENDER"]

    def send(self, recipient, subject, html):
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content("Your order has been placed. View this message in an HTML capable client.")
        msg.add_alternative(html, subtype="html")

        with smtplib.SMTP(self.server, self.port, timeout=30) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or "")
            smtp.send_message(msg)


_BACKENDS = {
    "console": lambda config: ConsoleBackend(),
    "memory": lambda config: MemoryBackend(),
    "smtp": SmtpBackend,
}


def get_backend(app=None):
    app = app or current_app._get_current_object()
    backend = app.extensions.get("mail_backend")
    if backend is None:
        name = (app.config.get("MAIL_BACKEND") or "console").lower()
        if name not in _BACKENDS:
            raise ValueError(f"unknown MAIL_BACKEND {name!r}")
        backend = app.extensions["mail_backend"] = _BACKENDS[name](app.config)
    return backend


# ---- rendering -------------------------------------------------------------

def render_order_confirmation(buyer_name, shipping, items, new_balance):
    """items: [{"name", "size", "quantity", "price"}] with the frozen unit price."""
    lines = [
        {
            "name": it["name"],
            "size": it.get("size"),
            "quantity": it["quantity"],
            "line_total": round_money(it["price"] * it["quantity"]),
        }
        for it in items
    ]
    return render_template(
        "email/order_confirmation.html",
        buyer_name=buyer_name,
        shipping=shipping,
        items=lines,
        new_balance=round_money(new_balance),
        store_url=current_app.config["STORE_URL"],
    )


# ---- outbox ----------------------------------------------------------------

def enqueue(recipient, subject, html, order_id=None) -> int:
    note = Notification(
        order_id=order_id,
        recipient=recipient,
        subject=subject,
        html=html,
        status=PENDING,
        max_attempts=current_app.config["NOTIFICATION_MAX_ATTEMPTS"],
    )
    db.session.add(note)
    db.session.commit()
    return note.id


def drain(limit: int = 50) -> dict:
    """Try each pending message once.

    A message that fails is retried on later drains until it has used
    max_attempts, then it is marked failed and left for inspection.
    """
    backend = get_backend()
    stats = {"sent": 0, "retry": 0, "failed": 0}

    notes = db.session.execute(
        select(Notification)
        .where(Notification.status == PENDING)
        .order_by(Notification.id.asc())
        .limit(limit)
        .with_for_update(skip_locked=True)
    ).scalars().all()

    for note in notes:
        note.attempts = (note.attempts or 0) + 1
        try:
            backend.send(note.recipient, note.subject, note.html)
        except Exception as e:
            note.last_error = str(e)[:512]
            if note.attempts >= note.max_attempts:
                note.status = FAILED
                stats["failed"] += 1
                current_app.logger.error("notification %s failed permanently: %s", note.id, e)
            else:
                stats["retry"] += 1
                current_app.logger.warning(
                    "notification %s attempt %s/%s failed: %s", note.id, note.attempts, note.max_attempts, e
                )
        else:
            note.status = SENT
            note.sent_at = datetime.now(timezone.utc).replace(tzinfo=None)
            note.last_error = None
            stats["sent"] += 1

    db.session.commit()
    return stats
