import pytest
from sqlalchemy import select

from app.extensions import db
from app.model import Notification
from app.services import notifier


class FlakyBackend:
    def __init__(self, failures):
        self.failures = failures
        self.sent = []

    def send(self, recipient, subject, html):
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("smtp down")
        self.sent.append(recipient)


@pytest.fixture()
def queued(app):
    with app.app_context():
        return notifier.enqueue("buyer@example.com", "Your Order Confirmation", "<p>hi</p>")


def _note(app, note_id):
    with app.app_context():
        n = db.session.get(Notification, note_id)
        return n.status, n.attempts, n.last_error


class TestDrain:
    def test_sends_pending(self, app, queued, mailbox):
        with app.app_context():
            assert notifier.drain() == {"sent": 1, "retry": 0, "failed": 0}
        assert _note(app, queued) == ("sent", 1, None)
        assert mailbox.outbox[0]["to"] == "buyer@example.com"

    def test_sent_messages_not_resent(self, app, queued, mailbox):
        with app.app_context():
            notifier.drain()
            notifier.drain()
        assert len(mailbox.outbox) == 1

    def test_retries_then_succeeds(self, app, queued):
        app.extensions["mail_backend"] = backend = FlakyBackend(failures=2)
        with app.app_context():
            assert notifier.drain()["retry"] == 1
            assert notifier.drain()["retry"] == 1
            assert notifier.drain()["sent"] == 1
        assert backend.sent == ["buyer@example.com"]
        assert _note(app, queued)[:2] == ("sent", 3)

    def test_gives_up_after_max_attempts(self, app, queued):
        app.extensions["mail_backend"] = FlakyBackend(failures=10)
        with app.app_context():
            for _ in range(5):
                notifier.drain()
        assert _note(app, queued) == ("failed", 3, "smtp down")


class TestBackends:
    def test_unknown_backend(self, app):
        app.extensions.pop("mail_backend", None)
        app.config["MAIL_BACKEND"] = "pigeon"
        with pytest.raises(ValueError):
            notifier.get_backend(app)

    def test_render_escapes_markup(self, app, shipping):
        shipping["firstName"] = "<b>Ada</b>"
        with app.test_request_context():
            html = notifier.render_order_confirmation(
                "Ada L", shipping, [{"name": "Tee", "size": "M", "quantity": 2, "price": 15}], 70
            )
        assert "&lt;b&gt;Ada&lt;/b&gt;" in html
        assert "Tee (M)" in html
        assert "$30.00" in html
        assert "$70.00" in html
