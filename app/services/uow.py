# app/services/uow.py
from contextlib import contextmanager

from flask import current_app
from sqlalchemy import text

from ..extensions import db
from ..errors import CheckoutError, PersistenceError


def _rollback(session):
    try:
        session.rollback()
    except Exception:
        # the original failure is what the caller reports
        current_app.logger.exception("rollback failed")


@contextmanager
def unit_of_work(statement_timeout_ms: int | None = None):
    """One transaction on the request's pooled connection.

    Commits when the block exits cleanly. Any exception rolls everything back;
    domain errors propagate as they are, anything else becomes
    PersistenceError. The connection goes back to the pool when Flask tears
    down the app context, on every exit path.
    """
    # the scoped_session proxy lacks in_transaction(); work on the real Session
    session = db.session()
    if session.in_transaction():
        # close the read-only transaction left open by earlier lookups
        session.commit()

    try:
        if statement_timeout_ms and session.get_bind().dialect.name == "postgresql":
            session.execute(text(f"SET LOCAL statement_timeout = {int(statement_timeout_ms)}"))
        yield session
        session.commit()
    except CheckoutError:
        _rollback(session)
        raise
    except Exception as e:
        _rollback(session)
        current_app.logger.exception("transaction failed")
        raise PersistenceError("checkout failed") from e
