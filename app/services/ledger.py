# app/services/ledger.py
"""Per-user balance store.

Every call runs on the caller's session, so locks taken here are held until
the caller's transaction commits or rolls back.
"""
from decimal import Decimal
from sqlalchemy import select, update

from ..extensions import db
from ..model import User
from ..errors import NotFoundError, InsufficientFundsError
from ..utils.money import D, round_money


def balance_of(user_id: int) -> Decimal | None:
    """Unlocked read, or None for an unknown user."""
    bal = db.session.execute(select(User.balance).where(User.id == user_id)).scalar_one_or_none()
    return None if bal is None else round_money(bal)


def locked_read(user_id: int) -> Decimal:
    bal = db.session.execute(
        select(User.balance).where(User.id == user_id).with_for_update()
    ).scalar_one_or_none()
    if bal is None:
        raise NotFoundError(f"user {user_id} not found")
    return round_money(bal)


def lock_principals(user_ids) -> dict[int, Decimal]:
    """Lock every distinct id one row at a time, lowest id first.

    Two checkouts with overlapping buyer/seller sets then always request
    their shared rows in the same order and cannot deadlock.
    """
    return {uid: locked_read(uid) for uid in sorted(set(user_ids))}


def adjust(user_id: int, delta) -> None:
    res = db.session.execute(
        update(User)
        .where(User.id == user_id)
        .values(balance=User.balance + round_money(delta))
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        raise NotFoundError(f"user {user_id} not found")


def debit(user_id: int, amount) -> Decimal:
    amount = round_money(amount)
    # sufficiency is judged on the locked row, never on an earlier read
    balance = locked_read(user_id)
    if balance < amount:
        raise InsufficientFundsError(
            "Insufficient balance",
            {"balance": float(balance), "required": float(amount)},
        )
    adjust(user_id, -amount)
    return balance - amount


def credit(user_id: int, amount) -> None:
    adjust(user_id, D(amount))
