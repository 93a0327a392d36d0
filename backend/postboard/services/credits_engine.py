from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from postboard.models.credit_purchase import CreditPurchase
from postboard.models.user import User
from postboard.services.errors import Conflict, InsufficientCredits, NotFound, ValidationError
from postboard.services.payments import PaymentGateway, get_payment_gateway, validate_payment


logger = logging.getLogger(__name__)


POST_COST_CREDITS = 5
CREDITS_PER_CURRENCY_UNIT = 5
INITIAL_CREDITS = 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def amount_for_credits(credits: int) -> Decimal:
    return (Decimal(int(credits)) / Decimal(CREDITS_PER_CURRENCY_UNIT)).quantize(Decimal("0.01"))


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user


def get_balance(db: Session, user_id: int) -> int:
    return int(_get_user(db, user_id).credits or 0)


def debit_credits(db: Session, user_id: int, amount: int) -> None:
    """Take ``amount`` credits from the user inside the caller's transaction.

    The check and the decrement are one conditional UPDATE so concurrent
    debits cannot drive the balance below zero. Nothing is committed here.
    """
    amount = int(amount)
    if amount <= 0:
        return

    updated = (
        db.query(User)
        .filter(User.id == user_id, User.credits >= amount)
        .update({User.credits: User.credits - amount}, synchronize_session="fetch")
    )
    if updated:
        return

    # Column read so the reported balance is the committed one, not a stale identity-map copy.
    row = db.query(User.credits).filter(User.id == user_id).first()
    if row is None:
        raise NotFound(f"User {user_id} not found")
    raise InsufficientCredits(required=amount, available=int(row[0] or 0))


def purchase_credits(
    db: Session,
    user_id: int,
    credits: int,
    payment_method: Any,
    payment_details: Any = None,
    gateway: PaymentGateway | None = None,
    now: datetime | None = None,
) -> CreditPurchase:
    try:
        credits = int(credits)
    except (TypeError, ValueError):
        raise ValidationError("credits must be a positive integer", field="credits")
    if credits <= 0:
        raise ValidationError("credits must be a positive integer", field="credits")

    method, details = validate_payment(payment_method, payment_details)
    _get_user(db, user_id)

    amount = amount_for_credits(credits)
    gateway = gateway or get_payment_gateway()
    transaction_id = gateway.process(method, amount, details)

    purchase = CreditPurchase(
        user_id=user_id,
        credits_purchased=credits,
        amount_paid=amount,
        payment_method=method,
        transaction_id=transaction_id,
        created_at=(now or utcnow()),
    )
    try:
        db.add(purchase)
        db.query(User).filter(User.id == user_id).update(
            {User.credits: User.credits + credits},
            synchronize_session="fetch",
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("credits.purchase.duplicate user_id=%s transaction_id=%s", user_id, transaction_id)
        raise Conflict(f"Duplicate transaction id {transaction_id}")
    except Exception:
        db.rollback()
        raise

    db.refresh(purchase)
    logger.info(
        "credits.purchase user_id=%s credits=%s amount=%s method=%s transaction_id=%s",
        user_id,
        credits,
        amount,
        method,
        transaction_id,
    )
    return purchase


def get_credit_history(db: Session, user_id: int) -> list[CreditPurchase]:
    return (
        db.query(CreditPurchase)
        .filter(CreditPurchase.user_id == user_id)
        .order_by(CreditPurchase.created_at.desc(), CreditPurchase.id.desc())
        .all()
    )
