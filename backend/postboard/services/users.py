from __future__ import annotations

import logging
import re
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from postboard.core.security import create_access_token, hash_password, verify_password
from postboard.models.user import User
from postboard.services.credits_engine import INITIAL_CREDITS
from postboard.services.errors import AuthenticationError, Conflict, NotFound, ValidationError


logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def _normalize_email(value: str) -> str:
    return str(value or "").strip().lower()


def register_user(db: Session, email: str, password: str, phone_number: str) -> User:
    email = _normalize_email(email)
    if not _EMAIL_RE.match(email):
        raise ValidationError("Invalid email", field="email")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters", field="password")
    phone_number = str(phone_number or "").strip()
    if not phone_number:
        raise ValidationError("phone_number is required", field="phone_number")

    if db.query(User.id).filter(User.email == email).first() is not None:
        raise Conflict("Email is already registered")

    user = User(
        email=email,
        password_hash=hash_password(password),
        phone_number=phone_number,
        credits=INITIAL_CREDITS,
        first_post_used=False,
    )
    try:
        db.add(user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Email is already registered")
    db.refresh(user)
    logger.info("users.register user_id=%s", user.id)
    return user


def login_user(db: Session, email: str, password: str) -> dict[str, Any]:
    email = _normalize_email(email)
    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise AuthenticationError("Invalid email or password")

    try:
        ok = verify_password(password or "", user.password_hash)
    except ValueError:
        logger.info("users.login.bad_credential_format user_id=%s", user.id)
        raise ValidationError("Invalid password format", field="password")
    if not ok:
        raise AuthenticationError("Invalid email or password")

    logger.info("users.login user_id=%s", user.id)
    return {
        "user_id": user.id,
        "email": user.email,
        "access_token": create_access_token(user.id, user.email),
        "token_type": "bearer",
    }


def get_user_profile(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound(f"User {user_id} not found")
    return user
