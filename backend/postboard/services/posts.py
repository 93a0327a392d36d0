from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.orm import Session

from postboard.models.post import Post
from postboard.models.user import User
from postboard.services.credits_engine import POST_COST_CREDITS, debit_credits, utcnow
from postboard.services.errors import NotFound, PermissionDenied, ValidationError
from postboard.services.storage import delete_image, save_image


logger = logging.getLogger(__name__)


POST_WINDOW = timedelta(hours=24)

UPDATABLE_FIELDS = ("title", "description", "price")


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored here is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def compute_expires_at(posted_at: datetime) -> datetime:
    return posted_at + POST_WINDOW


def is_post_active(expires_at: datetime, now: datetime) -> bool:
    return as_utc(now) < as_utc(expires_at)


def _clean_text(value: Any, field: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValidationError(f"{field} must not be empty", field=field)
    return text


def _clean_price(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        price = Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        raise ValidationError("price must be a number", field="price")
    if price <= 0:
        raise ValidationError("price must be positive", field="price")
    return price


def serialize_post(post: Post, now: datetime) -> dict[str, Any]:
    expires_at = as_utc(post.expires_at)
    return {
        "id": post.id,
        "user_id": post.user_id,
        "title": post.title,
        "description": post.description,
        "price": (Decimal(post.price) if post.price is not None else None),
        "image_path": post.image_path,
        "posted_at": as_utc(post.posted_at),
        "expires_at": expires_at,
        "created_at": as_utc(post.created_at),
        "updated_at": as_utc(post.updated_at),
        "is_active": is_post_active(expires_at, now),
    }


def _get_post(db: Session, post_id: int) -> Post:
    post = db.query(Post).filter(Post.id == post_id).first()
    if post is None:
        raise NotFound(f"Post with id {post_id} not found")
    return post


def _check_owner(post: Post, actor_id: int | None) -> None:
    if actor_id is not None and post.user_id != actor_id:
        raise PermissionDenied("You can only modify your own posts")


def create_post(
    db: Session,
    owner_id: int,
    title: str,
    description: str,
    price: Any = None,
    image_data: str | None = None,
    image_filename: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Create a post, charging the owner unless this is their free first post.

    The free-post claim or the credit debit and the post insert commit
    together; on any failure the session is rolled back and a freshly stored
    image is removed again.
    """
    now = as_utc(now or utcnow())
    title = _clean_text(title, "title")
    description = _clean_text(description, "description")
    price = _clean_price(price)
    if image_data and not str(image_filename or "").strip():
        raise ValidationError("image_filename is required with image_data", field="image_filename")

    # Row lock serializes concurrent creates for one owner (ignored by SQLite).
    if db.query(User).filter(User.id == owner_id).with_for_update().populate_existing().first() is None:
        raise NotFound(f"User {owner_id} not found")

    image_path = None
    charged = 0
    try:
        if image_data:
            image_path = save_image(image_data, image_filename, now)
        claimed_free = (
            db.query(User)
            .filter(User.id == owner_id, User.first_post_used.is_(False))
            .update({User.first_post_used: True}, synchronize_session="fetch")
        )
        if not claimed_free:
            debit_credits(db, owner_id, POST_COST_CREDITS)
            charged = POST_COST_CREDITS

        post = Post(
            user_id=owner_id,
            title=title,
            description=description,
            price=price,
            image_path=image_path,
            posted_at=now,
            expires_at=compute_expires_at(now),
            created_at=now,
            updated_at=now,
        )
        db.add(post)
        db.commit()
    except Exception:
        db.rollback()
        delete_image(image_path)
        raise

    db.refresh(post)
    logger.info("posts.create user_id=%s post_id=%s charged=%s", owner_id, post.id, charged)
    return serialize_post(post, now)


def get_post(db: Session, post_id: int, now: datetime | None = None) -> dict[str, Any]:
    return serialize_post(_get_post(db, post_id), now or utcnow())


def list_posts(db: Session, now: datetime | None = None) -> list[dict[str, Any]]:
    now = now or utcnow()
    rows = db.query(Post).order_by(Post.posted_at.desc(), Post.id.desc()).all()
    return [serialize_post(p, now) for p in rows]


def list_user_posts(db: Session, user_id: int, now: datetime | None = None) -> list[dict[str, Any]]:
    now = now or utcnow()
    rows = (
        db.query(Post)
        .filter(Post.user_id == user_id)
        .order_by(Post.posted_at.desc(), Post.id.desc())
        .all()
    )
    return [serialize_post(p, now) for p in rows]


def list_public_posts(db: Session, now: datetime | None = None) -> list[dict[str, Any]]:
    """Non-expired posts with the owner's phone number and no other owner data."""
    now = as_utc(now or utcnow())
    rows = (
        db.query(Post, User.phone_number)
        .join(User, User.id == Post.user_id)
        .filter(Post.expires_at > now)
        .order_by(Post.posted_at.desc(), Post.id.desc())
        .all()
    )
    out: list[dict[str, Any]] = []
    for post, phone_number in rows:
        view = serialize_post(post, now)
        if not view["is_active"]:
            continue
        view.pop("user_id")
        view.pop("updated_at")
        view["phone_number"] = phone_number
        out.append(view)
    return out


def update_post(
    db: Session,
    post_id: int,
    changes: dict[str, Any],
    actor_id: int | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    now = as_utc(now or utcnow())
    post = _get_post(db, post_id)
    _check_owner(post, actor_id)

    cleaned: dict[str, Any] = {}
    for field in UPDATABLE_FIELDS:
        if field not in changes:
            continue
        # price may be cleared with None; title and description may not.
        if field == "price":
            cleaned[field] = _clean_price(changes[field])
        else:
            cleaned[field] = _clean_text(changes[field], field)

    for field, value in cleaned.items():
        setattr(post, field, value)
    applied = list(cleaned)
    post.updated_at = now
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(post)
    logger.info("posts.update post_id=%s fields=%s", post_id, ",".join(applied) or "-")
    return serialize_post(post, now)


def repost(
    db: Session,
    post_id: int,
    actor_id: int | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    now = as_utc(now or utcnow())
    post = _get_post(db, post_id)
    _check_owner(post, actor_id)

    post.posted_at = now
    post.expires_at = compute_expires_at(now)
    post.updated_at = now
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(post)
    logger.info("posts.repost post_id=%s expires_at=%s", post_id, post.expires_at)
    return serialize_post(post, now)


def delete_post(db: Session, post_id: int, actor_id: int | None = None) -> dict[str, Any]:
    post = _get_post(db, post_id)
    _check_owner(post, actor_id)

    image_path = post.image_path
    try:
        db.delete(post)
        db.commit()
    except Exception:
        db.rollback()
        raise
    delete_image(image_path)
    logger.info("posts.delete post_id=%s", post_id)
    return {"success": True, "id": post_id}
