from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from postboard.core.database import Base
from postboard.core.security import hash_password
from postboard.models import credit_purchase, post, user  # noqa: F401
from postboard.models.user import User


def make_session_factory(url="sqlite://"):
    if url == "sqlite://":
        engine = create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    else:
        engine = create_engine(url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


def add_user(db, email="test@example.com", credits=1, first_post_used=False, phone_number="+1234567890", password="secret123"):
    u = User(
        email=email,
        password_hash=hash_password(password),
        phone_number=phone_number,
        credits=credits,
        first_post_used=first_post_used,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    return u
