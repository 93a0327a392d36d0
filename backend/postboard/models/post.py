from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from postboard.core.database import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=True)
    image_path = Column(String, nullable=True)

    # Timestamps are written by the lifecycle service so a single "now" is shared
    # between posted_at, expires_at and the audit columns.
    posted_at = Column(DateTime(timezone=True), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
