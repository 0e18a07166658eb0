# stockforum/infrastructure/models.py
"""
SQLAlchemy ORM models for the stock forum.
"""
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, Float, ForeignKey, JSON
)
from sqlalchemy.orm import relationship

from stockforum.infrastructure.db.session import Base


def now():
    return datetime.now(timezone.utc)


class VotableMixin:
    """Like/dislike counters plus the actor sets behind them.

    Registered actors are stored by user id, anonymous actors by session
    token, so the two namespaces never collide.
    """
    likes = Column(Integer, nullable=False, default=0)
    dislikes = Column(Integer, nullable=False, default=0)
    liked_by = Column(JSON, nullable=False, default=list)
    disliked_by = Column(JSON, nullable=False, default=list)
    liked_by_anonymous = Column(JSON, nullable=False, default=list)
    disliked_by_anonymous = Column(JSON, nullable=False, default=list)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(200), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=now)

    # Relationships
    stocks_created = relationship("Stock", back_populates="creator")
    comments = relationship("Comment", back_populates="author")


class Stock(VotableMixin, Base):
    __tablename__ = "stocks"

    id = Column(Integer, primary_key=True)
    symbol = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    exchange = Column(String(50), nullable=True)
    currency = Column(String(10), nullable=True)
    current_price = Column(Float, nullable=True)
    previous_close = Column(Float, nullable=True)
    percent_change = Column(Float, nullable=True)
    last_updated = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=now)
    updated_at = Column(DateTime(timezone=True), default=now, onupdate=now)

    # Relationships
    creator = relationship("User", back_populates="stocks_created")
    comments = relationship("Comment", back_populates="stock", passive_deletes=True)


class Comment(VotableMixin, Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True)
    stock_id = Column(Integer, ForeignKey("stocks.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_comment_id = Column(
        Integer, ForeignKey("comments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    content = Column(Text, nullable=False)
    is_reply = Column(Boolean, nullable=False, default=False)
    is_anonymous = Column(Boolean, nullable=False, default=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    anonymous_author_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now)
    updated_at = Column(DateTime(timezone=True), default=now, onupdate=now)

    # Relationships
    stock = relationship("Stock", back_populates="comments")
    author = relationship("User", back_populates="comments", lazy="joined")

    @property
    def author_username(self):
        return self.author.username if self.author else None
