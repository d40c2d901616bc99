"""SQLAlchemy models for the users domain."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, text
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.db_defaults import utcnow


class User(Base):
    """Application user model.

    Accounts are never hard-deleted. Username and email are unique among
    active rows only, enforced by partial unique indexes so a soft-deleted
    account's handle can be registered again.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, nullable=False)
    username = Column(String(30), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String(100), nullable=False)
    profile_picture = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
    is_deleted = Column(Boolean, nullable=False, default=False)

    posts = relationship("Post", back_populates="owner")
    comments = relationship("Comment", back_populates="owner")
    likes = relationship("Like", back_populates="user")
    followers = relationship(
        "Follow",
        back_populates="followed",
        foreign_keys="[Follow.followed_id]",
    )
    following = relationship(
        "Follow",
        back_populates="follower",
        foreign_keys="[Follow.follower_id]",
    )

    __table_args__ = (
        Index(
            "uq_users_username_active",
            "username",
            unique=True,
            postgresql_where=text("is_deleted = false"),
            sqlite_where=text("is_deleted = 0"),
        ),
        Index(
            "uq_users_email_active",
            "email",
            unique=True,
            postgresql_where=text("is_deleted = false"),
            sqlite_where=text("is_deleted = 0"),
        ),
    )

    @hybrid_property
    def is_active(self) -> bool:
        return not self.is_deleted

    @is_active.expression
    def is_active(cls):
        return cls.is_deleted.is_(False)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"


__all__ = ["User"]
