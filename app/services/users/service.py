"""High-level business services for the users domain."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import build_pagination, count_rows, normalize_page, paginate
from app.core.db_defaults import utcnow
from app.core.exceptions import (
    InvalidCredentialsException,
    NoFieldsToUpdateException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
    ValidationException,
)
from app.modules.posts.models import Post
from app.modules.users.models import User
from app.modules.users.schemas import UserOut, UserPublicOut
from app.modules.utils.security import hash as hash_password
from app.modules.utils.security import verify, verify_dummy

logger = logging.getLogger(__name__)

USER_LIST_PAGE_SIZE = 10


def require_active_user(db: Session, user_id: int) -> User:
    """Return the active user or raise 404; shared by every service."""
    user = db.query(User).filter(User.id == user_id, User.is_active).first()
    if user is None:
        raise ResourceNotFoundException("User", user_id)
    return user


def account_view(user: User) -> Dict[str, Any]:
    """Projection returned to the account holder."""
    return UserOut.model_validate(user).model_dump()


def public_view(user: User) -> Dict[str, Any]:
    """Projection any caller may see."""
    return UserPublicOut.model_validate(user).model_dump()


class UserService:
    """Encapsulates registration, credentials and profile operations."""

    def __init__(self, db: Session):
        self.db = db

    # ----- Registration & credentials -----
    def register(
        self, *, username: str, email: str, password: str, name: str
    ) -> Dict[str, Any]:
        if not self.is_username_available(username):
            raise ResourceAlreadyExistsException(
                "User", field="username", message="Username already exists"
            )
        if not self.is_email_available(email):
            raise ResourceAlreadyExistsException(
                "User", field="email", message="Email already exists"
            )

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            name=name,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same handle.
            self.db.rollback()
            raise ResourceAlreadyExistsException(
                "User", message="Username or email already exists"
            )
        self.db.refresh(user)
        logger.info("User registered", extra={"user_id": user.id})
        return account_view(user)

    def authenticate(self, username: str, password: str) -> Dict[str, Any]:
        user = (
            self.db.query(User)
            .filter(User.username == username, User.is_active)
            .first()
        )
        if user is None:
            verify_dummy(password)
            raise InvalidCredentialsException()
        if not verify(password, user.password_hash):
            raise InvalidCredentialsException()
        return account_view(user)

    def is_username_available(self, username: str) -> bool:
        return (
            self.db.query(User.id)
            .filter(User.username == username, User.is_active)
            .first()
            is None
        )

    def is_email_available(self, email: str) -> bool:
        return (
            self.db.query(User.id)
            .filter(User.email == email, User.is_active)
            .first()
            is None
        )

    def update_password(self, user_id: int, new_password: str) -> bool:
        result = self.db.execute(
            update(User)
            .where(User.id == user_id, User.is_active)
            .values(password_hash=hash_password(new_password), updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount > 0

    def change_password(
        self, user_id: int, current_password: str, new_password: str
    ) -> bool:
        """Verify the current password before storing a new one."""
        user = require_active_user(self.db, user_id)
        if not verify(current_password, user.password_hash):
            raise ValidationException(
                "Current password is incorrect", field="current_password"
            )
        return self.update_password(user_id, new_password)

    # ----- Lookups -----
    def get_by_id(self, user_id: int) -> Dict[str, Any]:
        return account_view(require_active_user(self.db, user_id))

    def get_by_username(self, username: str) -> Dict[str, Any]:
        user = (
            self.db.query(User)
            .filter(User.username == username, User.is_active)
            .first()
        )
        if user is None:
            raise ResourceNotFoundException("User", username)
        return account_view(user)

    def get_by_email(self, email: str) -> Dict[str, Any]:
        user = self.db.query(User).filter(User.email == email, User.is_active).first()
        if user is None:
            raise ResourceNotFoundException("User", email)
        return account_view(user)

    def get_profile(
        self, user_id: int, *, include_email: bool = False
    ) -> Dict[str, Any]:
        """Public profile with follower/following/post counts."""
        from app.services.social.follow_service import FollowService

        user = require_active_user(self.db, user_id)
        profile = account_view(user) if include_email else public_view(user)
        profile.update(FollowService(self.db).counts(user_id))
        profile["post_count"] = self.db.execute(
            select(func.count(Post.id)).where(Post.user_id == user_id, Post.is_active)
        ).scalar_one()
        return profile

    def search(
        self, query: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Dict[str, Any]:
        """Case-insensitive substring search over username and display name."""
        limit, offset = normalize_page(
            limit if limit is not None else USER_LIST_PAGE_SIZE, offset
        )
        stmt = (
            select(User)
            .where(
                User.is_active,
                or_(
                    User.username.icontains(query, autoescape=True),
                    User.name.icontains(query, autoescape=True),
                ),
            )
            .order_by(User.username.asc(), User.id.asc())
        )
        total = count_rows(self.db, stmt)
        users = self.db.execute(paginate(stmt, limit, offset)).scalars().all()
        return {
            "users": [public_view(user) for user in users],
            "pagination": build_pagination(limit, offset, total),
        }

    # ----- Profile mutations -----
    def update_profile(self, user_id: int, patch: Dict[str, Any]) -> Dict[str, Any]:
        if not patch:
            raise NoFieldsToUpdateException()
        result = self.db.execute(
            update(User)
            .where(User.id == user_id, User.is_active)
            .values(**patch, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount == 0:
            raise ResourceNotFoundException("User", user_id)
        return self.get_by_id(user_id)

    def soft_delete(self, user_id: int) -> bool:
        """Hide the account; posts, comments and edges stay stored but invisible."""
        result = self.db.execute(
            update(User)
            .where(User.id == user_id, User.is_active)
            .values(is_deleted=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount:
            logger.info("User soft-deleted", extra={"user_id": user_id})
        return result.rowcount > 0


__all__ = ["UserService", "require_active_user", "account_view", "public_view"]
