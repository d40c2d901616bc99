"""Business logic for follow/unfollow flows and follower listings."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from app.core.database import build_pagination, count_rows, normalize_page, paginate
from app.core.exceptions import (
    AlreadyFollowingException,
    NotFollowingException,
    SelfFollowException,
)
from app.modules.social.models import Follow
from app.modules.users.models import User
from app.services.users.service import USER_LIST_PAGE_SIZE, require_active_user

logger = logging.getLogger(__name__)


def _user_row(row) -> Dict[str, Any]:
    return {
        "id": row.id,
        "username": row.username,
        "name": row.name,
        "profile_picture": row.profile_picture,
        "followed_at": row.followed_at,
    }


class FollowService:
    """Encapsulates follow/unfollow workflows and follower listings."""

    def __init__(self, db: Session):
        self.db = db

    # ----- Edges -----
    def follow(self, follower_id: int, followed_id: int) -> Dict[str, Any]:
        if follower_id == followed_id:
            raise SelfFollowException()

        require_active_user(self.db, follower_id)
        require_active_user(self.db, followed_id)

        if self.exists(follower_id, followed_id):
            raise AlreadyFollowingException(followed_id)

        edge = Follow(follower_id=follower_id, followed_id=followed_id)
        self.db.add(edge)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyFollowingException(followed_id)
        self.db.refresh(edge)

        logger.info(
            "User %s followed user %s",
            follower_id,
            followed_id,
            extra={"user_id": follower_id},
        )
        return {
            "follower_id": edge.follower_id,
            "followed_id": edge.followed_id,
            "created_at": edge.created_at,
        }

    def unfollow(self, follower_id: int, followed_id: int) -> None:
        edge = self.db.get(Follow, (follower_id, followed_id))
        if edge is None:
            raise NotFollowingException(followed_id)
        self.db.delete(edge)
        self.db.commit()
        logger.info(
            "User %s unfollowed user %s",
            follower_id,
            followed_id,
            extra={"user_id": follower_id},
        )

    def exists(self, follower_id: int, followed_id: int) -> bool:
        return (
            self.db.query(Follow.follower_id)
            .filter(
                Follow.follower_id == follower_id,
                Follow.followed_id == followed_id,
            )
            .first()
            is not None
        )

    # ----- Listings -----
    def _listing(
        self, stmt, key: str, limit: Optional[int], offset: Optional[int]
    ) -> Dict[str, Any]:
        limit, offset = normalize_page(
            limit if limit is not None else USER_LIST_PAGE_SIZE, offset
        )
        total = count_rows(self.db, stmt)
        rows = self.db.execute(paginate(stmt, limit, offset)).all()
        return {
            key: [_user_row(row) for row in rows],
            "pagination": build_pagination(limit, offset, total),
        }

    def list_following(
        self, user_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Dict[str, Any]:
        require_active_user(self.db, user_id)
        stmt = (
            select(
                User.id,
                User.username,
                User.name,
                User.profile_picture,
                Follow.created_at.label("followed_at"),
            )
            .join(Follow, Follow.followed_id == User.id)
            .where(Follow.follower_id == user_id, User.is_active)
            .order_by(Follow.created_at.desc(), User.id.desc())
        )
        return self._listing(stmt, "following", limit, offset)

    def list_followers(
        self, user_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Dict[str, Any]:
        require_active_user(self.db, user_id)
        stmt = (
            select(
                User.id,
                User.username,
                User.name,
                User.profile_picture,
                Follow.created_at.label("followed_at"),
            )
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.followed_id == user_id, User.is_active)
            .order_by(Follow.created_at.desc(), User.id.desc())
        )
        return self._listing(stmt, "followers", limit, offset)

    def mutual_follows(
        self, user_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Dict[str, Any]:
        """Users that ``user_id`` follows and who follow ``user_id`` back."""
        require_active_user(self.db, user_id)
        outgoing = aliased(Follow)
        incoming = aliased(Follow)
        stmt = (
            select(
                User.id,
                User.username,
                User.name,
                User.profile_picture,
                outgoing.created_at.label("followed_at"),
            )
            .select_from(outgoing)
            .join(
                incoming,
                and_(
                    incoming.follower_id == outgoing.followed_id,
                    incoming.followed_id == outgoing.follower_id,
                ),
            )
            .join(User, User.id == outgoing.followed_id)
            .where(outgoing.follower_id == user_id, User.is_active)
            .order_by(outgoing.created_at.desc(), User.id.desc())
        )
        return self._listing(stmt, "users", limit, offset)

    # ----- Aggregates -----
    def counts(self, user_id: int) -> Dict[str, int]:
        """Follower/following totals over active counterparts only."""
        require_active_user(self.db, user_id)
        follower_count = self.db.execute(
            select(func.count())
            .select_from(Follow)
            .join(User, User.id == Follow.follower_id)
            .where(Follow.followed_id == user_id, User.is_active)
        ).scalar_one()
        following_count = self.db.execute(
            select(func.count())
            .select_from(Follow)
            .join(User, User.id == Follow.followed_id)
            .where(Follow.follower_id == user_id, User.is_active)
        ).scalar_one()
        return {"follower_count": follower_count, "following_count": following_count}

    def check_mutual(self, user_id_1: int, user_id_2: int) -> Dict[str, bool]:
        """Both directions of the relationship, from ``user_id_1``'s side."""
        following = self.exists(user_id_1, user_id_2)
        followed_by = self.exists(user_id_2, user_id_1)
        return {
            "following": following,
            "followed_by": followed_by,
            "is_mutual": following and followed_by,
        }


__all__ = ["FollowService"]
