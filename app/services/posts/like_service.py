"""Like edges between users and posts, plus like-based rankings."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import build_pagination, count_rows, normalize_page, paginate
from app.core.db_defaults import utcnow
from app.core.exceptions import (
    AlreadyLikedException,
    ResourceNotFoundException,
    ValidationException,
)
from app.modules.posts.models import Like, Post
from app.modules.users.models import User
from app.services.posts.post_service import (
    require_visible_post,
    serialize_post,
    visible_posts_select,
)
from app.services.users.service import require_active_user

logger = logging.getLogger(__name__)

# Rolling windows measured back from now on the post's creation time.
TIME_FRAMES: Dict[str, Optional[timedelta]] = {
    "day": timedelta(days=1),
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "all": None,
}


def _like_dict(like: Like) -> Dict[str, Any]:
    return {
        "id": like.id,
        "user_id": like.user_id,
        "post_id": like.post_id,
        "created_at": like.created_at,
    }


class LikeService:
    """Encapsulates like/unlike workflows and like listings."""

    def __init__(self, db: Session):
        self.db = db

    # ----- Edges -----
    def like(self, user_id: int, post_id: int) -> Dict[str, Any]:
        require_active_user(self.db, user_id)
        require_visible_post(self.db, post_id)
        if self.has_liked(user_id, post_id):
            raise AlreadyLikedException(post_id)

        like = Like(user_id=user_id, post_id=post_id)
        self.db.add(like)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyLikedException(post_id)
        self.db.refresh(like)
        logger.info("Post %s liked", post_id, extra={"user_id": user_id})
        return _like_dict(like)

    def unlike(self, user_id: int, post_id: int) -> Dict[str, Any]:
        like = (
            self.db.query(Like)
            .filter(Like.user_id == user_id, Like.post_id == post_id)
            .first()
        )
        if like is None:
            raise ResourceNotFoundException("Like")
        removed = _like_dict(like)
        self.db.delete(like)
        self.db.commit()
        logger.info("Post %s unliked", post_id, extra={"user_id": user_id})
        return removed

    def has_liked(self, user_id: int, post_id: int) -> bool:
        return (
            self.db.query(Like.id)
            .filter(Like.user_id == user_id, Like.post_id == post_id)
            .first()
            is not None
        )

    def count_for_post(self, post_id: int) -> int:
        """Likes on a visible post from active accounts."""
        require_visible_post(self.db, post_id)
        return self.db.execute(
            select(func.count(Like.id))
            .join(User, User.id == Like.user_id)
            .where(Like.post_id == post_id, User.is_active)
        ).scalar_one()

    # ----- Listings -----
    def list_for_post(
        self, post_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Dict[str, Any]:
        require_visible_post(self.db, post_id)
        limit, offset = normalize_page(limit, offset)
        stmt = (
            select(
                User.id,
                User.username,
                User.name,
                User.profile_picture,
                Like.created_at.label("liked_at"),
            )
            .join(Like, Like.user_id == User.id)
            .where(Like.post_id == post_id, User.is_active)
            .order_by(Like.created_at.desc(), Like.id.desc())
        )
        total = count_rows(self.db, stmt)
        rows = self.db.execute(paginate(stmt, limit, offset)).all()
        return {
            "likes": [
                {
                    "user_id": row.id,
                    "username": row.username,
                    "name": row.name,
                    "profile_picture": row.profile_picture,
                    "liked_at": row.liked_at,
                }
                for row in rows
            ],
            "pagination": build_pagination(limit, offset, total),
        }

    def list_for_user(
        self,
        user_id: int,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        viewer_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Visible posts ``user_id`` has liked, most recently liked first."""
        require_active_user(self.db, user_id)
        limit, offset = normalize_page(limit, offset)
        stmt = (
            visible_posts_select(viewer_id)
            .add_columns(Like.created_at.label("liked_at"))
            .join(Like, Like.post_id == Post.id)
            .where(Like.user_id == user_id)
            .order_by(Like.created_at.desc(), Like.id.desc())
        )
        total = count_rows(self.db, stmt)
        rows = self.db.execute(paginate(stmt, limit, offset)).all()
        posts = []
        for row in rows:
            post = serialize_post(row)
            post["liked_at"] = row.liked_at
            posts.append(post)
        return {"posts": posts, "pagination": build_pagination(limit, offset, total)}

    def most_liked(
        self,
        limit: Optional[int] = None,
        time_frame: str = "week",
        viewer_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Visible posts created within ``time_frame`` ranked by like count.

        Ties go to the newer post (higher id).
        """
        if time_frame not in TIME_FRAMES:
            raise ValidationException(
                f"time_frame must be one of {', '.join(TIME_FRAMES)}",
                field="time_frame",
            )
        limit, _ = normalize_page(limit, 0)

        stmt = visible_posts_select(viewer_id)
        window = TIME_FRAMES[time_frame]
        if window is not None:
            stmt = stmt.where(Post.created_at >= utcnow() - window)
        stmt = stmt.order_by(
            stmt.selected_columns.like_count.desc(), Post.id.desc()
        ).limit(limit)
        return [serialize_post(row) for row in self.db.execute(stmt).all()]

    def recent_for_user_posts(
        self, user_id: int, limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Newest likes received on ``user_id``'s active posts from active accounts."""
        require_active_user(self.db, user_id)
        limit, _ = normalize_page(limit, 0)
        rows = self.db.execute(
            select(
                Like.id,
                Like.post_id,
                Like.created_at.label("liked_at"),
                Post.content,
                User.id.label("liker_id"),
                User.username,
                User.name,
                User.profile_picture,
            )
            .join(Post, Post.id == Like.post_id)
            .join(User, User.id == Like.user_id)
            .where(Post.user_id == user_id, Post.is_active, User.is_active)
            .order_by(Like.created_at.desc(), Like.id.desc())
            .limit(limit)
        ).all()
        return [
            {
                "id": row.id,
                "post_id": row.post_id,
                "post_content": row.content,
                "liked_at": row.liked_at,
                "user": {
                    "id": row.liker_id,
                    "username": row.username,
                    "name": row.name,
                    "profile_picture": row.profile_picture,
                },
            }
            for row in rows
        ]


__all__ = ["LikeService", "TIME_FRAMES"]
