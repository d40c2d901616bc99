"""Service layer handling comment operations.

Ownership of a comment is enforced by the router before ``update``/``soft_delete``
are called; the service only guards existence and visibility.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, aliased

from app.core.database import build_pagination, count_rows, normalize_page, paginate
from app.core.db_defaults import utcnow
from app.core.exceptions import CommentsDisabledException, ResourceNotFoundException
from app.modules.posts.models import Comment, Post
from app.modules.users.models import User
from app.services.posts.post_service import require_visible_post
from app.services.users.service import require_active_user

logger = logging.getLogger(__name__)

POST_EXCERPT_LENGTH = 100


def _comment_select():
    return (
        select(Comment, User.username, User.name, User.profile_picture)
        .join(User, User.id == Comment.user_id)
        .where(Comment.is_active, User.is_active)
    )


def _serialize(row) -> Dict[str, Any]:
    comment: Comment = row[0]
    return {
        "id": comment.id,
        "post_id": comment.post_id,
        "user_id": comment.user_id,
        "content": comment.content,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
        "username": row.username,
        "name": row.name,
        "profile_picture": row.profile_picture,
    }


class CommentService:
    """Encapsulates comment workflows."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, post_id: int, content: str) -> Dict[str, Any]:
        post = require_visible_post(self.db, post_id)
        if not post.comments_enabled:
            raise CommentsDisabledException(post_id)

        comment = Comment(user_id=user_id, post_id=post_id, content=content)
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        logger.info(
            "Comment %s added to post %s",
            comment.id,
            post_id,
            extra={"user_id": user_id},
        )
        return self.get_by_id(comment.id)

    def get_by_id(self, comment_id: int) -> Dict[str, Any]:
        row = self.db.execute(
            _comment_select().where(Comment.id == comment_id)
        ).first()
        if row is None:
            raise ResourceNotFoundException("Comment", comment_id)
        return _serialize(row)

    def update(self, comment_id: int, content: str) -> Optional[Dict[str, Any]]:
        result = self.db.execute(
            update(Comment)
            .where(Comment.id == comment_id, Comment.is_active)
            .values(content=content, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount == 0:
            return None
        return self.get_by_id(comment_id)

    def soft_delete(self, comment_id: int) -> bool:
        result = self.db.execute(
            update(Comment)
            .where(Comment.id == comment_id, Comment.is_active)
            .values(is_deleted=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount > 0

    def list_for_post(
        self, post_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Dict[str, Any]:
        require_visible_post(self.db, post_id)
        limit, offset = normalize_page(limit, offset)
        stmt = (
            _comment_select()
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        total = count_rows(self.db, stmt)
        rows = self.db.execute(paginate(stmt, limit, offset)).all()
        return {
            "comments": [_serialize(row) for row in rows],
            "pagination": build_pagination(limit, offset, total),
        }

    def list_for_user(
        self, user_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Dict[str, Any]:
        """The user's comments on posts that are still visible."""
        require_active_user(self.db, user_id)
        limit, offset = normalize_page(limit, offset)
        post_author = aliased(User)
        stmt = (
            _comment_select()
            .add_columns(Post.content.label("post_content"))
            .join(Post, Post.id == Comment.post_id)
            .join(post_author, post_author.id == Post.user_id)
            .where(Comment.user_id == user_id, Post.is_active, post_author.is_active)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        total = count_rows(self.db, stmt)
        rows = self.db.execute(paginate(stmt, limit, offset)).all()
        comments = []
        for row in rows:
            comment = _serialize(row)
            comment["post_content"] = row.post_content[:POST_EXCERPT_LENGTH]
            comments.append(comment)
        return {
            "comments": comments,
            "pagination": build_pagination(limit, offset, total),
        }

    def count_for_post(self, post_id: int) -> int:
        """Number of comments ``list_for_post`` would return in total."""
        return self.db.execute(
            select(func.count(Comment.id))
            .join(User, User.id == Comment.user_id)
            .where(Comment.post_id == post_id, Comment.is_active, User.is_active)
        ).scalar_one()

    def comments_enabled(self, post_id: int) -> bool:
        return bool(require_visible_post(self.db, post_id).comments_enabled)


__all__ = ["CommentService"]
