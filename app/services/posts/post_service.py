"""Post creation, retrieval, feed assembly and owner-gated mutations.

Every post listing goes through :func:`visible_posts_select`, which carries the
visibility rule (post active and author active) together with the live like and
comment counters, so no listing can forget the soft-delete filter.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import Select, func, literal, or_, select, update
from sqlalchemy.orm import Session, aliased

from app.core.database import build_pagination, count_rows, normalize_page, paginate
from app.core.db_defaults import utcnow
from app.core.exceptions import NoFieldsToUpdateException, ResourceNotFoundException
from app.modules.posts.models import Comment, Like, Post
from app.modules.social.models import Follow
from app.modules.users.models import User
from app.services.users.service import require_active_user

logger = logging.getLogger(__name__)


def visible_post_conditions() -> list:
    """WHERE clauses for a post that may be shown (expects ``User`` joined as author)."""
    return [Post.is_active, User.is_active]


def visible_posts_select(viewer_id: Optional[int] = None) -> Select:
    """Select visible posts with author fields and engagement counters.

    Likes and comments from soft-deleted accounts are not counted, matching what
    the like and comment listings show.
    """
    liker = aliased(User)
    commenter = aliased(User)

    like_count = (
        select(func.count(Like.id))
        .join(liker, liker.id == Like.user_id)
        .where(Like.post_id == Post.id, liker.is_active)
        .correlate(Post)
        .scalar_subquery()
    )
    comment_count = (
        select(func.count(Comment.id))
        .join(commenter, commenter.id == Comment.user_id)
        .where(Comment.post_id == Post.id, Comment.is_active, commenter.is_active)
        .correlate(Post)
        .scalar_subquery()
    )
    if viewer_id is not None:
        liked_by_user = (
            select(Like.id)
            .where(Like.post_id == Post.id, Like.user_id == viewer_id)
            .correlate(Post)
            .exists()
        )
    else:
        liked_by_user = literal(False)

    return (
        select(
            Post,
            User.username,
            User.name,
            User.profile_picture,
            like_count.label("like_count"),
            comment_count.label("comment_count"),
            liked_by_user.label("liked_by_user"),
        )
        .join(User, User.id == Post.user_id)
        .where(*visible_post_conditions())
    )


def newest_first(stmt: Select) -> Select:
    return stmt.order_by(Post.created_at.desc(), Post.id.desc())


def serialize_post(row) -> Dict[str, Any]:
    """Shape one row of :func:`visible_posts_select` into a response dict."""
    post: Post = row[0]
    return {
        "id": post.id,
        "user_id": post.user_id,
        "content": post.content,
        "media_url": post.media_url,
        "comments_enabled": post.comments_enabled,
        "created_at": post.created_at,
        "updated_at": post.updated_at,
        "username": row.username,
        "name": row.name,
        "profile_picture": row.profile_picture,
        "like_count": row.like_count,
        "comment_count": row.comment_count,
        "liked_by_user": bool(row.liked_by_user),
    }


def require_visible_post(db: Session, post_id: int) -> Post:
    """Return the post if it and its author are active, else raise 404."""
    post = (
        db.query(Post)
        .join(User, User.id == Post.user_id)
        .filter(Post.id == post_id, *visible_post_conditions())
        .first()
    )
    if post is None:
        raise ResourceNotFoundException("Post", post_id)
    return post


class PostService:
    """Encapsulates post workflows."""

    def __init__(self, db: Session):
        self.db = db

    def _page(
        self,
        stmt: Select,
        limit: Optional[int],
        offset: Optional[int],
        key: str = "posts",
    ) -> Dict[str, Any]:
        limit, offset = normalize_page(limit, offset)
        total = count_rows(self.db, stmt)
        rows = self.db.execute(paginate(newest_first(stmt), limit, offset)).all()
        return {
            key: [serialize_post(row) for row in rows],
            "pagination": build_pagination(limit, offset, total),
        }

    # ----- Creation & retrieval -----
    def create(
        self,
        user_id: int,
        content: str,
        media_url: Optional[str] = None,
        comments_enabled: bool = True,
    ) -> Dict[str, Any]:
        post = Post(
            user_id=user_id,
            content=content,
            media_url=media_url or None,
            comments_enabled=comments_enabled,
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        logger.info("Post %s created", post.id, extra={"user_id": user_id})
        return self.get_by_id(post.id, viewer_id=user_id)

    def get_by_id(self, post_id: int, viewer_id: Optional[int] = None) -> Dict[str, Any]:
        row = self.db.execute(
            visible_posts_select(viewer_id).where(Post.id == post_id)
        ).first()
        if row is None:
            raise ResourceNotFoundException("Post", post_id)
        return serialize_post(row)

    def find_active(self, post_id: int) -> Optional[Post]:
        """Active post regardless of author state; used to tell 403 from 404."""
        return self.db.query(Post).filter(Post.id == post_id, Post.is_active).first()

    # ----- Listings -----
    def list_by_user(
        self,
        user_id: int,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        viewer_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        require_active_user(self.db, user_id)
        stmt = visible_posts_select(viewer_id).where(Post.user_id == user_id)
        return self._page(stmt, limit, offset)

    def list_media_by_user(
        self,
        user_id: int,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        viewer_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        require_active_user(self.db, user_id)
        stmt = visible_posts_select(viewer_id).where(
            Post.user_id == user_id,
            Post.media_url.is_not(None),
            Post.media_url != "",
        )
        return self._page(stmt, limit, offset)

    def feed(
        self, user_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Dict[str, Any]:
        """Own posts plus posts of everyone ``user_id`` follows, newest first."""
        followed_ids = select(Follow.followed_id).where(Follow.follower_id == user_id)
        stmt = visible_posts_select(user_id).where(
            or_(Post.user_id == user_id, Post.user_id.in_(followed_ids))
        )
        return self._page(stmt, limit, offset)

    def search(
        self,
        query: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        viewer_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        stmt = visible_posts_select(viewer_id).where(
            Post.content.icontains(query, autoescape=True)
        )
        return self._page(stmt, limit, offset)

    # ----- Owner-gated mutations -----
    def update(
        self, post_id: int, user_id: int, patch: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Apply ``patch`` if the post exists, is active and belongs to ``user_id``.

        Ownership and existence are part of the UPDATE's WHERE clause; ``None``
        means no row matched.
        """
        if not patch:
            raise NoFieldsToUpdateException()
        result = self.db.execute(
            update(Post)
            .where(Post.id == post_id, Post.user_id == user_id, Post.is_active)
            .values(**patch, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount == 0:
            return None
        logger.info(
            "Post %s updated (%s)",
            post_id,
            ", ".join(sorted(patch)),
            extra={"user_id": user_id},
        )
        return self.get_by_id(post_id, viewer_id=user_id)

    def soft_delete(self, post_id: int, user_id: int) -> bool:
        result = self.db.execute(
            update(Post)
            .where(Post.id == post_id, Post.user_id == user_id, Post.is_active)
            .values(is_deleted=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount:
            logger.info("Post %s deleted", post_id, extra={"user_id": user_id})
        return result.rowcount > 0


__all__: List[str] = [
    "PostService",
    "visible_posts_select",
    "visible_post_conditions",
    "newest_first",
    "serialize_post",
    "require_visible_post",
]
