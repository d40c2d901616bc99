"""Like router: like/unlike, like listings and popularity rankings."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app import oauth2
from app.core.database import get_db
from app.modules.posts.schemas import TimeFrame
from app.services.posts import LikeService

router = APIRouter(prefix="/likes", tags=["Likes"])

DEFAULT_LIMIT = 20


def get_like_service(db: Session = Depends(get_db)) -> LikeService:
    """Provide a LikeService instance via FastAPI DI."""
    return LikeService(db)


@router.get("/popular")
def get_most_liked_posts(
    time_frame: TimeFrame = Query(TimeFrame.WEEK),
    limit: int = Query(10, ge=1, le=100),
    viewer: Optional[oauth2.CurrentUser] = Depends(oauth2.get_optional_user),
    service: LikeService = Depends(get_like_service),
):
    """Posts created within the window ranked by like count (ties: newer first)."""
    posts = service.most_liked(
        limit, time_frame.value, viewer_id=viewer.id if viewer else None
    )
    return {"posts": posts, "time_frame": time_frame.value}


@router.get("/recent")
def get_recent_likes(
    limit: int = Query(10, ge=1, le=100),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: LikeService = Depends(get_like_service),
):
    """Newest likes received on the caller's posts."""
    return {"likes": service.recent_for_user_posts(current_user.id, limit)}


@router.get("/user/{user_id}")
def get_user_liked_posts(
    user_id: int = Path(..., gt=0),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    viewer: Optional[oauth2.CurrentUser] = Depends(oauth2.get_optional_user),
    service: LikeService = Depends(get_like_service),
):
    """Posts ``user_id`` has liked, most recently liked first."""
    return service.list_for_user(
        user_id, limit, offset, viewer_id=viewer.id if viewer else None
    )


@router.post("/{post_id}/like", status_code=status.HTTP_201_CREATED)
def like_post(
    post_id: int = Path(..., gt=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: LikeService = Depends(get_like_service),
):
    """Like a post; liking the same post twice is rejected."""
    like = service.like(current_user.id, post_id)
    return {"message": "Post liked successfully", "like": like}


@router.delete("/{post_id}/like")
def unlike_post(
    post_id: int = Path(..., gt=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: LikeService = Depends(get_like_service),
):
    """Remove the caller's like from a post."""
    like = service.unlike(current_user.id, post_id)
    return {"message": "Post unliked successfully", "like": like}


@router.get("/{post_id}/status")
def get_like_status(
    post_id: int = Path(..., gt=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: LikeService = Depends(get_like_service),
):
    """Whether the caller likes the post, with the post's like count."""
    like_count = service.count_for_post(post_id)
    return {
        "post_id": post_id,
        "liked": service.has_liked(current_user.id, post_id),
        "like_count": like_count,
    }


@router.get("/{post_id}")
def get_post_likes(
    post_id: int = Path(..., gt=0),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    viewer: Optional[oauth2.CurrentUser] = Depends(oauth2.get_optional_user),
    service: LikeService = Depends(get_like_service),
):
    """Accounts that liked the post, newest like first."""
    result = service.list_for_post(post_id, limit, offset)
    result["liked_by_user"] = (
        service.has_liked(viewer.id, post_id) if viewer else False
    )
    return result
