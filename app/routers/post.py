"""Post router: creation, feed, listings, search and owner-only edits."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app import oauth2
from app.core.authorization import require_ownership
from app.core.database import get_db
from app.core.exceptions import ResourceNotFoundException
from app.modules.posts.schemas import PostCreate, PostUpdate
from app.services.posts import PostService

router = APIRouter(prefix="/posts", tags=["Posts"])

DEFAULT_LIMIT = 20


def get_post_service(db: Session = Depends(get_db)) -> PostService:
    """Provide a PostService instance via FastAPI DI."""
    return PostService(db)


def _viewer_id(viewer: Optional[oauth2.CurrentUser]) -> Optional[int]:
    return viewer.id if viewer else None


def _raise_missing_or_forbidden(service: PostService, post_id: int, caller_id: int):
    """The conditional write matched nothing: report 403 for someone else's post, else 404."""
    post = service.find_active(post_id)
    if post is not None:
        require_ownership(post.user_id, caller_id, "post")
    raise ResourceNotFoundException("Post", post_id)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostCreate,
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: PostService = Depends(get_post_service),
):
    """Create a post owned by the caller."""
    post = service.create(
        current_user.id,
        payload.content,
        media_url=payload.media_url_str,
        comments_enabled=payload.comments_enabled,
    )
    return {"message": "Post created successfully", "post": post}


@router.get("/feed")
def get_feed(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: PostService = Depends(get_post_service),
):
    """
    The caller's feed: their own posts and posts from accounts they follow,
    newest first.
    """
    return service.feed(current_user.id, limit, offset)


@router.get("/my")
def get_my_posts(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: PostService = Depends(get_post_service),
):
    """Posts authored by the caller."""
    return service.list_by_user(
        current_user.id, limit, offset, viewer_id=current_user.id
    )


@router.get("/search")
def search_posts(
    q: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    viewer: Optional[oauth2.CurrentUser] = Depends(oauth2.get_optional_user),
    service: PostService = Depends(get_post_service),
):
    """Case-insensitive substring search over post content."""
    result = service.search(q, limit, offset, viewer_id=_viewer_id(viewer))
    result["query"] = q
    return result


@router.get("/user/{user_id}")
def get_user_posts(
    user_id: int = Path(..., gt=0),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    viewer: Optional[oauth2.CurrentUser] = Depends(oauth2.get_optional_user),
    service: PostService = Depends(get_post_service),
):
    """Posts authored by ``user_id``."""
    return service.list_by_user(user_id, limit, offset, viewer_id=_viewer_id(viewer))


@router.get("/user/{user_id}/media")
def get_user_media_posts(
    user_id: int = Path(..., gt=0),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    viewer: Optional[oauth2.CurrentUser] = Depends(oauth2.get_optional_user),
    service: PostService = Depends(get_post_service),
):
    """Posts by ``user_id`` that carry a media reference."""
    return service.list_media_by_user(
        user_id, limit, offset, viewer_id=_viewer_id(viewer)
    )


@router.get("/{post_id}")
def get_post(
    post_id: int = Path(..., gt=0),
    viewer: Optional[oauth2.CurrentUser] = Depends(oauth2.get_optional_user),
    service: PostService = Depends(get_post_service),
):
    """A single post; ``liked_by_user`` is filled in when a token is sent."""
    return {"post": service.get_by_id(post_id, viewer_id=_viewer_id(viewer))}


@router.put("/{post_id}")
def update_post(
    payload: PostUpdate,
    post_id: int = Path(..., gt=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: PostService = Depends(get_post_service),
):
    """
    Update content, media or the comments toggle of one of the caller's posts.

    Only the fields present in the body are changed.
    """
    post = service.update(post_id, current_user.id, payload.to_patch())
    if post is None:
        _raise_missing_or_forbidden(service, post_id, current_user.id)
    return {"message": "Post updated successfully", "post": post}


@router.delete("/{post_id}")
def delete_post(
    post_id: int = Path(..., gt=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: PostService = Depends(get_post_service),
):
    """Soft-delete one of the caller's posts."""
    if not service.soft_delete(post_id, current_user.id):
        _raise_missing_or_forbidden(service, post_id, current_user.id)
    return {"message": "Post deleted successfully"}
