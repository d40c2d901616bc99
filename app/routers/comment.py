"""Comment router: create and list comments, owner-only edit and delete."""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app import oauth2
from app.core.authorization import require_ownership
from app.core.database import get_db
from app.core.exceptions import ResourceNotFoundException
from app.modules.posts.schemas import CommentCreate, CommentUpdate
from app.services.comments import CommentService

router = APIRouter(prefix="/comments", tags=["Comments"])

DEFAULT_LIMIT = 20


def get_comment_service(db: Session = Depends(get_db)) -> CommentService:
    """Provide a CommentService instance via FastAPI DI."""
    return CommentService(db)


@router.post("/post/{post_id}", status_code=status.HTTP_201_CREATED)
def create_comment(
    payload: CommentCreate,
    post_id: int = Path(..., gt=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """Comment on a post whose owner has comments enabled."""
    comment = service.create(current_user.id, post_id, payload.content)
    return {"message": "Comment created successfully", "comment": comment}


@router.get("/post/{post_id}")
def get_post_comments(
    post_id: int = Path(..., gt=0),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: CommentService = Depends(get_comment_service),
):
    """Comments on a post, newest first."""
    return service.list_for_post(post_id, limit, offset)


@router.get("/user/{user_id}")
def get_user_comments(
    user_id: int = Path(..., gt=0),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: CommentService = Depends(get_comment_service),
):
    """Comments written by ``user_id`` on posts that are still visible."""
    return service.list_for_user(user_id, limit, offset)


@router.get("/{comment_id}")
def get_comment(
    comment_id: int = Path(..., gt=0),
    service: CommentService = Depends(get_comment_service),
):
    return {"comment": service.get_by_id(comment_id)}


@router.put("/{comment_id}")
def update_comment(
    payload: CommentUpdate,
    comment_id: int = Path(..., gt=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """Edit one of the caller's comments."""
    existing = service.get_by_id(comment_id)
    require_ownership(existing["user_id"], current_user.id, "comment")
    comment = service.update(comment_id, payload.content)
    if comment is None:
        raise ResourceNotFoundException("Comment", comment_id)
    return {"message": "Comment updated successfully", "comment": comment}


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int = Path(..., gt=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """Soft-delete one of the caller's comments."""
    existing = service.get_by_id(comment_id)
    require_ownership(existing["user_id"], current_user.id, "comment")
    if not service.soft_delete(comment_id):
        raise ResourceNotFoundException("Comment", comment_id)
    return {"message": "Comment deleted successfully"}
