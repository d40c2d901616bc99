"""User router: search, follow graph, profile management and public profiles."""

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app import oauth2
from app.core.authorization import require_same_identity
from app.core.database import get_db
from app.modules.social.schemas import FollowRequest
from app.modules.users.schemas import PasswordChange, UserProfileUpdate
from app.services.social import FollowService
from app.services.users import UserService
from app.services.users.service import USER_LIST_PAGE_SIZE

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Provide a UserService instance via FastAPI DI."""
    return UserService(db)


def get_follow_service(db: Session = Depends(get_db)) -> FollowService:
    """Provide a FollowService instance via FastAPI DI."""
    return FollowService(db)


# ----- Discovery -----


@router.get("/search")
def search_users(
    query: str = Query(..., min_length=1, max_length=100),
    limit: int = Query(USER_LIST_PAGE_SIZE, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: UserService = Depends(get_user_service),
):
    """Find active users whose username or name contains ``query``."""
    result = service.search(query, limit, offset)
    result["query"] = query
    return result


# ----- Follow graph -----


@router.post("/follow", status_code=status.HTTP_201_CREATED)
def follow_user(
    payload: FollowRequest,
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    """
    Follow a user.

    Process:
      - Reject following oneself.
      - Check that both accounts are active.
      - Reject a second follow of the same user.
    """
    follow = service.follow(current_user.id, payload.user_id)
    return {"message": "User followed successfully", "follow": follow}


@router.delete("/unfollow")
def unfollow_user(
    payload: FollowRequest,
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    """Stop following a user."""
    service.unfollow(current_user.id, payload.user_id)
    return {"message": "User unfollowed successfully"}


@router.get("/following")
def get_following(
    limit: int = Query(USER_LIST_PAGE_SIZE, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    """Accounts the caller follows, most recent first."""
    return service.list_following(current_user.id, limit, offset)


@router.get("/followers")
def get_followers(
    limit: int = Query(USER_LIST_PAGE_SIZE, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    """Accounts following the caller, most recent first."""
    return service.list_followers(current_user.id, limit, offset)


@router.get("/stats")
def get_follow_stats(
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Follower, following and post counts for the caller."""
    profile = service.get_profile(current_user.id)
    return {
        "stats": {
            "follower_count": profile["follower_count"],
            "following_count": profile["following_count"],
            "post_count": profile["post_count"],
        }
    }


# ----- Own account -----


@router.get("/me")
def get_my_profile(
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: UserService = Depends(get_user_service),
):
    return {"user": service.get_profile(current_user.id, include_email=True)}


@router.put("/me")
def update_my_profile(
    payload: UserProfileUpdate,
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Change display name and/or profile picture."""
    user = service.update_profile(current_user.id, payload.to_patch())
    return {"message": "Profile updated successfully", "user": user}


@router.put("/me/password")
def change_my_password(
    payload: PasswordChange,
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: UserService = Depends(get_user_service),
):
    service.change_password(
        current_user.id, payload.current_password, payload.new_password
    )
    return {"message": "Password updated successfully"}


@router.delete("/me")
def delete_my_account(
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Soft-delete the caller's account; existing tokens stop working."""
    service.soft_delete(current_user.id)
    return {"message": "Account deleted successfully"}


# ----- Other users -----


@router.get("/{user_id}/relationship")
def get_relationship(
    user_id: int = Path(..., gt=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    """Follow state between the caller and ``user_id`` in both directions."""
    return {
        "user_id": user_id,
        "relationship": service.check_mutual(current_user.id, user_id),
    }


@router.get("/{user_id}/mutual")
def get_mutual_follows(
    user_id: int = Path(..., gt=0),
    limit: int = Query(USER_LIST_PAGE_SIZE, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: FollowService = Depends(get_follow_service),
):
    """Mutual follows of the caller; other users' lists are not exposed."""
    require_same_identity(user_id, current_user.id)
    return service.mutual_follows(user_id, limit, offset)


@router.get("/{user_id}")
def get_user_profile(
    user_id: int = Path(..., gt=0),
    service: UserService = Depends(get_user_service),
):
    """Public profile with follower, following and post counts."""
    return {"user": service.get_profile(user_id)}
