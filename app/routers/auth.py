"""Authentication router with registration, login and caller lookup."""

# =====================================================
# ==================== Imports ========================
# =====================================================
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app import oauth2
from app.core.database import get_db
from app.core.middleware.rate_limit import AUTH_RATE_LIMIT, limiter
from app.modules.users.schemas import UserCreate, UserLogin
from app.services.users import UserService

# =====================================================
# =============== Global Constants ====================
# =====================================================
router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Provide a UserService instance via FastAPI DI."""
    return UserService(db)


def _token_for(user: dict) -> str:
    return oauth2.create_access_token(
        {"user_id": user["id"], "username": user["username"]}
    )


# =====================================================
# ==================== Endpoints ======================
# =====================================================


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
def register_user(
    request: Request,
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
):
    """
    Register a new account and return it together with an access token.

    Username and email must not be held by another active account.
    """
    user = service.register(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        name=payload.name,
    )
    return {
        "message": "User registered successfully",
        "user": user,
        "token": _token_for(user),
        "token_type": "bearer",
    }


@router.post("/login")
@limiter.limit(AUTH_RATE_LIMIT)
def login(
    request: Request,
    credentials: UserLogin,
    service: UserService = Depends(get_user_service),
):
    """
    Exchange username and password for an access token.

    Unknown usernames and wrong passwords produce the same 401.
    """
    user = service.authenticate(credentials.username, credentials.password)
    return {
        "message": "Login successful",
        "user": user,
        "token": _token_for(user),
        "token_type": "bearer",
    }


@router.get("/me")
def read_current_user(
    current_user: oauth2.CurrentUser = Depends(oauth2.get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Return the account behind the bearer token."""
    return {"user": service.get_by_id(current_user.id)}
