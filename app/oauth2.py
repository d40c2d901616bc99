"""JWT utilities for auth.

Responsibilities:
- Create HS256-signed access tokens carrying ``user_id`` and ``username`` with an expiry.
- Resolve the bearer token into an explicit ``CurrentUser`` value per request.
- Surface typed 401 errors for missing, expired and invalid tokens.
"""

# ============================================
# Imports and Dependencies
# ============================================
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import (
    AppException,
    InvalidTokenException,
    NotAuthenticatedException,
    TokenExpiredException,
)
from app.modules.users.models import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

ALGORITHM = settings.algorithm
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes


# ============================================
# Token Data Models
# ============================================
class TokenData(BaseModel):
    """Claims the service reads back out of a token."""

    id: Optional[int] = None
    username: Optional[str] = None


class CurrentUser(BaseModel):
    """Caller identity resolved for the current request."""

    id: int
    username: str


# ============================================
# Token Creation Function
# ============================================
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token.

    - Clones payload, normalizes user_id to int, and sets the exp claim.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})

    if "user_id" in to_encode:
        try:
            to_encode["user_id"] = int(to_encode["user_id"])
        except (TypeError, ValueError):
            logger.error("Invalid user_id format: %r", to_encode["user_id"])
            raise ValueError("Invalid user_id format")

    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


# ============================================
# Token Verification Function
# ============================================
def verify_access_token(token: str) -> TokenData:
    """Decode a token into TokenData or raise the matching 401."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredException()
    except JWTError as exc:
        logger.info("JWT Error: %s", exc)
        raise InvalidTokenException()

    user_id = payload.get("user_id")
    if user_id is None:
        logger.warning("User ID not found in token payload")
        raise InvalidTokenException()
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise InvalidTokenException()

    return TokenData(id=user_id, username=payload.get("username"))


# ============================================
# Current User Retrieval Functions
# ============================================
def _resolve_user(
    credentials: Optional[HTTPAuthorizationCredentials], db: Session
) -> CurrentUser:
    if credentials is None or not credentials.credentials:
        raise NotAuthenticatedException()

    token_data = verify_access_token(credentials.credentials)

    row = db.execute(
        select(User.id, User.username).where(
            User.id == token_data.id, User.is_active
        )
    ).first()
    if row is None:
        # Token outlived its account (soft-deleted or never existed).
        raise NotAuthenticatedException("User not found or inactive")
    return CurrentUser(id=row.id, username=row.username)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Return the authenticated caller or raise 401."""
    current_user = _resolve_user(credentials, db)
    request.state.user_id = current_user.id
    return current_user


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[CurrentUser]:
    """Like get_current_user, but anonymous or unusable tokens yield None."""
    try:
        current_user = _resolve_user(credentials, db)
    except AppException:
        return None
    request.state.user_id = current_user.id
    return current_user
