"""Authorization guards applied by routers before a mutation.

Pure comparisons over identifiers that are already loaded; nothing here touches
the database.
"""

from typing import Optional

from app.core.exceptions import (
    IdentityMismatchException,
    NotAuthenticatedException,
    OwnershipRequiredException,
)


def require_authenticated(caller) -> None:
    """Raise 401 when no caller identity was resolved for the request."""
    if caller is None:
        raise NotAuthenticatedException()


def require_ownership(owner_id: Optional[int], caller_id: int, resource: str) -> None:
    """Raise 403 unless ``caller_id`` owns the resource."""
    if owner_id != caller_id:
        raise OwnershipRequiredException(resource)


def require_same_identity(path_user_id: int, caller_id: int) -> None:
    """Raise 403 when a route scoped to the caller's own data names someone else."""
    if path_user_id != caller_id:
        raise IdentityMismatchException()


__all__ = ["require_authenticated", "require_ownership", "require_same_identity"]
