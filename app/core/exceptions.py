"""
Custom Exception Classes for the Application
Provides a unified error handling system with proper HTTP status codes and messages.

Uniqueness conflicts (duplicate username/email, follow, like, self-follow) and
business-rule violations both surface as 400 so clients see one status for
"the request cannot be applied to the current state".
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class AppException(HTTPException):
    """
    Base exception class for all application exceptions.
    Provides consistent error response format.
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(
            status_code=status_code,
            detail={
                "error_code": error_code,
                "message": message,
                "details": self.details,
            },
            headers=headers,
        )


# ==================== Authentication Exceptions ====================


class AuthenticationException(AppException):
    """Base class for authentication-related exceptions."""

    def __init__(
        self,
        error_code: str = "authentication_failed",
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
            message=message,
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotAuthenticatedException(AuthenticationException):
    """Raised when a protected route is called without a bearer token."""

    def __init__(self, message: str = "Access token required"):
        super().__init__(error_code="not_authenticated", message=message)


class InvalidCredentialsException(AuthenticationException):
    """Raised when user provides invalid credentials."""

    def __init__(self):
        super().__init__(
            error_code="invalid_credentials",
            message="Invalid username or password",
        )


class TokenExpiredException(AuthenticationException):
    """Raised when authentication token has expired."""

    def __init__(self):
        super().__init__(
            error_code="token_expired",
            message="Authentication token has expired",
        )


class InvalidTokenException(AuthenticationException):
    """Raised when authentication token is invalid."""

    def __init__(self):
        super().__init__(
            error_code="invalid_token",
            message="Invalid authentication token",
        )


# ==================== Authorization Exceptions ====================


class PermissionDeniedException(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(
        self, message: str = "You don't have permission to perform this action"
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="permission_denied",
            message=message,
        )


class OwnershipRequiredException(PermissionDeniedException):
    """Raised when action requires resource ownership."""

    def __init__(self, resource: str):
        super().__init__(
            message=f"You must be the owner of this {resource} to perform this action"
        )


class IdentityMismatchException(PermissionDeniedException):
    """Raised when a route scoped to the caller's own data names another user."""

    def __init__(self):
        super().__init__(message="You can only access your own data")


# ==================== Resource Exceptions ====================


class ResourceNotFoundException(AppException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Optional[Any] = None):
        details = {}
        if identifier is not None:
            details["identifier"] = str(identifier)

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="resource_not_found",
            message=f"{resource} not found",
            details=details,
        )


class ResourceAlreadyExistsException(AppException):
    """Raised when trying to create a resource that already exists."""

    def __init__(
        self,
        resource: str,
        field: Optional[str] = None,
        message: Optional[str] = None,
    ):
        details = {}
        if field:
            details["field"] = field

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="resource_already_exists",
            message=message or f"{resource} already exists",
            details=details,
        )


class ResourceConflictException(AppException):
    """Raised when there's a conflict with the resource state."""

    def __init__(
        self,
        message: str,
        error_code: str = "resource_conflict",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            message=message,
            details=details,
        )


class SelfFollowException(ResourceConflictException):
    """Raised when a user tries to follow themselves."""

    def __init__(self):
        super().__init__(message="You cannot follow yourself", error_code="self_follow")


class AlreadyFollowingException(ResourceConflictException):
    """Raised when the follow edge already exists."""

    def __init__(self, followed_id: Optional[int] = None):
        super().__init__(
            message="You are already following this user",
            error_code="already_following",
            details={"user_id": followed_id} if followed_id is not None else None,
        )


class AlreadyLikedException(ResourceConflictException):
    """Raised when the like edge already exists."""

    def __init__(self, post_id: Optional[int] = None):
        super().__init__(
            message="You have already liked this post",
            error_code="already_liked",
            details={"post_id": post_id} if post_id is not None else None,
        )


# ==================== Validation Exceptions ====================


class ValidationException(AppException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {}
        if field:
            details["field"] = field

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="validation_error",
            message=message,
            details=details,
        )


# ==================== Business Logic Exceptions ====================


class BusinessLogicException(AppException):
    """Base class for business logic exceptions."""

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        super().__init__(
            status_code=status_code,
            error_code=error_code,
            message=message,
            details=details,
        )


class CommentsDisabledException(BusinessLogicException):
    """Raised when commenting on a post whose owner turned comments off."""

    def __init__(self, post_id: Optional[int] = None):
        super().__init__(
            error_code="comments_disabled",
            message="Comments are disabled for this post",
            details={"post_id": post_id} if post_id is not None else None,
        )


class NoFieldsToUpdateException(BusinessLogicException):
    """Raised when a partial update carries no fields."""

    def __init__(self):
        super().__init__(
            error_code="no_fields_to_update",
            message="No fields to update",
        )


class NotFollowingException(BusinessLogicException):
    """Raised when unfollowing a user that is not followed."""

    def __init__(self, followed_id: Optional[int] = None):
        super().__init__(
            error_code="not_following",
            message="You are not following this user",
            details={"user_id": followed_id} if followed_id is not None else None,
        )


class DatabaseException(AppException):
    """Raised when database operation fails."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="database_error",
            message=message,
        )

