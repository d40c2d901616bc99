"""User services exports."""

from app.services.users.service import UserService, require_active_user

__all__ = ["UserService", "require_active_user"]
