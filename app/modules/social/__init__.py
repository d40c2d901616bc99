"""Social interactions package exports."""

from .models import Follow
from .schemas import FollowRequest

__all__ = ["Follow", "FollowRequest"]
