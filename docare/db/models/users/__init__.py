from .user import User, USER_ROLES, USER_STATUSES
from .profile import UserProfile

__all__ = ["User", "UserProfile", "USER_ROLES", "USER_STATUSES"]
