"""User accounts and settings."""

from .models import LoginIdentity, User
from .service import UserRepository, UserService

__all__ = ["LoginIdentity", "User", "UserRepository", "UserService"]
