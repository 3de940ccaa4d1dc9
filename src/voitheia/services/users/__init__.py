"""User profile services."""

from .service import delete_user, get_user, register_user, update_user

__all__ = ["register_user", "get_user", "update_user", "delete_user"]
