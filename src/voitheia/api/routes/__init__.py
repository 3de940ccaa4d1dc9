"""Route group exports."""

from . import health, requests, users

__all__ = ["health", "requests", "users"]
