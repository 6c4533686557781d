"""Auth domain - registration, login and tokens"""

from .router import router

__all__ = ["router"]
