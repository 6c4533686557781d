"""Users domain - admin account management"""

from .router import router

__all__ = ["router"]
