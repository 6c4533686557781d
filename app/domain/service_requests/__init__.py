"""Service requests domain - customer job postings and their lifecycle"""

from .router import router

__all__ = ["router"]
