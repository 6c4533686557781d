"""Calls domain - voice calls between customers and providers"""

from .router import router

__all__ = ["router"]
