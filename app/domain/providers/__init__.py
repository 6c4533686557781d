"""Providers domain - service provider profiles and verification"""

from .router import router

__all__ = ["router"]
