"""Quotes domain - provider bids on service requests"""

from .router import router

__all__ = ["router"]
