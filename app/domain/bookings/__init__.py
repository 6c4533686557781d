"""Bookings domain - scheduled fulfilment of accepted quotes"""

from .router import router

__all__ = ["router"]
