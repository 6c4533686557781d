"""Catalog domain - product categories and provider products"""

from .router import categories_router, products_router

__all__ = ["categories_router", "products_router"]
