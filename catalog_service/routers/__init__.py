"""
API routers for catalog service endpoints.
"""

from . import health_router, product_router

__all__ = ["product_router", "health_router"]
