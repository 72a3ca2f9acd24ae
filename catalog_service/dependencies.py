"""
Shared dependencies for the application.

Provides dependency injection functions used across routers. Instances
live on ``app.state`` and are set by the application lifespan.
"""

from fastapi import Request

from .services.product_service import ProductService


async def get_product_service(request: Request) -> ProductService:
    """
    Get product service instance for dependency injection.

    Used by all routers that need the product service.
    """
    service = getattr(request.app.state, "product_service", None)
    if service is None:
        raise RuntimeError("Product service not initialized")
    return service
