"""
FastAPI application factory.

Wires the layers together by explicit constructor calls:
- Infrastructure: Cosmos DB client and container
- Repositories: generic document repository held by the product repository
- Services: product service (timestamps, partition key routing)
- Routers: HTTP endpoints
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from azure.cosmos.aio import ContainerProxy
from azure.cosmos.exceptions import CosmosHttpResponseError
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, get_settings
from .domain.exceptions import (DocumentConflictException,
                                DocumentNotFoundException,
                                PartitionKeyMismatchException)
from .infrastructure.cosmos_client import CosmosStore
from .logging_config import configure_logging
from .metrics import metrics_endpoint, track_request_metrics
from .middleware import PrometheusMiddleware, RequestIDMiddleware
from .repositories.product_repository import (PARTITION_KEY_PATH,
                                              CosmosProductRepository)
from .routers import health_router, product_router
from .services.product_service import ProductService

logger = structlog.get_logger(__name__)


def create_product_service(container: ContainerProxy) -> ProductService:
    """
    Create the product service with its repository.

    Args:
        container: Products container proxy

    Returns:
        Configured ProductService instance
    """
    repository = CosmosProductRepository(container)
    return ProductService(repository)


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ContainerProxy] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings; loaded from the environment if None
        container: Products container to use instead of connecting to
            Cosmos DB from settings

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, use_json=settings.LOG_JSON)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Catalog Service", version=__version__)

        store: Optional[CosmosStore] = None
        products = container
        if products is None:
            store = CosmosStore.from_settings(settings)
            products = store.get_container(settings.COSMOS_PRODUCTS_CONTAINER)

        app.state.product_service = create_product_service(products)
        logger.info(
            "Product service initialized",
            container=settings.COSMOS_PRODUCTS_CONTAINER,
            partition_key_path=PARTITION_KEY_PATH,
        )

        yield

        logger.info("Shutting down Catalog Service")
        app.state.product_service = None
        if store is not None:
            await store.close()
        logger.info("Catalog Service stopped")

    app = FastAPI(
        title="Catalog Service",
        description="CRUD API over a partitioned product collection",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        openapi_url="/api/openapi.json" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "X-Request-ID"],
        expose_headers=["Location", "X-Request-ID"],
    )
    app.add_middleware(PrometheusMiddleware, track_func=track_request_metrics)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(product_router.router)
    app.include_router(health_router.router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus metrics endpoint."""
        return await metrics_endpoint()

    register_exception_handlers(app)

    return app


def _error(status_code: int, detail: str, error_code: str, details: Optional[dict] = None):
    content = {"detail": detail, "error_code": error_code}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


# 4xx store statuses that are transient; every other 4xx is the caller's fault
RETRYABLE_STORE_STATUSES = {408, 429}


def _is_rejected_request(store_status: Optional[int]) -> bool:
    return (
        store_status is not None
        and 400 <= store_status < 500
        and store_status not in RETRYABLE_STORE_STATUSES
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain and store exceptions onto HTTP responses."""

    @app.exception_handler(DocumentNotFoundException)
    async def document_not_found_handler(request: Request, exc: DocumentNotFoundException):
        return _error(status.HTTP_404_NOT_FOUND, exc.message, "not_found", exc.details)

    @app.exception_handler(DocumentConflictException)
    async def document_conflict_handler(request: Request, exc: DocumentConflictException):
        return _error(status.HTTP_409_CONFLICT, exc.message, "conflict", exc.details)

    @app.exception_handler(PartitionKeyMismatchException)
    async def partition_key_mismatch_handler(
        request: Request, exc: PartitionKeyMismatchException
    ):
        return _error(
            status.HTTP_400_BAD_REQUEST, exc.message, "partition_key_mismatch", exc.details
        )

    @app.exception_handler(CosmosHttpResponseError)
    async def store_error_handler(request: Request, exc: CosmosHttpResponseError):
        if _is_rejected_request(exc.status_code):
            logger.warning(
                "Document store rejected request",
                path=request.url.path,
                method=request.method,
                store_status=exc.status_code,
                error=str(exc),
            )
            return _error(
                status.HTTP_400_BAD_REQUEST,
                "Document store rejected the request",
                "store_rejected_request",
                {"store_status": exc.status_code},
            )

        logger.error(
            "Document store request failed",
            path=request.url.path,
            method=request.method,
            store_status=exc.status_code,
            error=str(exc),
        )
        return _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Document store unavailable",
            "store_unavailable",
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions."""
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            "internal_server_error",
        )


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "catalog_service.app:create_app",
        factory=True,
        host=_settings.SERVICE_HOST,
        port=_settings.SERVICE_PORT,
        log_level=_settings.LOG_LEVEL.lower(),
    )
