"""
Product CRUD router.

Maps HTTP verbs and paths onto ProductService calls. No business logic
lives here; domain exceptions are turned into status codes by the
application's exception handlers.
"""

from typing import List
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_product_service
from ..domain.exceptions import DocumentNotFoundException
from ..models import ErrorResponse, Product
from ..services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


def product_location(product: Product) -> str:
    """Location of a product, addressed by id and partition key."""
    query = urlencode({"partitionKey": product.category})
    return f"{router.prefix}/{quote(product.id, safe='')}?{query}"


@router.get(
    "",
    response_model=List[Product],
    summary="List all products",
)
async def get_all_products(service: ProductService = Depends(get_product_service)):
    return await service.get_all_products()


# Static paths are registered before /{product_id} so they are not captured by it
@router.get(
    "/available",
    response_model=List[Product],
    summary="List in-stock products",
)
async def get_available_products(service: ProductService = Depends(get_product_service)):
    return await service.get_available_products()


@router.get(
    "/category/{category}",
    response_model=List[Product],
    summary="List products in a category",
)
async def get_products_by_category(
    category: str, service: ProductService = Depends(get_product_service)
):
    return await service.get_products_by_category(category)


@router.get(
    "/{product_id}",
    response_model=Product,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Get a product by id and partition key",
)
async def get_product(
    product_id: str,
    partition_key: str = Query(..., alias="partitionKey", description="Product category"),
    service: ProductService = Depends(get_product_service),
):
    product = await service.get_product(product_id, partition_key)
    if product is None:
        raise DocumentNotFoundException(product_id, partition_key)
    return product


@router.post(
    "",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"description": "Product already exists", "model": ErrorResponse}},
    summary="Create a product",
)
async def create_product(
    product: Product,
    response: Response,
    service: ProductService = Depends(get_product_service),
):
    created = await service.create_product(product)
    response.headers["Location"] = product_location(created)
    return created


@router.put(
    "/{product_id}",
    response_model=Product,
    responses={400: {"description": "Partition key mismatch", "model": ErrorResponse}},
    summary="Replace a product (created if absent)",
)
async def update_product(
    product_id: str,
    product: Product,
    service: ProductService = Depends(get_product_service),
):
    return await service.update_product(product_id, product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    partition_key: str = Query(..., alias="partitionKey", description="Product category"),
    service: ProductService = Depends(get_product_service),
):
    await service.delete_product(product_id, partition_key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
