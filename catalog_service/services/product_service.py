"""
Product business logic service layer.

The only layer that touches lifecycle timestamps. Repositories store
whatever they are given; this service decides when createdAt and
updatedAt change.
"""

from datetime import datetime
from typing import Callable, List, Optional

import structlog

from ..models import Product, utc_now
from ..repositories.product_repository import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """
    Product service.

    Stamps timestamps on writes and routes every write by the product's
    category, which is the container's partition key. Reads are passed
    straight through. Errors from the repository propagate unchanged.
    """

    def __init__(
        self,
        repository: IProductRepository,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize product service.

        Args:
            repository: Product repository
            clock: Returns the current aware UTC datetime
        """
        self.repository = repository
        self.clock = clock

    async def get_all_products(self) -> List[Product]:
        logger.info("Retrieving all products")
        return await self.repository.get_all()

    async def get_product(self, product_id: str, partition_key: str) -> Optional[Product]:
        logger.info("Retrieving product", id=product_id, partition_key=partition_key)
        return await self.repository.get_by_id(product_id, partition_key)

    async def get_products_by_category(self, category: str) -> List[Product]:
        logger.info("Retrieving products in category", category=category)
        return await self.repository.find_by_category(category)

    async def get_available_products(self) -> List[Product]:
        logger.info("Retrieving in-stock products")
        return await self.repository.find_available()

    async def create_product(self, product: Product) -> Product:
        """
        Create a product.

        Both timestamps are set to the same instant, overwriting any values
        the caller supplied.

        Args:
            product: Product to create; its category is the partition key

        Returns:
            The stored product

        Raises:
            DocumentConflictException: If the id already exists in the category
        """
        now = self.clock()
        stamped = product.model_copy(update={"created_at": now, "updated_at": now})

        logger.info(
            "Creating product",
            id=stamped.id,
            name=stamped.name,
            category=stamped.category,
        )
        return await self.repository.create(stamped, stamped.category)

    async def update_product(self, product_id: str, product: Product) -> Product:
        """
        Replace a product, creating it if it does not exist.

        The id argument wins over any id in the body. Only updatedAt is
        restamped; createdAt is stored exactly as supplied.

        Args:
            product_id: Id of the product to replace
            product: Full replacement document; its category is the partition key

        Returns:
            The stored product
        """
        stamped = product.model_copy(update={"id": product_id, "updated_at": self.clock()})

        logger.info("Updating product", id=product_id, category=stamped.category)
        return await self.repository.update(product_id, stamped, stamped.category)

    async def delete_product(self, product_id: str, partition_key: str) -> None:
        """
        Delete a product.

        Raises:
            DocumentNotFoundException: If the product does not exist
        """
        logger.info("Deleting product", id=product_id, partition_key=partition_key)
        await self.repository.delete(product_id, partition_key)
