"""
Product repository.

Product-shaped read filters built on the generic document repository.
CosmosProductRepository holds a CosmosDocumentRepository[Product] rather
than extending it.
"""

from abc import abstractmethod
from typing import Any, Dict, List, Optional

from azure.cosmos.aio import ContainerProxy

from ..models import Product
from .document_repository import CosmosDocumentRepository, IDocumentRepository

CATEGORY_QUERY = "SELECT * FROM c WHERE c.category = @category"
IN_STOCK_QUERY = "SELECT * FROM c WHERE c.inStock = true"

# Products are partitioned by category; the service routes every write by it
PARTITION_KEY_PATH = "/category"


class IProductRepository(IDocumentRepository[Product]):
    """Repository interface for products, adding category and stock filters."""

    @abstractmethod
    async def find_by_category(self, category: str) -> List[Product]:
        """
        Find products whose category equals ``category`` exactly.

        Args:
            category: Category value (case-sensitive)

        Returns:
            Matching products across all result pages
        """
        pass

    @abstractmethod
    async def find_available(self) -> List[Product]:
        """
        Find products that are in stock.

        Returns:
            Products with ``inStock`` set to true
        """
        pass


class CosmosProductRepository(IProductRepository):
    """Cosmos DB product repository."""

    def __init__(self, container: ContainerProxy):
        self.documents: CosmosDocumentRepository[Product] = CosmosDocumentRepository(
            container, Product, PARTITION_KEY_PATH
        )

    async def get_by_id(self, document_id: str, partition_key: str) -> Optional[Product]:
        return await self.documents.get_by_id(document_id, partition_key)

    async def get_all(self) -> List[Product]:
        return await self.documents.get_all()

    async def query(
        self, query_text: str, parameters: Optional[List[Dict[str, Any]]] = None
    ) -> List[Product]:
        return await self.documents.query(query_text, parameters)

    async def create(self, document: Product, partition_key: str) -> Product:
        return await self.documents.create(document, partition_key)

    async def update(self, document_id: str, document: Product, partition_key: str) -> Product:
        return await self.documents.update(document_id, document, partition_key)

    async def delete(self, document_id: str, partition_key: str) -> None:
        await self.documents.delete(document_id, partition_key)

    async def find_by_category(self, category: str) -> List[Product]:
        # Parameterized; the category never becomes part of the query text
        return await self.documents.query(
            CATEGORY_QUERY, [{"name": "@category", "value": category}]
        )

    async def find_available(self) -> List[Product]:
        return await self.documents.query(IN_STOCK_QUERY)
