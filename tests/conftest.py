"""
Test configuration and fixtures.

FakeContainer stands in for azure.cosmos.aio.ContainerProxy: it keeps
documents in memory keyed by (id, partition key), returns query results in
fixed-size pages through ``query_items(...).by_page()``, and raises the real
azure.cosmos exception types.
"""

import copy
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest
from azure.cosmos.exceptions import (CosmosResourceExistsError,
                                     CosmosResourceNotFoundError)
from fastapi.testclient import TestClient

from catalog_service.app import create_app
from catalog_service.config import Settings
from catalog_service.models import Product

QUERY_PATTERN = re.compile(
    r"^SELECT \* FROM c(?: WHERE c\.(\w+) = (@\w+|true|false|'[^']*'))?$"
)


async def _iterate(items):
    for item in items:
        yield item


class FakePager:
    """Mimics AsyncItemPaged: results are only reachable page by page."""

    def __init__(self, items: List[Dict[str, Any]], page_size: int):
        self.items = items
        self.page_size = page_size
        self.pages_served = 0

    async def by_page(self, continuation_token: Optional[str] = None):
        for start in range(0, len(self.items), self.page_size):
            self.pages_served += 1
            yield _iterate(self.items[start:start + self.page_size])


class FakeContainer:
    """In-memory partitioned container with paged queries."""

    def __init__(self, container_id: str = "products", partition_key_field: str = "category",
                 page_size: int = 2):
        self.id = container_id
        self.partition_key_field = partition_key_field
        self.page_size = page_size
        self.items: Dict[Tuple[str, Any], Dict[str, Any]] = {}
        self.queries: List[Tuple[str, Optional[List[Dict[str, Any]]]]] = []
        self.pagers: List[FakePager] = []
        self._ts = 1700000000

    def _stored(self, body: Dict[str, Any]) -> Dict[str, Any]:
        self._ts += 1
        stored = copy.deepcopy(body)
        stored.update({
            "_rid": f"rid-{body['id']}",
            "_self": f"dbs/catalog/colls/{self.id}/docs/{body['id']}",
            "_etag": f"\"etag-{self._ts}\"",
            "_attachments": "attachments/",
            "_ts": self._ts,
        })
        return stored

    def _key(self, body: Dict[str, Any]) -> Tuple[str, Any]:
        return body["id"], body.get(self.partition_key_field)

    async def read_item(self, item: str, partition_key: Any, **kwargs):
        try:
            return copy.deepcopy(self.items[(item, partition_key)])
        except KeyError:
            raise CosmosResourceNotFoundError(
                status_code=404,
                message="Entity with the specified id does not exist in the system.",
            )

    async def create_item(self, body: Dict[str, Any], **kwargs):
        key = self._key(body)
        if key in self.items:
            raise CosmosResourceExistsError(
                status_code=409,
                message="Entity with the specified id already exists in the system.",
            )
        self.items[key] = self._stored(body)
        return copy.deepcopy(self.items[key])

    async def upsert_item(self, body: Dict[str, Any], **kwargs):
        key = self._key(body)
        self.items[key] = self._stored(body)
        return copy.deepcopy(self.items[key])

    async def delete_item(self, item: str, partition_key: Any, **kwargs):
        if (item, partition_key) not in self.items:
            raise CosmosResourceNotFoundError(
                status_code=404,
                message="Entity with the specified id does not exist in the system.",
            )
        del self.items[(item, partition_key)]

    def query_items(self, query: str, parameters: Optional[List[Dict[str, Any]]] = None,
                    **kwargs):
        self.queries.append((query, parameters))

        match = QUERY_PATTERN.match(query)
        if match is None:
            raise AssertionError(f"FakeContainer cannot evaluate query: {query}")

        field, raw_value = match.groups()
        results = list(self.items.values())
        if field:
            expected = self._resolve(raw_value, parameters or [])
            results = [item for item in results if item.get(field) == expected]

        pager = FakePager(copy.deepcopy(results), self.page_size)
        self.pagers.append(pager)
        return pager

    @staticmethod
    def _resolve(raw_value: str, parameters: List[Dict[str, Any]]) -> Any:
        if raw_value == "true":
            return True
        if raw_value == "false":
            return False
        if raw_value.startswith("@"):
            for parameter in parameters:
                if parameter["name"] == raw_value:
                    return parameter["value"]
            raise AssertionError(f"Missing query parameter {raw_value}")
        return raw_value.strip("'")

    def seed(self, *products: Product) -> None:
        """Store products directly, bypassing any repository."""
        for product in products:
            body = product.model_dump(mode="json", by_alias=True)
            self.items[self._key(body)] = self._stored(body)


@pytest.fixture
def fake_container():
    """Empty in-memory container paging two documents at a time."""
    return FakeContainer()


@pytest.fixture
def fixed_now():
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_products():
    """Products spread over three categories and several pages."""
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        Product(id="p-1", name="Laptop", category="Electronics", price=999.99,
                in_stock=True, created_at=created, updated_at=created),
        Product(id="p-2", name="Novel", category="Books", price=14.5,
                in_stock=False, created_at=created, updated_at=created),
        Product(id="p-3", name="Headphones", category="Electronics", price=199.0,
                in_stock=False, created_at=created, updated_at=created),
        Product(id="p-4", name="Hammer", category="Tools", price=25.0,
                in_stock=True, created_at=created, updated_at=created),
        Product(id="p-5", name="Cable", category="electronics", price=5.0,
                in_stock=True, created_at=created, updated_at=created),
    ]


@pytest.fixture
def test_settings():
    return Settings(
        COSMOS_ACCOUNT="https://localhost:8081/",
        COSMOS_KEY="test-key",
        COSMOS_DATABASE_NAME="catalog-test",
        COSMOS_PRODUCTS_CONTAINER="products",
        LOG_LEVEL="WARNING",
        DEBUG=True,
    )


@pytest.fixture
def client(test_settings, fake_container):
    """Test client backed by the in-memory container."""
    app = create_app(settings=test_settings, container=fake_container)
    with TestClient(app) as test_client:
        yield test_client
