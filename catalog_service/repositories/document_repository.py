"""
Generic partitioned-document repository.

IDocumentRepository is the storage contract for one container and one
document model; CosmosDocumentRepository implements it on top of the async
Cosmos DB SDK. Every single-item operation is addressed by id plus
partition key, and every multi-item operation drains all result pages.
"""

import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar

import structlog
from azure.cosmos.aio import ContainerProxy
from azure.cosmos.exceptions import (CosmosResourceExistsError,
                                     CosmosResourceNotFoundError)
from pydantic import BaseModel

from ..domain.exceptions import (DocumentConflictException,
                                 DocumentNotFoundException,
                                 PartitionKeyMismatchException)
from ..metrics import track_query_pages, track_store_operation

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

SELECT_ALL = "SELECT * FROM c"


class IDocumentRepository(ABC, Generic[T]):
    """
    Abstract repository interface for partitioned document storage.

    Implementations never stamp timestamps or apply business rules; they
    only move documents in and out of the store.
    """

    @abstractmethod
    async def get_by_id(self, document_id: str, partition_key: str) -> Optional[T]:
        """
        Point-read a document.

        Args:
            document_id: Document id
            partition_key: Partition key value the document lives under

        Returns:
            The document, or None if no document has this address
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[T]:
        """
        Read every document in the container.

        Returns:
            All documents, in the order the store returned them
        """
        pass

    @abstractmethod
    async def query(
        self, query_text: str, parameters: Optional[List[Dict[str, Any]]] = None
    ) -> List[T]:
        """
        Run a query and return the complete result set.

        Args:
            query_text: Query in the store's SQL dialect
            parameters: Named parameters, e.g. [{"name": "@x", "value": 1}]

        Returns:
            All matching documents across all result pages
        """
        pass

    @abstractmethod
    async def create(self, document: T, partition_key: str) -> T:
        """
        Insert a new document.

        Raises:
            DocumentConflictException: If the id already exists in the partition
        """
        pass

    @abstractmethod
    async def update(self, document_id: str, document: T, partition_key: str) -> T:
        """
        Replace a document, creating it if absent (upsert).

        Returns:
            The stored state after the write
        """
        pass

    @abstractmethod
    async def delete(self, document_id: str, partition_key: str) -> None:
        """
        Delete a document.

        Raises:
            DocumentNotFoundException: If no document has this address
        """
        pass


class CosmosDocumentRepository(IDocumentRepository[T]):
    """
    Cosmos DB implementation of IDocumentRepository.

    Holds a container proxy, the model class documents are materialized
    into, and the container's partition key path. Store system properties
    (``_rid``, ``_etag``, ...) are dropped when a document is materialized.
    """

    def __init__(
        self,
        container: ContainerProxy,
        model: Type[T],
        partition_key_path: str = "/category",
    ):
        """
        Initialize repository.

        Args:
            container: Async container proxy (shared, safe for concurrent use)
            model: Pydantic model class for the documents in this container
            partition_key_path: Container partition key path, e.g. "/category"
        """
        self.container = container
        self.model = model
        self.partition_key_path = partition_key_path
        self._partition_key_segments = [
            segment for segment in partition_key_path.split("/") if segment
        ]
        if not self._partition_key_segments:
            raise ValueError(f"Invalid partition key path: {partition_key_path!r}")

    @property
    def container_name(self) -> str:
        return getattr(self.container, "id", "unknown")

    async def get_by_id(self, document_id: str, partition_key: str) -> Optional[T]:
        with self._track("read"):
            try:
                item = await self.container.read_item(
                    item=document_id, partition_key=partition_key
                )
            except CosmosResourceNotFoundError:
                logger.debug(
                    "Document not found",
                    container=self.container_name,
                    id=document_id,
                    partition_key=partition_key,
                )
                return None

        return self._to_model(item)

    async def get_all(self) -> List[T]:
        return await self.query(SELECT_ALL)

    async def query(
        self, query_text: str, parameters: Optional[List[Dict[str, Any]]] = None
    ) -> List[T]:
        with self._track("query"):
            items = await self._drain(query_text, parameters)

        return [self._to_model(item) for item in items]

    async def create(self, document: T, partition_key: str) -> T:
        body = self._to_body(document, partition_key)

        with self._track("create"):
            try:
                item = await self.container.create_item(body=body)
            except CosmosResourceExistsError as e:
                logger.warning(
                    "Document already exists",
                    container=self.container_name,
                    id=body.get("id"),
                    partition_key=partition_key,
                )
                raise DocumentConflictException(
                    body.get("id"), partition_key, self.container_name
                ) from e

        return self._to_model(item)

    async def update(self, document_id: str, document: T, partition_key: str) -> T:
        body = self._to_body(document, partition_key)
        body["id"] = document_id

        with self._track("upsert"):
            item = await self.container.upsert_item(body=body)

        return self._to_model(item)

    async def delete(self, document_id: str, partition_key: str) -> None:
        with self._track("delete"):
            try:
                await self.container.delete_item(
                    item=document_id, partition_key=partition_key
                )
            except CosmosResourceNotFoundError as e:
                logger.warning(
                    "Delete addressed a missing document",
                    container=self.container_name,
                    id=document_id,
                    partition_key=partition_key,
                )
                raise DocumentNotFoundException(
                    document_id, partition_key, self.container_name
                ) from e

    async def _drain(
        self, query_text: str, parameters: Optional[List[Dict[str, Any]]]
    ) -> List[Dict[str, Any]]:
        """
        Read every page of a query, in page order.

        The SDK pages results server-side; stopping after the first page
        would silently truncate the result set.
        """
        pager = self.container.query_items(query=query_text, parameters=parameters)

        results: List[Dict[str, Any]] = []
        pages = 0
        async for page in pager.by_page():
            pages += 1
            async for item in page:
                results.append(item)

        track_query_pages(pages)
        logger.debug(
            "Query drained",
            container=self.container_name,
            query=query_text,
            pages=pages,
            items=len(results),
        )
        return results

    def _to_body(self, document: T, partition_key: str) -> Dict[str, Any]:
        body = document.model_dump(mode="json", by_alias=True)

        actual = self._partition_key_value(body)
        if actual != partition_key:
            raise PartitionKeyMismatchException(body.get("id"), partition_key, actual)

        return body

    def _partition_key_value(self, body: Dict[str, Any]) -> Optional[str]:
        value: Any = body
        for segment in self._partition_key_segments:
            if not isinstance(value, dict):
                return None
            value = value.get(segment)
        return value

    def _to_model(self, item: Dict[str, Any]) -> T:
        return self.model.model_validate(item)

    @contextmanager
    def _track(self, operation: str) -> Iterator[None]:
        start = time.perf_counter()
        success = False
        try:
            yield
            success = True
        finally:
            track_store_operation(operation, success, time.perf_counter() - start)
