"""
Custom exceptions for the catalog service domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, Cosmos DB SDK, etc.).
"""

from typing import Optional


class CatalogServiceException(Exception):
    """Base exception for all catalog service errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DocumentNotFoundException(CatalogServiceException):
    """Raised when an operation addresses a document that does not exist."""

    def __init__(self, document_id: str, partition_key: str, container: Optional[str] = None):
        message = f"Document not found: {document_id} (partition key '{partition_key}')"
        if container:
            message = f"Document not found in '{container}': {document_id} (partition key '{partition_key}')"
        super().__init__(
            message=message,
            details={
                "id": document_id,
                "partition_key": partition_key,
                "container": container,
            },
        )


class DocumentConflictException(CatalogServiceException):
    """Raised when a document with the same id and partition key already exists."""

    def __init__(self, document_id: str, partition_key: str, container: Optional[str] = None):
        message = f"Document already exists: {document_id} (partition key '{partition_key}')"
        if container:
            message = f"Document already exists in '{container}': {document_id} (partition key '{partition_key}')"
        super().__init__(
            message=message,
            details={
                "id": document_id,
                "partition_key": partition_key,
                "container": container,
            },
        )


class PartitionKeyMismatchException(CatalogServiceException):
    """Raised when a document body disagrees with the partition key it is written under."""

    def __init__(self, document_id: str, expected: str, actual: Optional[str]):
        message = (
            f"Partition key mismatch for {document_id}: "
            f"expected '{expected}', document has '{actual}'"
        )
        super().__init__(
            message=message,
            details={"id": document_id, "expected": expected, "actual": actual},
        )
