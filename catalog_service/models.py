"""Pydantic models for stored documents and request/response validation."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Product(BaseModel):
    """
    Product document stored in the products container.

    ``category`` is the partition key. Field names on the wire and in the
    store are camelCase (``inStock``, ``createdAt``); store system
    properties such as ``_etag`` and ``_ts`` are dropped on load.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "id": "3f1c2a9e-4b7d-4c55-9f0e-2d1b6a8e7c10",
                "name": "Widget",
                "category": "Tools",
                "price": 9.99,
                "description": "A very useful widget",
                "inStock": True,
                "createdAt": "2024-01-01T00:00:00Z",
                "updatedAt": "2024-01-01T00:00:00Z",
            }
        },
    )

    id: str = Field(default_factory=lambda: str(uuid4()), min_length=1)
    name: str = Field(default="", max_length=200)
    category: str = Field(default="", description="Partition key")
    price: float = Field(default=0.0, ge=0)
    description: Optional[str] = Field(None, max_length=2000)
    in_stock: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_to_utc(cls, v: datetime) -> datetime:
        """Read timestamps without an offset as UTC and convert the rest to UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str
    error_code: Optional[str] = None
