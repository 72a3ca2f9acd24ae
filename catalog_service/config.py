"""Configuration for Catalog Service."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Catalog service configuration.

    All settings can be overridden via environment variables.
    """

    # Service configuration
    SERVICE_NAME: str = Field(default="catalog-service")
    SERVICE_HOST: str = Field(default="0.0.0.0")
    SERVICE_PORT: int = Field(default=8000, ge=1, le=65535)
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    LOG_JSON: bool = Field(default=True)

    # Cosmos DB
    COSMOS_ACCOUNT: str = Field(
        default="", description="Account endpoint, e.g. https://<account>.documents.azure.com:443/"
    )
    # Empty key means managed identity via DefaultAzureCredential
    COSMOS_KEY: str = Field(default="")
    COSMOS_DATABASE_NAME: str = Field(default="catalog")
    COSMOS_PRODUCTS_CONTAINER: str = Field(default="products")

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:3000")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
