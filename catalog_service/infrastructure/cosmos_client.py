"""
Cosmos DB client management.

One async CosmosClient per process. Containers handed out here are safe to
share across concurrent requests; retries on throttling are left to the
SDK's own retry policy.
"""

from typing import Optional, Union

import structlog
from azure.cosmos.aio import ContainerProxy, CosmosClient
from azure.identity.aio import DefaultAzureCredential

from ..config import Settings

logger = structlog.get_logger(__name__)


class CosmosStore:
    """
    Owns the Cosmos DB client and its credential.

    Authenticates with the account key when one is configured and falls
    back to DefaultAzureCredential (managed identity, Azure CLI, ...)
    otherwise.
    """

    def __init__(self, account: str, database_name: str, key: Optional[str] = None):
        """
        Initialize the store client.

        Args:
            account: Account endpoint URL
            database_name: Database holding the containers
            key: Account key; None or empty selects DefaultAzureCredential

        Raises:
            ValueError: If the account endpoint or database name is missing
        """
        if not account:
            raise ValueError("Cosmos DB account endpoint is not configured (COSMOS_ACCOUNT)")
        if not database_name:
            raise ValueError("Cosmos DB database name is not configured (COSMOS_DATABASE_NAME)")

        self.account = account
        self.database_name = database_name

        self._credential: Optional[DefaultAzureCredential] = None
        credential: Union[str, DefaultAzureCredential]
        if key:
            credential = key
            auth_mode = "key"
        else:
            self._credential = DefaultAzureCredential()
            credential = self._credential
            auth_mode = "default_azure_credential"

        self.client = CosmosClient(account, credential=credential)
        self.database = self.client.get_database_client(database_name)

        logger.info(
            "Cosmos DB client created",
            account=account,
            database=database_name,
            auth_mode=auth_mode,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CosmosStore":
        """Build the store client from application settings."""
        return cls(
            account=settings.COSMOS_ACCOUNT,
            database_name=settings.COSMOS_DATABASE_NAME,
            key=settings.COSMOS_KEY or None,
        )

    def get_container(self, container_name: str) -> ContainerProxy:
        """
        Get a container proxy.

        No network call is made; a missing container surfaces on first use.
        """
        return self.database.get_container_client(container_name)

    async def close(self) -> None:
        """Close the client and, when owned, the credential."""
        logger.info("Closing Cosmos DB client")
        await self.client.close()
        if self._credential is not None:
            await self._credential.close()
        logger.info("Cosmos DB client closed")
