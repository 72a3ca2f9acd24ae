"""
Catalog Service.

CRUD API over a partitioned product collection stored in Azure Cosmos DB.
"""

__version__ = "1.0.0"
