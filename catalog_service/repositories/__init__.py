"""
Repository layer - Data access abstractions.

This layer provides interfaces for document persistence and retrieval,
hiding the document store SDK from the business logic.
"""
