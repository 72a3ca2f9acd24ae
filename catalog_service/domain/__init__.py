"""
Domain layer - Core business errors.

Exceptions here are independent of HTTP and of the document store SDK.
"""
