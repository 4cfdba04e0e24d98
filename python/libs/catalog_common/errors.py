"""Errors raised by the catalog and rendered at the HTTP boundary.

Every subclass of ``CatalogError`` knows the status code it maps to, so the
service registers a single exception handler for the whole family.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for all catalog errors."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidFilterError(CatalogError):
    """A list filter query parameter could not be parsed."""

    status_code = 400


class InvalidProductError(CatalogError):
    """A submitted product field failed validation."""

    status_code = 422

    def __init__(self, field: str) -> None:
        super().__init__(f"invalid {field}")
        self.field = field


class ProductNotFoundError(CatalogError):
    status_code = 404

    def __init__(self, product_id: str) -> None:
        super().__init__("product not found")
        self.product_id = product_id
