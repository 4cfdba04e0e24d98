"""Shared Pydantic models for the product catalog."""

from __future__ import annotations

from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from catalog_common.errors import InvalidProductError

PRODUCT_FIELDS = ("name", "price", "stock", "active")

# Integers stay integers so stored values round-trip exactly as submitted.
Quantity = Union[
    Annotated[int, Field(ge=0)],
    Annotated[float, Field(ge=0, allow_inf_nan=False)],
]


class ProductBase(BaseModel):
    # Strict mode keeps "10" from passing as a price and 1 from passing as a bool.
    model_config = ConfigDict(strict=True)

    name: str
    price: Quantity
    stock: Quantity
    active: bool

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class ProductPatch(ProductBase):
    """Partial update; a field left out of the payload is never validated.

    The fields are not ``Optional``: an explicit ``null`` is
    validated against the field type and rejected.
    """

    name: str = None
    price: Quantity = None
    stock: Quantity = None
    active: bool = None


class Identified(BaseModel):
    id: str


# Base order puts ``id`` ahead of the data fields when serialized.
class Product(ProductBase, Identified):
    pass


class HealthResponse(BaseModel):
    status: str
    service: str


class ErrorResponse(BaseModel):
    error: str


def _first_invalid_field(exc: ValidationError) -> str:
    # pydantic reports field errors in declaration order.
    for error in exc.errors():
        loc = error["loc"]
        if loc and loc[0] in PRODUCT_FIELDS:
            return loc[0]
    return PRODUCT_FIELDS[0]


def parse_product(payload: Any) -> ProductBase:
    """Validate a full product payload.

    Raises ``InvalidProductError`` naming the first offending field in the
    order name, price, stock, active. A payload that is not an object is
    reported against ``name``.
    """
    try:
        return ProductBase.model_validate(payload)
    except ValidationError as exc:
        raise InvalidProductError(_first_invalid_field(exc)) from exc


def parse_patch(payload: Any) -> dict[str, Any]:
    """Validate a partial update and return only the submitted fields."""
    if not isinstance(payload, dict):
        payload = {}
    submitted = {key: value for key, value in payload.items() if key in PRODUCT_FIELDS}
    try:
        patch = ProductPatch.model_validate(submitted)
    except ValidationError as exc:
        raise InvalidProductError(_first_invalid_field(exc)) from exc
    return patch.model_dump(exclude_unset=True)
