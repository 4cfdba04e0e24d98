"""In-memory product catalog.

``Catalog`` owns the ordered product collection and is the only code that
mutates it. Route functions run in FastAPI's thread pool, so every operation
holds the catalog lock for its whole read-modify-write sequence.
"""

from __future__ import annotations

import logging
import math
import re
import threading
from typing import Any, Optional
from uuid import uuid4

from catalog_common.errors import InvalidFilterError, ProductNotFoundError
from catalog_common.models import Product, parse_patch, parse_product

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = (
    {"name": "Pen", "price": 15.5, "stock": 100, "active": True},
    {"name": "Notebook", "price": 45, "stock": 50, "active": True},
)


# Query-string number grammar: decimal with optional exponent, signed
# Infinity, or an unsigned 0x/0o/0b integer literal.
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_INFINITY = re.compile(r"[+-]?Infinity")
_RADIX_PREFIXES = {"0x": 16, "0X": 16, "0o": 8, "0O": 8, "0b": 2, "0B": 2}
_RADIX_DIGITS = {16: "0123456789abcdefABCDEF", 8: "01234567", 2: "01"}


def parse_price_filter(name: str, raw: str) -> float:
    """Parse a ``minPrice``/``maxPrice`` query value.

    A blank value reads as ``0``. ``nan``, lowercase ``inf`` and digit
    separators are rejected.
    """
    text = raw.strip()
    if not text:
        return 0.0
    if _DECIMAL.fullmatch(text) or _INFINITY.fullmatch(text):
        return float(text)
    base = _RADIX_PREFIXES.get(text[:2])
    digits = text[2:]
    if base and digits and all(char in _RADIX_DIGITS[base] for char in digits):
        try:
            return float(int(digits, base))
        except OverflowError:
            return math.inf
    raise InvalidFilterError(f"{name} must be numeric")


def parse_active_filter(raw: str) -> bool:
    if raw not in ("true", "false"):
        raise InvalidFilterError("active must be true or false")
    return raw == "true"


class Catalog:
    def __init__(self) -> None:
        self._products: list[Product] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._products)

    def seed(self, records=DEMO_PRODUCTS) -> None:
        for record in records:
            self.create(record)

    def _index_of(self, product_id: str) -> int:
        for index, product in enumerate(self._products):
            if product.id == product_id:
                return index
        return -1

    def query(
        self,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
        active: Optional[str] = None,
    ) -> list[Product]:
        """Return products in insertion order, narrowed by the given filters.

        Filters arrive as raw query strings and are all parsed before the
        collection is read; they combine with AND.
        """
        lower = parse_price_filter("minPrice", min_price) if min_price is not None else None
        upper = parse_price_filter("maxPrice", max_price) if max_price is not None else None
        wanted = parse_active_filter(active) if active is not None else None

        with self._lock:
            products = list(self._products)
        if lower is not None:
            products = [p for p in products if p.price >= lower]
        if upper is not None:
            products = [p for p in products if p.price <= upper]
        if wanted is not None:
            products = [p for p in products if p.active is wanted]
        return products

    def get(self, product_id: str) -> Product:
        with self._lock:
            index = self._index_of(product_id)
            if index == -1:
                raise ProductNotFoundError(product_id)
            return self._products[index]

    def create(self, payload: Any) -> Product:
        data = parse_product(payload)
        product = Product(id=str(uuid4()), **data.model_dump())
        with self._lock:
            self._products.append(product)
        logger.info("Created product %s", product.id)
        return product

    def replace(self, product_id: str, payload: Any) -> tuple[Product, bool]:
        """Replace the product stored under ``product_id``, creating it if absent.

        Returns the stored product and ``True`` when it was newly created.
        """
        data = parse_product(payload)
        product = Product(id=product_id, **data.model_dump())
        with self._lock:
            index = self._index_of(product_id)
            if index == -1:
                self._products.append(product)
                created = True
            else:
                self._products[index] = product
                created = False
        logger.info("%s product %s", "Created" if created else "Replaced", product_id)
        return product, created

    def update(self, product_id: str, payload: Any) -> Product:
        with self._lock:
            index = self._index_of(product_id)
            if index == -1:
                raise ProductNotFoundError(product_id)
            changes = parse_patch(payload)
            product = self._products[index].model_copy(update=changes)
            self._products[index] = product
        logger.info("Updated product %s fields=%s", product_id, sorted(changes))
        return product

    def delete(self, product_id: str) -> None:
        with self._lock:
            index = self._index_of(product_id)
            if index == -1:
                raise ProductNotFoundError(product_id)
            del self._products[index]
        logger.info("Deleted product %s", product_id)
