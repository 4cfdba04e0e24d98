"""Product Service: FastAPI application for managing the product catalog.

The app is assembled by ``create_app`` and instantiated at import time as
``app`` so it can be served directly::

    uvicorn product_service.app:app --port 3000
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.parse import quote

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_common.errors import CatalogError
from catalog_common.models import ErrorResponse, HealthResponse, Product
from product_service.catalog import Catalog
from product_service.config import Settings, settings
from product_service.logging_config import setup_logging

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse}}
UNPROCESSABLE = {422: {"model": ErrorResponse}}


def get_catalog(request: Request) -> Catalog:
    return request.app.state.catalog


def _is_json(content_type: str) -> bool:
    return content_type.split(";", 1)[0].strip().lower() == "application/json"


def _reject_constant(literal: str):
    raise ValueError(f"{literal} is not valid JSON")


async def json_body(request: Request) -> Any:
    """Decode an ``application/json`` request body.

    Any other content type, and an empty body, reads as ``{}``. The top-level
    value must be an object or an array. Decoding failures are left to the
    internal error handler.
    """
    if not _is_json(request.headers.get("content-type", "")):
        return {}
    raw = await request.body()
    if not raw.strip():
        return {}
    payload = json.loads(raw, parse_constant=_reject_constant)
    if not isinstance(payload, (dict, list)):
        raise ValueError("JSON body must be an object or an array")
    return payload


def product_location(product_id: str) -> str:
    return f"/products/{quote(product_id, safe='')}"


@router.get("/health", response_model=HealthResponse)
@router.head("/health", include_in_schema=False)
def health():
    return HealthResponse(status="ok", service="product-service")


@router.get("/products", response_model=list[Product], responses={400: {"model": ErrorResponse}})
@router.head("/products", include_in_schema=False)
def list_products(
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    active: Optional[str] = Query(None),
    catalog: Catalog = Depends(get_catalog),
):
    return catalog.query(min_price=min_price, max_price=max_price, active=active)


@router.get("/products/{product_id}", response_model=Product, responses=NOT_FOUND)
@router.head("/products/{product_id}", include_in_schema=False)
def get_product(product_id: str, catalog: Catalog = Depends(get_catalog)):
    return catalog.get(product_id)


@router.post(
    "/products",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    responses=UNPROCESSABLE,
)
def create_product(
    response: Response,
    payload: Any = Depends(json_body),
    catalog: Catalog = Depends(get_catalog),
):
    product = catalog.create(payload)
    response.headers["Location"] = product_location(product.id)
    return product


@router.put(
    "/products/{product_id}",
    response_model=Product,
    responses={201: {"model": Product}, **UNPROCESSABLE},
)
def replace_product(
    product_id: str,
    response: Response,
    payload: Any = Depends(json_body),
    catalog: Catalog = Depends(get_catalog),
):
    product, created = catalog.replace(product_id, payload)
    if created:
        response.status_code = status.HTTP_201_CREATED
        response.headers["Location"] = product_location(product.id)
    return product


@router.patch(
    "/products/{product_id}",
    response_model=Product,
    responses={**NOT_FOUND, **UNPROCESSABLE},
)
def update_product(
    product_id: str,
    payload: Any = Depends(json_body),
    catalog: Catalog = Depends(get_catalog),
):
    return catalog.update(product_id, payload)


@router.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
)
def delete_product(product_id: str, catalog: Catalog = Depends(get_catalog)):
    catalog.delete(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.message)
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and unsupported methods are both "no such endpoint".
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return error_response(status.HTTP_404_NOT_FOUND, "route not found")
        return error_response(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error")


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own, optionally seeded, catalog."""
    app_settings = app_settings or settings
    setup_logging(app_settings.log_level, app_settings.log_file)

    app = FastAPI(title=app_settings.project_name, version=app_settings.api_version)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Location"],
    )

    catalog = Catalog()
    if app_settings.seed_demo_data:
        catalog.seed()
    app.state.catalog = catalog

    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    logger.info("API listening on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
