"""Product API views.

Exposes the ``ProductService`` via HTTP using a DRF ViewSet.
Domain exceptions are caught and translated into envelope responses;
the view never swallows generic exceptions (those reach the project
exception handler and become a 500 envelope).
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.catalog.repositories.django_repository import ReferenceDjangoRepository
from modules.core.responses import failure, success
from modules.products.dtos import (
    CreateProductDTO,
    ProductQueryOptions,
    UpdateProductDTO,
)
from modules.products.exceptions import ProductNotFound, ProductValidationError
from modules.products.filters import ProductFilter
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService

logger = structlog.get_logger(__name__)

# Request keys copied into the DTOs; everything else in a body is ignored.
WRITABLE_FIELDS = tuple(
    name for name in CreateProductDTO.model_fields if name in UpdateProductDTO.model_fields
)

NOT_FOUND = "Product not found."
NOT_AN_OBJECT = "Request body must be a JSON object."


def _validation_message(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        message = error["msg"].removeprefix("Value error, ")
        parts.append(f"{field}: {message}" if field else message)
    return "; ".join(parts)


def _allowed(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {name: data[name] for name in WRITABLE_FIELDS if name in data}


class ProductViewSet(ViewSet):
    """ViewSet for Product CRUD operations.

    Uses ``ProductService`` with the Django repositories (DIP).  All ORM
    access goes through the service/repository layer and every response
    is an envelope.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(
            repository=ProductDjangoRepository(),
            references=ReferenceDjangoRepository(),
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/products/"""
        filterset = ProductFilter(request.query_params)
        if not filterset.is_valid():
            return failure(
                "; ".join(
                    f"{field}: {' '.join(messages)}"
                    for field, messages in filterset.errors.items()
                ),
                status.HTTP_422_UNPROCESSABLE_ENTITY,
            )
        try:
            options = ProductQueryOptions.from_query_params(request.query_params)
        except PydanticValidationError as exc:
            return failure(
                _validation_message(exc), status.HTTP_422_UNPROCESSABLE_ENTITY
            )

        products = self._service.list_products(filterset.lookups(), options)
        data = ProductSerializer(products, many=True, context={"options": options}).data
        return success("Products retrieved successfully.", data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        try:
            options = ProductQueryOptions.from_query_params(request.query_params)
        except PydanticValidationError as exc:
            return failure(
                _validation_message(exc), status.HTTP_422_UNPROCESSABLE_ENTITY
            )
        try:
            product = self._service.get_product(pk, options)
        except ProductNotFound:
            return failure(NOT_FOUND, status.HTTP_404_NOT_FOUND)
        data = ProductSerializer(product, context={"options": options}).data
        return success("Product retrieved successfully.", data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        if not isinstance(request.data, Mapping):
            return failure(NOT_AN_OBJECT, status.HTTP_422_UNPROCESSABLE_ENTITY)
        try:
            dto = CreateProductDTO(**_allowed(request.data))
        except PydanticValidationError as exc:
            logger.info("product.create_rejected", errors=exc.error_count())
            return failure(
                _validation_message(exc), status.HTTP_422_UNPROCESSABLE_ENTITY
            )

        try:
            product = self._service.create_product(dto)
        except ProductValidationError as exc:
            return failure(str(exc), status.HTTP_422_UNPROCESSABLE_ENTITY)

        out = ProductSerializer(product, context={"options": ProductQueryOptions()})
        return success(
            "Product created successfully.", out.data, status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/products/{pk}/ (absent fields are left unchanged)"""
        if not isinstance(request.data, Mapping):
            return failure(NOT_AN_OBJECT, status.HTTP_422_UNPROCESSABLE_ENTITY)
        try:
            dto = UpdateProductDTO(**_allowed(request.data))
        except PydanticValidationError as exc:
            logger.info("product.update_rejected", errors=exc.error_count())
            return failure(
                _validation_message(exc), status.HTTP_422_UNPROCESSABLE_ENTITY
            )

        try:
            product = self._service.update_product(pk, dto)
        except ProductNotFound:
            return failure(NOT_FOUND, status.HTTP_404_NOT_FOUND)
        except ProductValidationError as exc:
            return failure(str(exc), status.HTTP_422_UNPROCESSABLE_ENTITY)

        out = ProductSerializer(product, context={"options": ProductQueryOptions()})
        return success("Product updated successfully.", out.data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/"""
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/"""
        try:
            self._service.delete_product(pk)
        except ProductNotFound:
            return failure(NOT_FOUND, status.HTTP_404_NOT_FOUND)
        return success("Product deleted successfully.")
