"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
(or ``False``) instead of raising HTTP-level exceptions; the Service
Layer decides how to translate a missing entity into an API response.

Eager loading is driven by ``ProductQueryOptions``:
- to-one references use ``select_related`` (single JOIN);
- ``product_qties`` uses ``prefetch_related`` (one batched query);
- attachments are fetched with one ``(owner_type, owner_id__in)`` query
  and stored on ``product.loaded_attachments``.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.products.dtos import (
    DEFAULT_OPTIONS,
    TO_ONE_RELATIONS,
    ProductQuantityDTO,
    ProductQueryOptions,
)
from modules.products.models import (
    AttachableType,
    Attachment,
    Product,
    ProductQuantity,
)
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(
        self, id: str, options: ProductQueryOptions = DEFAULT_OPTIONS
    ) -> Optional[Product]:
        """Retrieve a product with eager-loaded relations.

        Returns ``None`` for non-existent, invalid or soft-deleted IDs
        (soft-deleted rows are returned when ``options.with_trashed``).
        """
        try:
            product = self._queryset(options).filter(id=id).first()
        except (ValueError, ValidationError):
            return None
        if product is None:
            return None
        self._load_attachments([product], options)
        return product

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        options: ProductQueryOptions = DEFAULT_OPTIONS,
    ) -> List[Product]:
        """List products with optional Django ORM look-ups.

        Examples of valid filters::

            {"is_active": True}
            {"name__icontains": "widget"}
        """
        queryset = self._queryset(options)
        if filters:
            queryset = queryset.filter(**filters)
        return self._load_attachments(list(queryset), options)

    def get_by_sku(self, sku: str) -> Optional[Product]:
        return Product.objects.filter(sku=sku.strip()).first()

    def get_for_update(self, id: str) -> Optional[Product]:
        """Live product under ``select_for_update``; call inside ``atomic``."""
        return self._lock(id)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def insert(
        self,
        fields: Dict[str, Any],
        quantities: Optional[Iterable[ProductQuantityDTO]] = None,
    ) -> Product:
        """Persist a new product and return it fully loaded."""
        product = Product(**fields)
        product.save()
        if quantities:
            self._write_quantities(product, quantities)
        logger.info(
            "product.inserted",
            product_id=str(product.id),
            sku=product.sku,
        )
        return self.get_by_id(str(product.id))

    @transaction.atomic
    def update(
        self,
        id: str,
        fields: Dict[str, Any],
        quantities: Optional[Iterable[ProductQuantityDTO]] = None,
    ) -> Optional[Product]:
        """Apply ``fields`` under a row lock (``select_for_update``).

        ``quantities`` of ``None`` leaves the stock rows untouched; any
        other value replaces them.
        """
        product = self._lock(id)
        if not product:
            return None

        for field, value in fields.items():
            setattr(product, field, value)
        product.save()

        if quantities is not None:
            product.product_qties.all().delete()
            self._write_quantities(product, quantities)

        logger.info(
            "product.saved",
            product_id=str(product.id),
            fields=sorted(fields),
        )
        return self.get_by_id(str(product.id))

    @transaction.atomic
    def soft_delete(self, id: str) -> bool:
        """Soft-delete a product by ID.

        Returns ``True`` if a live product was found and soft-deleted,
        ``False`` otherwise (unknown or already deleted).
        """
        product = self._lock(id)
        if not product:
            return False
        product.delete()
        logger.info("product.soft_deleted", product_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _queryset(options: ProductQueryOptions):
        queryset = (
            Product.objects.all() if options.with_trashed else Product.objects.alive()
        )
        to_one = [name for name in TO_ONE_RELATIONS if options.loads(name)]
        if to_one:
            queryset = queryset.select_related(*to_one)
        if options.loads("product_qties"):
            queryset = queryset.prefetch_related("product_qties")
        return queryset

    @staticmethod
    def _lock(id: str) -> Optional[Product]:
        try:
            return Product.objects.alive().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @staticmethod
    def _load_attachments(
        products: List[Product], options: ProductQueryOptions
    ) -> List[Product]:
        if not products or not options.loads("attachments"):
            return products
        grouped: Dict[str, List[Attachment]] = defaultdict(list)
        for attachment in Attachment.for_owner(
            AttachableType.PRODUCT, [product.id for product in products]
        ):
            grouped[attachment.owner_id].append(attachment)
        for product in products:
            product.loaded_attachments = grouped.get(str(product.id), [])
        return products

    @staticmethod
    def _write_quantities(
        product: Product, quantities: Iterable[ProductQuantityDTO]
    ) -> None:
        ProductQuantity.objects.bulk_create(
            ProductQuantity(
                product=product,
                warehouse_id=row.warehouse_id,
                quantity=row.quantity,
            )
            for row in quantities
        )
