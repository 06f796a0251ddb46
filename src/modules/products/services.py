"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository`` and foreign-reference
resolution to the injected ``IReferenceRepository``.

Business rules enforced here:
- Field rules (non-negative price/qty/alert_qty, known enums, expiry date
  consistency) are validated by the DTOs before the service runs.
- SKU must be unique, soft-deleted products included.
- Brand, category, unit, tax and warehouse ids must resolve to live rows.
- Updates are partial merges under a row lock; the expiry rule is re-checked on the
  merged state.
- Soft delete via repository; a deleted product is gone for get/update.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

import structlog
from django.db import transaction

from modules.products.dtos import DEFAULT_OPTIONS, ProductQueryOptions
from modules.products.exceptions import (
    ProductAlreadyExists,
    ProductNotFound,
    ProductValidationError,
)
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import IReferenceRepository
    from modules.products.dtos import (
        CreateProductDTO,
        ProductQuantityDTO,
        UpdateProductDTO,
    )
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

REFERENCE_FIELDS = ("brand_id", "category_id", "unit_id", "tax_id")


class ProductService:
    """Application service for Product use-cases.

    Receives its repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        repository: IProductRepository,
        references: IReferenceRepository,
    ) -> None:
        self._repo = repository
        self._references = references

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a new product after enforcing uniqueness and references.

        Raises:
            ProductAlreadyExists: if the SKU is already taken.
            ProductValidationError: if a reference does not resolve.
        """
        log = logger.bind(sku=dto.sku)

        self._ensure_sku_available(dto.sku)
        fields = dto.attributes()
        self._ensure_references(
            {name: fields[name] for name in REFERENCE_FIELDS},
            dto.product_qties,
        )

        product = self._repo.insert(fields, dto.product_qties)
        log.info("product.created", product_id=str(product.id))
        return product

    @transaction.atomic
    def update_product(self, id: str, dto: UpdateProductDTO) -> Product:
        """Merge the supplied fields into an existing product.

        Raises:
            ProductNotFound: if the product does not exist or is deleted.
            ProductValidationError: on a broken business rule.
        """
        # Rules are checked against the locked row.
        product = self._repo.get_for_update(id)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")

        log = logger.bind(product_id=str(id))
        changes = dto.changes()

        if "sku" in changes and changes["sku"] != product.sku:
            self._ensure_sku_available(changes["sku"], exclude_id=product.id)
        self._ensure_references(
            {name: changes[name] for name in REFERENCE_FIELDS if name in changes},
            dto.product_qties,
        )
        self._ensure_expiry_consistent(product, changes)

        updated = self._repo.update(id, changes, dto.product_qties)
        if not updated:
            raise ProductNotFound(f"Product {id} not found.")
        log.info("product.updated", fields=sorted(changes))
        return updated

    @transaction.atomic
    def delete_product(self, id: str) -> None:
        """Soft-delete a product.

        Raises:
            ProductNotFound: if the product does not exist or is deleted.
        """
        if not self._repo.soft_delete(id):
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.soft_deleted", product_id=str(id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(
        self,
        filters: Optional[Dict[str, Any]] = None,
        options: ProductQueryOptions = DEFAULT_OPTIONS,
    ) -> List[Product]:
        """Return products in creation order, optionally filtered."""
        return self._repo.list(filters, options)

    def get_product(
        self, id: str, options: ProductQueryOptions = DEFAULT_OPTIONS
    ) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self._repo.get_by_id(id, options)
        if not product:
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.retrieved", product_id=str(id))
        return product

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _ensure_sku_available(self, sku: str, exclude_id: Any = None) -> None:
        existing = self._repo.get_by_sku(sku)
        if existing and existing.id != exclude_id:
            logger.warning("product.duplicate_sku", sku=sku)
            raise ProductAlreadyExists(
                f"SKU '{sku}' already registered.",
                {"sku": "The sku has already been taken."},
            )

    def _ensure_references(
        self,
        references: Dict[str, int],
        quantities: Optional[Sequence[ProductQuantityDTO]] = None,
    ) -> None:
        errors: Dict[str, str] = {}
        for field in self._references.missing(references) if references else []:
            errors[field] = f"The selected {field} is invalid."
        if quantities:
            missing = self._references.missing_warehouses(
                row.warehouse_id for row in quantities
            )
            if missing:
                errors["product_qties"] = (
                    f"Unknown warehouse id(s): {', '.join(map(str, missing))}."
                )
        if errors:
            logger.warning("product.validation_failed", fields=sorted(errors))
            raise ProductValidationError(
                "; ".join(f"{field}: {msg}" for field, msg in errors.items()),
                errors,
            )

    @staticmethod
    def _ensure_expiry_consistent(product: Product, changes: Dict[str, Any]) -> None:
        has_expiry = changes.get("has_expiry_date", product.has_expiry_date)
        expiry = changes.get("expiry_date", product.expiry_date)
        if has_expiry and expiry is None:
            message = "expiry_date is required when has_expiry_date is true."
            logger.warning("product.validation_failed", fields=["expiry_date"])
            raise ProductValidationError(
                f"expiry_date: {message}", {"expiry_date": message}
            )
