"""Product, ProductQuantity and Attachment models.

Business rules implemented:
- SKU must be unique in the system (soft-deleted rows included).
- Price, quantity and alert quantity cannot be negative (DTO + DB constraint).
- Brand, category, unit and tax are required ``PROTECT`` references.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
- Stock per warehouse lives in ``ProductQuantity``; ``Product.qty`` is the
  denormalized total supplied by the caller.
- Attachments are owned through an explicit ``(owner_type, owner_id)`` pair.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel

logger = structlog.get_logger(__name__)


class TaxMethod(models.TextChoices):
    INCLUSIVE = "Inclusive", "Inclusive"
    EXCLUSIVE = "Exclusive", "Exclusive"


class Symbology(models.TextChoices):
    CODE128 = "C128", "Code 128"
    CODE39 = "C39", "Code 39"
    UPCA = "UPCA", "UPC-A"
    UPCE = "UPCE", "UPC-E"
    EAN8 = "EAN8", "EAN-8"
    EAN13 = "EAN13", "EAN-13"


class Product(SoftDeleteModel):
    """Product aggregate root.

    ``sku`` is stripped on save; ``unique=True`` creates the UNIQUE INDEX,
    so a SKU stays reserved after the product is soft-deleted.
    """

    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=64, unique=True)
    symbology = models.CharField(
        max_length=10,
        choices=Symbology.choices,
        default=Symbology.CODE128,
    )
    brand = models.ForeignKey(
        "catalog.Brand",
        on_delete=models.PROTECT,
        related_name="products",
    )
    category = models.ForeignKey(
        "catalog.Category",
        on_delete=models.PROTECT,
        related_name="products",
    )
    unit = models.ForeignKey(
        "catalog.Unit",
        on_delete=models.PROTECT,
        related_name="products",
    )
    tax = models.ForeignKey(
        "catalog.Tax",
        on_delete=models.PROTECT,
        related_name="products",
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    qty = models.PositiveIntegerField(default=0)
    alert_qty = models.PositiveIntegerField(default=0)
    tax_method = models.CharField(
        max_length=10,
        choices=TaxMethod.choices,
        default=TaxMethod.EXCLUSIVE,
    )
    has_stock = models.BooleanField(default=True)
    has_expiry_date = models.BooleanField(default=False)
    expiry_date = models.DateField(null=True, blank=True, default=None)
    details = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "products"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["is_active"], name="products_is_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = self.sku.strip()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})
        if self.has_expiry_date and self.expiry_date is None:
            raise ValidationError(
                {"expiry_date": "Expiry date is required when has_expiry_date is set."}
            )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.sku:
            self.sku = self.sku.strip()
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=str(self.id),
                sku=self.sku,
                name=self.name,
            )

    @property
    def is_below_alert(self) -> bool:
        """``True`` when stock is tracked and ``qty`` reached ``alert_qty``."""
        return self.has_stock and self.qty <= self.alert_qty

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"


class ProductQuantity(BaseModel):
    """Stock held for one product in one warehouse."""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="product_qties",
    )
    warehouse = models.ForeignKey(
        "catalog.Warehouse",
        on_delete=models.PROTECT,
        related_name="product_qties",
    )
    quantity = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "product_quantities"
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "warehouse"],
                name="product_quantities_product_warehouse_uniq",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.product_id}@{self.warehouse_id}: {self.quantity}"


class AttachableType(models.TextChoices):
    PRODUCT = "product", "Product"


class Attachment(BaseModel):
    """A stored file owned by ``(owner_type, owner_id)``.

    ``owner_id`` is the owner's primary key rendered as text, so one table
    serves every attachable kind without a generic relation.
    """

    owner_type = models.CharField(max_length=30, choices=AttachableType.choices)
    owner_id = models.CharField(max_length=64)
    path = models.CharField(max_length=500)
    label = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "attachments"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["owner_type", "owner_id"],
                name="attachments_owner_idx",
            ),
        ]

    @classmethod
    def for_owner(cls, owner_type: str, owner_ids) -> models.QuerySet:
        """Attachments of the given kind whose owner id is in ``owner_ids``."""
        return cls.objects.filter(
            owner_type=owner_type,
            owner_id__in=[str(pk) for pk in owner_ids],
        )

    def __str__(self) -> str:
        return self.label or self.path
