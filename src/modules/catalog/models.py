"""Reference data referenced by products.

Brands, categories, units, taxes and warehouses are small named lookup
tables.  They keep Django's integer primary key and are soft-deletable:
a product may only point to a reference row while ``deleted_at`` is
``NULL`` (checked by the product service at write time).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteMixin, TimestampedModel


class ReferenceModel(SoftDeleteMixin, TimestampedModel):
    """Abstract named lookup row."""

    name = models.CharField(max_length=120)

    class Meta:
        abstract = True
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Brand(ReferenceModel):
    class Meta(ReferenceModel.Meta):
        db_table = "brands"


class Category(ReferenceModel):
    class Meta(ReferenceModel.Meta):
        db_table = "categories"
        verbose_name_plural = "categories"


class Unit(ReferenceModel):
    short_name = models.CharField(max_length=20, blank=True, default="")

    class Meta(ReferenceModel.Meta):
        db_table = "units"


class Tax(ReferenceModel):
    rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )

    class Meta(ReferenceModel.Meta):
        db_table = "taxes"
        verbose_name_plural = "taxes"

    def __str__(self) -> str:
        return f"{self.name} ({self.rate}%)"


class Warehouse(ReferenceModel):
    class Meta(ReferenceModel.Meta):
        db_table = "warehouses"
