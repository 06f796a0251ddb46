"""Product DRF serializers for API output.

The serializer operates at the Interface layer (API Views) and is
read-only: input is validated by the Pydantic DTOs in ``dtos.py``.

``ProductSerializer`` expects the ``ProductQueryOptions`` used to load
the product in ``context["options"]``.  Collections that were not loaded
render as ``[]``; nothing here issues a query.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.dtos import ProductQueryOptions
from modules.products.models import Attachment, Product, ProductQuantity

NOTHING_LOADED = ProductQueryOptions(relations=frozenset())


class ProductQuantitySerializer(serializers.ModelSerializer):
    warehouse_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = ProductQuantity
        fields = ["id", "warehouse_id", "quantity"]
        read_only_fields = fields


class AttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Attachment
        fields = ["id", "path", "label"]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    """Canonical Product representation (field order is part of the contract)."""

    Id = serializers.UUIDField(source="id", read_only=True)
    brand_id = serializers.IntegerField(read_only=True)
    category_id = serializers.IntegerField(read_only=True)
    unit_id = serializers.IntegerField(read_only=True)
    tax_id = serializers.IntegerField(read_only=True)
    product_qties = serializers.SerializerMethodField()
    attachments = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "Id",
            "name",
            "sku",
            "symbology",
            "brand_id",
            "category_id",
            "unit_id",
            "price",
            "qty",
            "alert_qty",
            "tax_method",
            "tax_id",
            "has_stock",
            "has_expiry_date",
            "expiry_date",
            "details",
            "is_active",
            "created_at",
            "updated_at",
            "deleted_at",
            "product_qties",
            "attachments",
        ]
        read_only_fields = fields

    def _options(self) -> ProductQueryOptions:
        return self.context.get("options", NOTHING_LOADED)

    def get_product_qties(self, product: Product) -> list:
        if not self._options().loads("product_qties"):
            return []
        return ProductQuantitySerializer(product.product_qties.all(), many=True).data

    def get_attachments(self, product: Product) -> list:
        if not self._options().loads("attachments"):
            return []
        return AttachmentSerializer(product.loaded_attachments, many=True).data
