"""Unit tests for ProductSerializer output shape."""

from __future__ import annotations

from datetime import date

import pytest

from modules.products.dtos import ProductQueryOptions
from modules.products.models import AttachableType, Attachment, ProductQuantity
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer

pytestmark = pytest.mark.unit

CANONICAL_FIELDS = [
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


@pytest.fixture()
def loaded_product(product_factory, references):
    product = product_factory(
        sku="SKU-SER", has_expiry_date=True, expiry_date=date(2030, 6, 1)
    )
    ProductQuantity.objects.create(
        product=product, warehouse=references.warehouse, quantity=4
    )
    Attachment.objects.create(
        owner_type=AttachableType.PRODUCT,
        owner_id=str(product.id),
        path="img/widget.png",
        label="Front",
    )
    return ProductDjangoRepository().get_by_id(str(product.id))


class TestProductSerializer:
    def test_field_order(self, loaded_product):
        data = ProductSerializer(
            loaded_product, context={"options": ProductQueryOptions()}
        ).data
        assert list(data.keys()) == CANONICAL_FIELDS

    def test_values(self, loaded_product, references):
        data = ProductSerializer(
            loaded_product, context={"options": ProductQueryOptions()}
        ).data
        assert data["Id"] == str(loaded_product.id)
        assert data["sku"] == "SKU-SER"
        assert data["price"] == "9.99"
        assert data["tax_method"] == "Inclusive"
        assert data["brand_id"] == references.brand.id
        assert data["tax_id"] == references.tax.id
        assert data["expiry_date"] == "2030-06-01"
        assert data["deleted_at"] is None

    def test_nested_collections(self, loaded_product, references):
        data = ProductSerializer(
            loaded_product, context={"options": ProductQueryOptions()}
        ).data
        assert len(data["product_qties"]) == 1
        assert data["product_qties"][0]["warehouse_id"] == references.warehouse.id
        assert data["product_qties"][0]["quantity"] == 4
        assert data["attachments"][0]["path"] == "img/widget.png"
        assert data["attachments"][0]["label"] == "Front"

    def test_unloaded_collections_render_empty(self, product_factory):
        product = product_factory()
        data = ProductSerializer(product).data
        assert data["product_qties"] == []
        assert data["attachments"] == []

    def test_many(self, product_factory):
        products = [product_factory(), product_factory()]
        data = ProductSerializer(products, many=True).data
        assert [row["Id"] for row in data] == [str(p.id) for p in products]
