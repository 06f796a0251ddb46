import uuid
from decimal import Decimal
from types import SimpleNamespace

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.catalog.models import Brand, Category, Tax, Unit, Warehouse
from modules.products.models import Product, TaxMethod


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Reset throttle counters between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    user = get_user_model().objects.create_user(
        username="catalog-user", password="testpass123"
    )
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def references():
    """One live row of every reference table."""
    return SimpleNamespace(
        brand=Brand.objects.create(name="Acme"),
        category=Category.objects.create(name="Hardware"),
        unit=Unit.objects.create(name="Piece", short_name="pc"),
        tax=Tax.objects.create(name="VAT", rate=Decimal("20.00")),
        warehouse=Warehouse.objects.create(name="Main"),
    )


@pytest.fixture()
def product_factory(references):
    """Persist a Product pointing at the ``references`` rows."""

    def _make(**overrides) -> Product:
        defaults = {
            "name": "Widget",
            "sku": f"SKU-{uuid.uuid4().hex[:6].upper()}",
            "price": Decimal("9.99"),
            "qty": 10,
            "alert_qty": 2,
            "tax_method": TaxMethod.INCLUSIVE,
            "brand": references.brand,
            "category": references.category,
            "unit": references.unit,
            "tax": references.tax,
        }
        defaults.update(overrides)
        product = Product(**defaults)
        product.save()
        return product

    return _make


@pytest.fixture()
def product_payload(references):
    """A valid create body (the Widget scenario)."""
    return {
        "name": "Widget",
        "sku": "SKU-001",
        "price": 9.99,
        "qty": 10,
        "alert_qty": 2,
        "tax_method": "Inclusive",
        "is_active": True,
        "brand_id": references.brand.id,
        "category_id": references.category.id,
        "unit_id": references.unit.id,
        "tax_id": references.tax.id,
    }
