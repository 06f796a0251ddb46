"""Unit tests for ProductService.

Covers:
- create_product: happy path, duplicate SKU, dangling references.
- update_product: partial merge, not found, SKU change, expiry rule.
- get_product / list_products: delegation to the repository.
- delete_product: happy path, not found.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from modules.products.dtos import (
    DEFAULT_OPTIONS,
    CreateProductDTO,
    ProductQueryOptions,
    UpdateProductDTO,
)
from modules.products.exceptions import (
    ProductAlreadyExists,
    ProductNotFound,
    ProductValidationError,
)
from modules.products.models import Product
from modules.products.services import ProductService

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_repo():
    repo = MagicMock()
    repo.get_by_sku.return_value = None
    return repo


@pytest.fixture()
def mock_references():
    references = MagicMock()
    references.missing.return_value = []
    references.missing_warehouses.return_value = []
    return references


@pytest.fixture()
def service(mock_repo, mock_references):
    return ProductService(repository=mock_repo, references=mock_references)


def _make_product(**overrides) -> Product:
    defaults = {
        "sku": "SKU-001",
        "name": "Widget",
        "price": Decimal("9.99"),
        "brand_id": 1,
        "category_id": 1,
        "unit_id": 1,
        "tax_id": 1,
    }
    defaults.update(overrides)
    return Product(**defaults)


def _create_dto(**overrides) -> CreateProductDTO:
    data = {
        "name": "Widget",
        "sku": "SKU-001",
        "price": "9.99",
        "brand_id": 1,
        "category_id": 2,
        "unit_id": 3,
        "tax_id": 4,
    }
    data.update(overrides)
    return CreateProductDTO(**data)


# ===========================================================================
# create_product
# ===========================================================================


class TestCreateProduct:
    def test_success(self, service, mock_repo, mock_references):
        created = _make_product()
        mock_repo.insert.return_value = created

        result = service.create_product(_create_dto())

        assert result is created
        fields, quantities = mock_repo.insert.call_args.args
        assert fields["sku"] == "SKU-001"
        assert fields["price"] == Decimal("9.99")
        assert "product_qties" not in fields
        assert quantities is None
        mock_references.missing.assert_called_once_with(
            {"brand_id": 1, "category_id": 2, "unit_id": 3, "tax_id": 4}
        )
        mock_references.missing_warehouses.assert_not_called()

    def test_duplicate_sku_raises(self, service, mock_repo):
        mock_repo.get_by_sku.return_value = _make_product()

        with pytest.raises(ProductAlreadyExists, match="SKU-001") as exc:
            service.create_product(_create_dto())

        assert exc.value.errors == {"sku": "The sku has already been taken."}
        mock_repo.insert.assert_not_called()

    def test_duplicate_is_a_validation_error(self):
        assert issubclass(ProductAlreadyExists, ProductValidationError)

    def test_dangling_references_raise(self, service, mock_repo, mock_references):
        mock_references.missing.return_value = ["brand_id", "tax_id"]

        with pytest.raises(ProductValidationError) as exc:
            service.create_product(_create_dto())

        assert exc.value.errors == {
            "brand_id": "The selected brand_id is invalid.",
            "tax_id": "The selected tax_id is invalid.",
        }
        assert "brand_id: The selected brand_id is invalid." in str(exc.value)
        mock_repo.insert.assert_not_called()

    def test_unknown_warehouse_raises(self, service, mock_repo, mock_references):
        mock_references.missing_warehouses.return_value = [7, 9]
        dto = _create_dto(
            product_qties=[
                {"warehouse_id": 7, "quantity": 1},
                {"warehouse_id": 9, "quantity": 1},
            ]
        )

        with pytest.raises(ProductValidationError, match="7, 9"):
            service.create_product(dto)

        mock_repo.insert.assert_not_called()

    def test_quantities_are_forwarded(self, service, mock_repo, mock_references):
        mock_repo.insert.return_value = _make_product()
        dto = _create_dto(product_qties=[{"warehouse_id": 5, "quantity": 3}])

        service.create_product(dto)

        assert list(mock_references.missing_warehouses.call_args.args[0]) == [5]
        assert mock_repo.insert.call_args.args[1] == dto.product_qties


# ===========================================================================
# update_product
# ===========================================================================


class TestUpdateProduct:
    def test_partial_update(self, service, mock_repo, mock_references):
        existing = _make_product()
        mock_repo.get_for_update.return_value = existing
        mock_repo.update.return_value = existing

        result = service.update_product(str(existing.id), UpdateProductDTO(qty=5))

        assert result is existing
        mock_repo.update.assert_called_once_with(str(existing.id), {"qty": 5}, None)
        mock_repo.get_by_sku.assert_not_called()
        mock_references.missing.assert_not_called()

    def test_not_found_raises(self, service, mock_repo):
        mock_repo.get_for_update.return_value = None

        with pytest.raises(ProductNotFound):
            service.update_product("missing", UpdateProductDTO(qty=1))

        mock_repo.update.assert_not_called()

    def test_vanished_during_update_raises(self, service, mock_repo):
        mock_repo.get_for_update.return_value = _make_product()
        mock_repo.update.return_value = None

        with pytest.raises(ProductNotFound):
            service.update_product("id", UpdateProductDTO(qty=1))

    def test_same_sku_skips_uniqueness_check(self, service, mock_repo):
        existing = _make_product(sku="SKU-001")
        mock_repo.get_for_update.return_value = existing
        mock_repo.update.return_value = existing

        service.update_product("id", UpdateProductDTO(sku="SKU-001"))

        mock_repo.get_by_sku.assert_not_called()

    def test_taken_sku_raises(self, service, mock_repo):
        mock_repo.get_for_update.return_value = _make_product(sku="SKU-001")
        mock_repo.get_by_sku.return_value = _make_product(sku="SKU-002")

        with pytest.raises(ProductAlreadyExists):
            service.update_product("id", UpdateProductDTO(sku="SKU-002"))

        mock_repo.update.assert_not_called()

    def test_only_changed_references_are_checked(
        self, service, mock_repo, mock_references
    ):
        existing = _make_product()
        mock_repo.get_for_update.return_value = existing
        mock_repo.update.return_value = existing

        service.update_product("id", UpdateProductDTO(tax_id=8))

        mock_references.missing.assert_called_once_with({"tax_id": 8})

    def test_expiry_flag_needs_stored_or_supplied_date(self, service, mock_repo):
        mock_repo.get_for_update.return_value = _make_product()

        with pytest.raises(ProductValidationError, match="expiry_date"):
            service.update_product("id", UpdateProductDTO(has_expiry_date=True))

        mock_repo.update.assert_not_called()

    def test_expiry_flag_uses_stored_date(self, service, mock_repo):
        existing = _make_product(expiry_date=date(2030, 1, 1))
        mock_repo.get_for_update.return_value = existing
        mock_repo.update.return_value = existing

        service.update_product("id", UpdateProductDTO(has_expiry_date=True))

        mock_repo.update.assert_called_once()

    def test_clearing_required_expiry_date_raises(self, service, mock_repo):
        mock_repo.get_for_update.return_value = _make_product(
            has_expiry_date=True, expiry_date=date(2030, 1, 1)
        )

        with pytest.raises(ProductValidationError):
            service.update_product("id", UpdateProductDTO(expiry_date=None))

    def test_rules_use_the_locked_row(self, service, mock_repo):
        mock_repo.get_by_id.return_value = _make_product(expiry_date=date(2030, 1, 1))
        mock_repo.get_for_update.return_value = _make_product(expiry_date=None)

        with pytest.raises(ProductValidationError, match="expiry_date"):
            service.update_product("id", UpdateProductDTO(has_expiry_date=True))

        mock_repo.get_by_id.assert_not_called()
        mock_repo.update.assert_not_called()

    def test_row_is_locked_before_write(self, service, mock_repo):
        existing = _make_product()
        mock_repo.get_for_update.return_value = existing
        mock_repo.update.return_value = existing

        service.update_product("id", UpdateProductDTO(qty=2))

        called = [name for name, _, _ in mock_repo.mock_calls]
        assert called.index("get_for_update") < called.index("update")


# ===========================================================================
# get_product / list_products
# ===========================================================================


class TestGetProduct:
    def test_success(self, service, mock_repo):
        product = _make_product()
        mock_repo.get_by_id.return_value = product

        assert service.get_product("id") is product
        mock_repo.get_by_id.assert_called_once_with("id", DEFAULT_OPTIONS)

    def test_forwards_options(self, service, mock_repo):
        options = ProductQueryOptions(with_trashed=True)
        mock_repo.get_by_id.return_value = _make_product()

        service.get_product("id", options)

        mock_repo.get_by_id.assert_called_once_with("id", options)

    def test_not_found_raises(self, service, mock_repo):
        mock_repo.get_by_id.return_value = None

        with pytest.raises(ProductNotFound):
            service.get_product("missing")


class TestListProducts:
    def test_delegates_to_repository(self, service, mock_repo):
        products = [_make_product(), _make_product(sku="SKU-002")]
        mock_repo.list.return_value = products

        result = service.list_products({"is_active__exact": True})

        assert result == products
        mock_repo.list.assert_called_once_with(
            {"is_active__exact": True}, DEFAULT_OPTIONS
        )


# ===========================================================================
# delete_product
# ===========================================================================


class TestDeleteProduct:
    def test_success(self, service, mock_repo):
        mock_repo.soft_delete.return_value = True

        service.delete_product("id")

        mock_repo.soft_delete.assert_called_once_with("id")

    def test_not_found_raises(self, service, mock_repo):
        mock_repo.soft_delete.return_value = False

        with pytest.raises(ProductNotFound):
            service.delete_product("missing")
