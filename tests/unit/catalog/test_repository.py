"""Unit tests for ReferenceDjangoRepository."""

from __future__ import annotations

import pytest

from modules.catalog.models import Warehouse
from modules.catalog.repositories.django_repository import ReferenceDjangoRepository
from modules.catalog.repositories.interfaces import IReferenceRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return ReferenceDjangoRepository()


def _refs(references) -> dict:
    return {
        "brand_id": references.brand.id,
        "category_id": references.category.id,
        "unit_id": references.unit.id,
        "tax_id": references.tax.id,
    }


class TestMissing:
    def test_is_instance_of_interface(self, repo):
        assert isinstance(repo, IReferenceRepository)

    def test_all_resolve(self, repo, references):
        assert repo.missing(_refs(references)) == []

    def test_unknown_ids_are_reported(self, repo, references):
        refs = _refs(references)
        refs["brand_id"] = 999_999
        refs["tax_id"] = 888_888
        assert repo.missing(refs) == ["brand_id", "tax_id"]

    def test_soft_deleted_reference_is_missing(self, repo, references):
        references.category.delete()
        assert repo.missing(_refs(references)) == ["category_id"]

    def test_empty_input(self, repo):
        assert repo.missing({}) == []


class TestMissingWarehouses:
    def test_known_warehouses(self, repo, references):
        assert repo.missing_warehouses([references.warehouse.id]) == []

    def test_unknown_and_deleted_warehouses(self, repo, references):
        closed = Warehouse.objects.create(name="Closed")
        closed.delete()
        result = repo.missing_warehouses(
            [references.warehouse.id, closed.id, 424_242]
        )
        assert result == sorted([closed.id, 424_242])

    def test_accepts_generators(self, repo, references):
        ids = (pk for pk in [references.warehouse.id])
        assert repo.missing_warehouses(ids) == []

    def test_empty_input(self, repo):
        assert repo.missing_warehouses([]) == []
