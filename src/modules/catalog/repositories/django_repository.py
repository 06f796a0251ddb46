"""Django ORM implementation of the reference data repository."""

from __future__ import annotations

from typing import Dict, Iterable, List

import structlog

from modules.catalog.models import Brand, Category, Tax, Unit, Warehouse
from modules.catalog.repositories.interfaces import IReferenceRepository

logger = structlog.get_logger(__name__)

REFERENCE_MODELS = {
    "brand_id": Brand,
    "category_id": Category,
    "unit_id": Unit,
    "tax_id": Tax,
}


class ReferenceDjangoRepository(IReferenceRepository):
    """Concrete reference repository backed by Django ORM."""

    def missing(self, references: Dict[str, int]) -> List[str]:
        missing = [
            field
            for field, pk in references.items()
            if not REFERENCE_MODELS[field].objects.alive().filter(pk=pk).exists()
        ]
        if missing:
            logger.info("reference.unresolved", fields=missing)
        return missing

    def missing_warehouses(self, ids: Iterable[int]) -> List[int]:
        wanted = set(ids)
        if not wanted:
            return []
        found = set(
            Warehouse.objects.alive()
            .filter(pk__in=wanted)
            .values_list("pk", flat=True)
        )
        return sorted(wanted - found)
