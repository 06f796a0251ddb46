"""Reference data repository interface.

The product service resolves foreign references through this contract
before any write, so dangling ids are reported as validation errors
instead of surfacing as database integrity errors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List


class IReferenceRepository(ABC):
    """Repository contract for brand/category/unit/tax/warehouse look-ups."""

    @abstractmethod
    def missing(self, references: Dict[str, int]) -> List[str]:
        """Return the keys of ``references`` that do not resolve to live rows.

        Keys are product field names: ``brand_id``, ``category_id``,
        ``unit_id`` and ``tax_id``.
        """

    @abstractmethod
    def missing_warehouses(self, ids: Iterable[int]) -> List[int]:
        """Return the warehouse ids that do not resolve to live rows."""
