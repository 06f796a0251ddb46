"""Product repository interface.

Extends ``IRepository[Product]`` with the query options that control
eager loading and the SKU look-up required by the uniqueness rule.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository
from modules.products.dtos import DEFAULT_OPTIONS, ProductQueryOptions

if TYPE_CHECKING:
    from modules.products.dtos import ProductQuantityDTO
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_by_id(
        self, id: str, options: ProductQueryOptions = DEFAULT_OPTIONS
    ) -> Optional[Product]:
        """Retrieve a product with the relations named in ``options``."""

    @abstractmethod
    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        options: ProductQueryOptions = DEFAULT_OPTIONS,
    ) -> List[Product]:
        """List products in creation order with optional ORM look-ups."""

    @abstractmethod
    def insert(
        self,
        fields: Dict[str, Any],
        quantities: Optional[Iterable[ProductQuantityDTO]] = None,
    ) -> Product:
        """Create a product (and its warehouse quantities)."""

    @abstractmethod
    def update(
        self,
        id: str,
        fields: Dict[str, Any],
        quantities: Optional[Iterable[ProductQuantityDTO]] = None,
    ) -> Optional[Product]:
        """Update a live product; ``quantities`` replaces the stock rows."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU, soft-deleted rows included."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Product]:
        """Lock a live product row until the current transaction ends."""
