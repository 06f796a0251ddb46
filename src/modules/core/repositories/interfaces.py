"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that domain-specific
repository interfaces extend.  Service-layer code depends on this
abstraction, never on Django ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the aggregate managed by the
    repository (e.g. ``Product``).  Reads return ``None`` for missing
    rows; the Service Layer decides how to report that.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve a live entity by its primary key."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[T]:
        """List live entities matching ORM look-ups in ``filters``."""

    @abstractmethod
    def insert(self, fields: Dict[str, Any]) -> T:
        """Persist a new entity built from ``fields``."""

    @abstractmethod
    def update(self, id: str, fields: Dict[str, Any]) -> Optional[T]:
        """Apply ``fields`` to a live entity; ``None`` if it does not exist."""

    @abstractmethod
    def soft_delete(self, id: str) -> bool:
        """Soft-delete a live entity; ``False`` if it does not exist."""
