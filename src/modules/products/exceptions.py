"""Product domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
envelope responses.
"""

from __future__ import annotations

from typing import Dict, Optional


class ProductNotFound(Exception):
    """The requested product does not exist or has been soft-deleted."""


class ProductValidationError(Exception):
    """The submitted field set breaks a business rule.

    ``errors`` maps field names to human-readable messages.
    """

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


class ProductAlreadyExists(ProductValidationError):
    """A product with the same SKU already exists (soft-deleted included)."""
