"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (Views) and the
Service layer.  DTOs are immutable (``frozen=True``) and enumerate
the writable fields explicitly: anything else in a request body is
never copied onto the model.

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
- ``ProductQuantityDTO``: one per-warehouse stock row.
- ``ProductQueryOptions``: relations to eager-load and soft-delete scope.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Dict, FrozenSet, Mapping, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from modules.products.models import Symbology, TaxMethod

TO_ONE_RELATIONS = ("brand", "category", "unit", "tax")
TO_MANY_RELATIONS = ("product_qties", "attachments")
ALL_RELATIONS: FrozenSet[str] = frozenset(TO_ONE_RELATIONS + TO_MANY_RELATIONS)

# Fields an update may set back to ``null``.
NULLABLE_FIELDS = frozenset({"expiry_date"})

# Column ranges: counts are 32-bit PositiveIntegerFields, reference keys BigAutoFields.
INTEGER_MAX = 2_147_483_647
BIGINT_MAX = 9_223_372_036_854_775_807

Count = Annotated[int, Field(le=INTEGER_MAX)]
ReferenceId = Annotated[int, Field(ge=1, le=BIGINT_MAX)]


def _non_negative(field: str, value: Optional[Any]) -> Optional[Any]:
    if value is not None and value < 0:
        raise ValueError(f"{field} cannot be negative.")
    return value


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class ProductQuantityDTO(BaseModel):
    """Stock held in one warehouse."""

    model_config = ConfigDict(frozen=True)

    warehouse_id: ReferenceId
    quantity: Count = 0

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_non_negative(cls, v: int) -> int:
        return _non_negative("Quantity", v)


def _unique_warehouses(
    rows: Optional[Tuple[ProductQuantityDTO, ...]],
) -> Optional[Tuple[ProductQuantityDTO, ...]]:
    if rows is None:
        return rows
    ids = [row.warehouse_id for row in rows]
    if len(ids) != len(set(ids)):
        raise ValueError("Each warehouse may appear only once in product_qties.")
    return rows


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name`` and ``sku`` are non-empty strings (``sku`` is stripped).
    - ``price``, ``qty`` and ``alert_qty`` are non-negative.
    - ``tax_method`` and ``symbology`` are known values.
    - ``expiry_date`` is present when ``has_expiry_date`` is true.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: str
    sku: str
    symbology: Symbology = Symbology.CODE128
    brand_id: ReferenceId
    category_id: ReferenceId
    unit_id: ReferenceId
    tax_id: ReferenceId
    price: Decimal = Field(max_digits=10, decimal_places=2)
    qty: Count = 0
    alert_qty: Count = 0
    tax_method: TaxMethod = TaxMethod.EXCLUSIVE
    has_stock: bool = True
    has_expiry_date: bool = False
    expiry_date: Optional[date] = None
    details: Optional[str] = ""
    is_active: bool = True
    product_qties: Optional[Tuple[ProductQuantityDTO, ...]] = None

    @field_validator("name", "sku")
    @classmethod
    def must_not_be_empty(cls, v: str, info: ValidationInfo) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} must not be empty.")
        return v.strip()

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal) -> Decimal:
        return _non_negative("Price", v)

    @field_validator("qty", "alert_qty")
    @classmethod
    def quantities_must_be_non_negative(cls, v: int, info: ValidationInfo) -> int:
        return _non_negative(info.field_name, v)

    @field_validator("details")
    @classmethod
    def details_default_to_empty(cls, v: Optional[str]) -> str:
        return v or ""

    @field_validator("product_qties")
    @classmethod
    def warehouses_must_be_unique(cls, v):
        return _unique_warehouses(v)

    @model_validator(mode="after")
    def expiry_date_required(self) -> CreateProductDTO:
        if self.has_expiry_date and self.expiry_date is None:
            raise ValueError("expiry_date is required when has_expiry_date is true.")
        return self

    def attributes(self) -> Dict[str, Any]:
        """Model attributes to persist (quantities excluded)."""
        return self.model_dump(exclude={"product_qties"})


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional: only supplied fields will be updated.
    ``null`` is accepted only for nullable attributes (``expiry_date``).
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: Optional[str] = None
    sku: Optional[str] = None
    symbology: Optional[Symbology] = None
    brand_id: Optional[ReferenceId] = None
    category_id: Optional[ReferenceId] = None
    unit_id: Optional[ReferenceId] = None
    tax_id: Optional[ReferenceId] = None
    price: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    qty: Optional[Count] = None
    alert_qty: Optional[Count] = None
    tax_method: Optional[TaxMethod] = None
    has_stock: Optional[bool] = None
    has_expiry_date: Optional[bool] = None
    expiry_date: Optional[date] = None
    details: Optional[str] = None
    is_active: Optional[bool] = None
    product_qties: Optional[Tuple[ProductQuantityDTO, ...]] = None

    @field_validator("name", "sku")
    @classmethod
    def must_not_be_empty(
        cls, v: Optional[str], info: ValidationInfo
    ) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError(f"{info.field_name} must not be empty.")
        return v.strip() if v is not None else v

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return _non_negative("Price", v)

    @field_validator("qty", "alert_qty")
    @classmethod
    def quantities_must_be_non_negative(
        cls, v: Optional[int], info: ValidationInfo
    ) -> Optional[int]:
        return _non_negative(info.field_name, v)

    @field_validator("product_qties")
    @classmethod
    def warehouses_must_be_unique(cls, v):
        return _unique_warehouses(v)

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> UpdateProductDTO:
        for field in self.model_fields_set - NULLABLE_FIELDS - {"details"}:
            if getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null.")
        return self

    def changes(self) -> Dict[str, Any]:
        """Supplied attributes only (quantities excluded)."""
        changes = self.model_dump(exclude_unset=True, exclude={"product_qties"})
        if "details" in changes and changes["details"] is None:
            changes["details"] = ""
        return changes


# ---------------------------------------------------------------------------
# Query options
# ---------------------------------------------------------------------------


class ProductQueryOptions(BaseModel):
    """Which relations to eager-load and whether soft-deleted rows count.

    Threaded view -> service -> repository -> serializer, so the
    serializer renders exactly what the repository fetched.
    """

    model_config = ConfigDict(frozen=True)

    relations: FrozenSet[str] = ALL_RELATIONS
    with_trashed: bool = False

    @field_validator("relations")
    @classmethod
    def relations_must_be_known(cls, v: FrozenSet[str]) -> FrozenSet[str]:
        unknown = sorted(v - ALL_RELATIONS)
        if unknown:
            raise ValueError(f"Unknown relation(s): {', '.join(unknown)}.")
        return v

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> ProductQueryOptions:
        """Build options from ``?include=a,b&with_trashed=true``."""
        data: Dict[str, Any] = {}
        include = params.get("include")
        if include is not None:
            data["relations"] = frozenset(
                name.strip() for name in include.split(",") if name.strip()
            )
        if params.get("with_trashed") is not None:
            data["with_trashed"] = params.get("with_trashed")
        return cls(**data)

    def loads(self, relation: str) -> bool:
        return relation in self.relations


DEFAULT_OPTIONS = ProductQueryOptions()
