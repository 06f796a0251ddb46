from typing import Any, Dict

import django_filters

from modules.products.dtos import BIGINT_MAX
from modules.products.models import Product


def _reference_filter(field_name: str) -> django_filters.NumberFilter:
    return django_filters.NumberFilter(
        field_name=field_name, lookup_expr="exact", min_value=1, max_value=BIGINT_MAX
    )


class ProductFilter(django_filters.FilterSet):
    """Query-string filters for the product list.

    Used for parsing and validation only: ``lookups()`` turns the cleaned
    values into ORM look-ups that the repository applies, so filtering and
    eager loading stay in one place.
    """

    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    sku = django_filters.CharFilter(field_name="sku", lookup_expr="iexact")
    brand_id = _reference_filter("brand_id")
    category_id = _reference_filter("category_id")
    unit_id = _reference_filter("unit_id")
    tax_id = _reference_filter("tax_id")
    is_active = django_filters.BooleanFilter(field_name="is_active")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")

    class Meta:
        model = Product
        fields = [
            "name",
            "sku",
            "brand_id",
            "category_id",
            "unit_id",
            "tax_id",
            "is_active",
            "min_price",
            "max_price",
        ]

    def lookups(self) -> Dict[str, Any]:
        """ORM look-ups for every supplied filter (call after ``is_valid()``)."""
        lookups: Dict[str, Any] = {}
        for name, flt in self.filters.items():
            value = self.form.cleaned_data.get(name)
            if value in (None, ""):
                continue
            lookups[f"{flt.field_name}__{flt.lookup_expr}"] = value
        return lookups
