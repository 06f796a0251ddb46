from django.contrib import admin

from modules.catalog.models import Brand, Category, Tax, Unit, Warehouse


class ReferenceAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "deleted_at", "updated_at"]
    search_fields = ["name"]
    list_filter = ["deleted_at"]


@admin.register(Unit)
class UnitAdmin(ReferenceAdmin):
    list_display = ["id", "name", "short_name", "deleted_at", "updated_at"]


@admin.register(Tax)
class TaxAdmin(ReferenceAdmin):
    list_display = ["id", "name", "rate", "deleted_at", "updated_at"]


admin.site.register(Brand, ReferenceAdmin)
admin.site.register(Category, ReferenceAdmin)
admin.site.register(Warehouse, ReferenceAdmin)
