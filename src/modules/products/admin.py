from django.contrib import admin

from modules.products.models import Attachment, Product, ProductQuantity


class ProductQuantityInline(admin.TabularInline):
    model = ProductQuantity
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["sku", "name", "price", "qty", "is_active", "deleted_at"]
    list_filter = ["is_active", "tax_method", "brand", "category"]
    search_fields = ["sku", "name"]
    list_select_related = ["brand", "category"]
    inlines = [ProductQuantityInline]


@admin.register(Attachment)
class AttachmentAdmin(admin.ModelAdmin):
    list_display = ["label", "path", "owner_type", "owner_id", "created_at"]
    list_filter = ["owner_type"]
    search_fields = ["owner_id", "label"]
