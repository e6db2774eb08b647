"""CatalogItem admin."""

from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from bundleman.models import CatalogItem


class ChildItemInline(admin.TabularInline):
    model = CatalogItem
    fk_name = "parent"
    extra = 0
    fields = ["code", "barcode", "size", "color", "quantity", "price_q", "is_active"]
    readonly_fields = ["code", "barcode"]
    show_change_link = True
    verbose_name_plural = "Children"


@admin.register(CatalogItem)
class CatalogItemAdmin(SimpleHistoryAdmin):
    list_display = [
        "code",
        "name",
        "role",
        "size",
        "color",
        "quantity",
        "formatted_price",
        "is_active",
    ]
    list_filter = ["role", "bundle_type", "category", "is_active", "is_combo_eligible"]
    search_fields = ["code", "barcode", "name", "keywords__name"]
    readonly_fields = ["code", "barcode", "role", "parent", "serial_number", "bundle_type", "created_at", "updated_at"]
    inlines = [ChildItemInline]

    fieldsets = [
        (
            None,
            {"fields": ("code", "barcode", "name", "keywords")},
        ),
        (
            "Bundle",
            {"fields": ("role", "bundle_type", "parent", "serial_number", "size", "color", "quantity")},
        ),
        (
            "Price & Tax",
            {"fields": ("price_q", "mrp_q", "tax_rate")},
        ),
        (
            "Classification",
            {"fields": ("category", "subcategory", "is_active", "is_combo_eligible")},
        ),
        (
            "Metadata",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    ]

    def formatted_price(self, obj):
        return f"{obj.price_q / 100:.2f}"

    formatted_price.short_description = "Price"
    formatted_price.admin_order_field = "price_q"

    def get_inlines(self, request, obj):
        if obj is not None and obj.is_bundle_parent:
            return self.inlines
        return []

    actions = ["activate_items", "deactivate_items"]

    @admin.action(description="Activate selected items")
    def activate_items(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f"{updated} item(s) activated.")

    @admin.action(description="Deactivate selected items")
    def deactivate_items(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} item(s) deactivated.")
