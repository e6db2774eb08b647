"""Combo admin."""

from django.contrib import admin
from django.utils.html import format_html
from simple_history.admin import SimpleHistoryAdmin

from bundleman.models import Combo, PriceSlot

_BADGE_COLORS = {
    "active": ("#28a745", "#fff"),
    "paused": ("#ffc107", "#000"),
    "upcoming": ("#17a2b8", "#fff"),
    "expired": ("#6c757d", "#fff"),
    "exhausted": ("#fd7e14", "#fff"),
    "inactive": ("#dc3545", "#fff"),
}


class PriceSlotInline(admin.TabularInline):
    model = PriceSlot
    extra = 1
    fields = ["name", "min_price_q", "max_price_q", "max_items", "priority", "is_active", "sort_order"]


@admin.register(Combo)
class ComboAdmin(SimpleHistoryAdmin):
    list_display = [
        "code",
        "name",
        "discount_type",
        "discount_value",
        "usage_display",
        "status_badge",
    ]
    list_filter = ["discount_type", "is_active", "is_paused"]
    search_fields = ["code", "name", "tags__name"]
    readonly_fields = ["usage_count", "created_at", "updated_at"]
    inlines = [PriceSlotInline]

    fieldsets = [
        (
            None,
            {"fields": ("code", "name", "description", "tags")},
        ),
        (
            "Discount",
            {
                "fields": (
                    "discount_type",
                    "discount_value",
                    "max_discount_q",
                    "buy_qty",
                    "get_qty",
                    "get_discount_percent",
                ),
                "description": "Fixed discounts and the cap are in cents. buy/get fields apply to Buy X get Y only.",
            },
        ),
        (
            "Rules",
            {
                "fields": (
                    "min_total_items",
                    "max_total_items",
                    "allow_duplicate_products",
                    "require_all_slots_filled",
                    "min_cart_value_q",
                    "max_cart_value_q",
                    "prevent_high_value_in_low_slot",
                )
            },
        ),
        (
            "Validity",
            {"fields": ("is_active", "is_paused", "valid_from", "valid_until", "usage_limit", "usage_count")},
        ),
        (
            "Metadata",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    ]

    def usage_display(self, obj):
        if obj.usage_limit is None:
            return f"{obj.usage_count}"
        return f"{obj.usage_count}/{obj.usage_limit}"

    usage_display.short_description = "Usage"
    usage_display.admin_order_field = "usage_count"

    def status_badge(self, obj):
        status = obj.status
        background, color = _BADGE_COLORS[status]
        return format_html(
            '<span style="background-color:{};color:{};padding:2px 6px;border-radius:3px;font-size:11px;">{}</span>',
            background,
            color,
            status.title(),
        )

    status_badge.short_description = "Status"

    actions = ["pause_combos", "resume_combos", "deactivate_combos"]

    @admin.action(description="Pause selected combos")
    def pause_combos(self, request, queryset):
        updated = queryset.update(is_paused=True)
        self.message_user(request, f"{updated} combo(s) paused.")

    @admin.action(description="Resume selected combos")
    def resume_combos(self, request, queryset):
        updated = queryset.update(is_paused=False)
        self.message_user(request, f"{updated} combo(s) resumed.")

    @admin.action(description="Deactivate selected combos")
    def deactivate_combos(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"{updated} combo(s) deactivated.")
