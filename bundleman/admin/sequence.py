"""SequenceCounter admin."""

from django.contrib import admin

from bundleman.models import SequenceCounter


@admin.register(SequenceCounter)
class SequenceCounterAdmin(admin.ModelAdmin):
    """Read-only: counters only move forward through the allocator."""

    list_display = ["scope_key", "last_value", "updated_at"]
    search_fields = ["scope_key"]
    readonly_fields = ["scope_key", "last_value", "created_at", "updated_at"]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
