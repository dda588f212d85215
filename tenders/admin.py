from django.contrib import admin, messages

from .exceptions import VaultError
from .models import RotationLock, Tender, TenderCycle
from .services.activation import activate_tender


class TenderCycleInline(admin.TabularInline):
    model = TenderCycle
    extra = 0
    can_delete = False
    fields = ("cycle_number", "public_id", "status", "display_start_time", "display_end_time", "order", "closed_at")
    readonly_fields = fields


@admin.register(Tender)
class TenderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "title",
        "owner",
        "status",
        "usage_count",
        "max_usage",
        "last_displayed_at",
        "temporary_archived_until",
        "display_end_time",
    )
    search_fields = ("title", "description", "owner__username")
    list_filter = ("status", "is_deleted", "currency")
    readonly_fields = (
        "usage_count",
        "last_displayed_at",
        "temporary_archived_until",
        "display_start_time",
        "display_end_time",
        "created_at",
        "updated_at",
    )
    inlines = [TenderCycleInline]
    actions = ["activate_selected"]

    def activate_selected(self, request, queryset):
        """Active immédiatement les tenders sélectionnés encore éligibles."""
        activated = 0
        for tender in queryset:
            try:
                activate_tender(tender.pk)
            except VaultError as exc:
                self.message_user(request, f"Tender {tender.pk} : {exc}", level=messages.WARNING)
            else:
                activated += 1
        self.message_user(request, f"{activated} tender(s) activé(s).")

    activate_selected.short_description = "Activer maintenant les tenders sélectionnés"


@admin.register(TenderCycle)
class TenderCycleAdmin(admin.ModelAdmin):
    list_display = ("public_id", "tender", "cycle_number", "status", "display_start_time", "display_end_time", "order")
    search_fields = ("public_id",)
    list_filter = ("status",)
    readonly_fields = (
        "tender",
        "cycle_number",
        "public_id",
        "status",
        "display_start_time",
        "display_end_time",
        "order",
        "closed_at",
        "created_at",
        "updated_at",
    )


@admin.register(RotationLock)
class RotationLockAdmin(admin.ModelAdmin):
    list_display = ("name", "locked_until", "acquired_at")
