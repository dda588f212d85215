from django.contrib import admin

from .models import Assignment, Offer, Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "owner", "status", "project_type", "created_at")
    search_fields = ("title", "description")
    list_filter = ("status", "project_type")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "freelancer", "amount", "status", "created_at")
    list_filter = ("status",)


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "freelancer", "status", "assigned_at")
    list_filter = ("status",)
