from rest_framework import serializers

from .models import Tender, TenderCycle
from .services.queries import active_cycle_for


class TenderCycleSerializer(serializers.ModelSerializer):
    order = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = TenderCycle
        fields = (
            "id",
            "cycle_number",
            "public_id",
            "status",
            "display_start_time",
            "display_end_time",
            "order",
            "closed_at",
        )
        read_only_fields = fields


class TenderSerializer(serializers.ModelSerializer):
    """Vue propriétaire d'un tender : champs d'annonce, compteurs et cycle ouvert."""

    owner = serializers.ReadOnlyField(source="owner.username")
    active_cycle = serializers.SerializerMethodField()

    class Meta:
        model = Tender
        fields = (
            "id",
            "owner",
            "status",
            "title",
            "description",
            "category_id",
            "sub_category_id",
            "sub_sub_category_id",
            "budget_min",
            "budget_max",
            "currency",
            "duration_value",
            "duration_unit",
            "country",
            "attachments",
            "metadata",
            "usage_count",
            "max_usage",
            "last_displayed_at",
            "temporary_archived_until",
            "display_start_time",
            "display_end_time",
            "active_cycle",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields

    def get_active_cycle(self, obj):
        cycle = active_cycle_for(obj)
        if cycle is None:
            return None
        return TenderCycleSerializer(cycle).data
