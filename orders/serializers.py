from rest_framework import serializers

from .models import Offer, Order


class OrderSerializer(serializers.ModelSerializer):
    is_anonymous = serializers.ReadOnlyField()

    class Meta:
        model = Order
        fields = (
            "id",
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
            "project_type",
            "status",
            "completion_status",
            "is_anonymous",
            "created_at",
        )
        read_only_fields = fields


class OfferSerializer(serializers.ModelSerializer):
    freelancer = serializers.ReadOnlyField(source="freelancer.username")
    order = OrderSerializer(read_only=True)

    class Meta:
        model = Offer
        fields = ("id", "order", "freelancer", "amount", "message", "status", "created_at", "updated_at")
        read_only_fields = fields
