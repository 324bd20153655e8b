"""Serializers for request input and domain model output."""

import json

from rest_framework import serializers

from fulfillment.domain import Outcome


class InventoryItemSerializer(serializers.Serializer):
    """Serializer for InventoryItem domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, source="unit_price.amount")
    available_quantity = serializers.IntegerField(source="available.value")


class LineItemSerializer(serializers.Serializer):
    """Serializer for LineItem domain model."""

    position = serializers.IntegerField()
    quantity = serializers.IntegerField(source="quantity.value")
    asset_id = serializers.UUIDField(source="item_id.value", allow_null=True)
    asset_name = serializers.CharField(source="item_name", allow_null=True)
    unit_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, source="unit_price.amount", allow_null=True
    )
    request_date = serializers.DateField(allow_null=True)
    fields = serializers.JSONField(source="document.as_json", allow_null=True)


class RequestSerializer(serializers.Serializer):
    """Serializer for RequestAggregate domain model."""

    id = serializers.UUIDField(source="id.value")
    kind = serializers.CharField(source="kind.value")
    resident_id = serializers.UUIDField(source="resident_id.value")
    status = serializers.CharField(source="status.value")
    payment_status = serializers.CharField(source="payment_status.value")
    admin_message = serializers.CharField(allow_null=True)
    document_type = serializers.CharField(source="document_type.value", allow_null=True)
    fee = serializers.DecimalField(max_digits=10, decimal_places=2, source="fee.amount", allow_null=True)
    total_amount = serializers.SerializerMethodField()
    amount_paid = serializers.DecimalField(
        max_digits=12, decimal_places=2, source="amount_paid.amount", allow_null=True
    )
    receipt_number = serializers.SerializerMethodField()
    completed = serializers.BooleanField()
    created_at = serializers.DateTimeField()
    decided_at = serializers.DateTimeField(allow_null=True)
    paid_at = serializers.DateTimeField(allow_null=True)
    items = LineItemSerializer(source="line_items", many=True)

    def get_total_amount(self, aggregate) -> str:
        return str(aggregate.compute_total())

    def get_receipt_number(self, aggregate) -> str | None:
        return str(aggregate.receipt_number) if aggregate.receipt_number else None


class StatusCountsSerializer(serializers.Serializer):
    approved = serializers.IntegerField()
    pending = serializers.IntegerField()
    denied = serializers.IntegerField()
    paid = serializers.IntegerField()
    total = serializers.IntegerField()


class AssetLineInputSerializer(serializers.Serializer):
    asset_id = serializers.CharField()
    quantity = serializers.IntegerField()
    request_date = serializers.DateField()


class AssetRequestCreateSerializer(serializers.Serializer):
    items = AssetLineInputSerializer(many=True, allow_empty=False)


class DocumentRequestCreateSerializer(serializers.Serializer):
    document_type = serializers.CharField()
    fields = serializers.JSONField(required=False, default=dict)
    copies = serializers.IntegerField(required=False, default=1)

    def validate_fields(self, value):
        # Multipart submissions send the field map as a JSON string.
        if isinstance(value, str):
            try:
                value = json.loads(value) if value else {}
            except ValueError:
                raise serializers.ValidationError("Must be a JSON object.") from None
        if not isinstance(value, dict):
            raise serializers.ValidationError("Must be a JSON object.")
        return value


class DecisionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[o.value for o in Outcome])
    admin_message = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    fee = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class RevokeSerializer(serializers.Serializer):
    admin_message = serializers.CharField(required=False, allow_null=True, allow_blank=True)
