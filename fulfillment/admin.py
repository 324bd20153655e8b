from django import forms
from django.contrib import admin

from fulfillment.domain import InventoryItemId, RequestStatus
from fulfillment.models import (
    InventoryItem,
    Notification,
    Receipt,
    RequestLineItem,
    Resident,
    ServiceRequest,
)
from fulfillment.stores.django_store import DjangoInventoryLedger


class RequestLineItemInline(admin.TabularInline):
    model = RequestLineItem
    extra = 0
    readonly_fields = ["position", "inventory_item", "quantity", "request_date", "document_fields"]
    can_delete = False


class ReceiptInline(admin.StackedInline):
    model = Receipt
    extra = 0
    readonly_fields = ["number", "amount", "issued_at"]
    can_delete = False


@admin.register(Resident)
class ResidentAdmin(admin.ModelAdmin):
    list_display = ["last_name", "first_name", "user", "created_at"]
    search_fields = ["last_name", "first_name", "user__username"]


class InventoryItemForm(forms.ModelForm):
    restock = forms.IntegerField(
        min_value=0,
        required=False,
        help_text="Units to add to the available stock.",
    )

    class Meta:
        model = InventoryItem
        fields = ["name", "unit_price", "available_quantity"]


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    form = InventoryItemForm
    list_display = ["name", "unit_price", "available_quantity", "updated_at"]
    search_fields = ["name"]

    def get_readonly_fields(self, request, obj=None):
        # Stock of an existing item moves only through the ledger.
        if obj is not None:
            return ["available_quantity"]
        return []

    def get_fields(self, request, obj=None):
        if obj is None:
            return ["name", "unit_price", "available_quantity"]
        return ["name", "unit_price", "available_quantity", "restock"]

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        units = form.cleaned_data.get("restock")
        if change and units:
            DjangoInventoryLedger().restore(InventoryItemId(obj.id), units)


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    # Lifecycle columns change only through the API so stock stays consistent.
    list_display = ["id", "kind", "resident", "status", "payment_status", "created_at"]
    list_filter = ["kind", "status", "payment_status", "document_type"]
    search_fields = ["resident__last_name", "resident__first_name", "receipt__number"]
    readonly_fields = [
        "kind",
        "status",
        "payment_status",
        "fee",
        "amount_paid",
        "completed",
        "decided_at",
        "paid_at",
    ]
    inlines = [RequestLineItemInline, ReceiptInline]

    def has_delete_permission(self, request, obj=None):
        # Decided requests hold stock or a receipt.
        if obj is not None and obj.status != RequestStatus.PENDING.value:
            return False
        return super().has_delete_permission(request, obj)

    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop("delete_selected", None)
        return actions


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["event_type", "audience", "resident", "created_at", "read_at"]
    list_filter = ["event_type", "audience"]
