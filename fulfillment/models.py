"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
Stock and lifecycle columns are only written by the stores in
fulfillment/stores/django_store.py.
"""

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q

from fulfillment.domain.events import Audience, EventType
from fulfillment.domain.lifecycle import PaymentStatus, RequestKind, RequestStatus


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.value.replace("_", " ").title()) for member in enum_cls]


class Resident(models.Model):
    """Persistence model for resident profiles (managed elsewhere)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="resident",
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["last_name", "first_name"]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"


class InventoryItem(models.Model):
    """Persistence model for rentable barangay assets."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    available_quantity = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=Q(available_quantity__gte=0),
                name="inventory_available_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(unit_price__gte=0),
                name="inventory_unit_price_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.available_quantity} available)"

    def save(self, *args, **kwargs):
        # Only the ledger changes stock of an existing item.
        if not self._state.adding and kwargs.get("update_fields") is None:
            kwargs["update_fields"] = [
                f.name
                for f in self._meta.concrete_fields
                if not f.primary_key and f.name != "available_quantity"
            ]
        super().save(*args, **kwargs)


class ServiceRequest(models.Model):
    """Persistence model for document and asset requests."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kind = models.CharField(max_length=16, choices=_choices(RequestKind))
    resident = models.ForeignKey(Resident, on_delete=models.PROTECT, related_name="requests")
    status = models.CharField(
        max_length=16, choices=_choices(RequestStatus), default=RequestStatus.PENDING.value
    )
    payment_status = models.CharField(
        max_length=16, choices=_choices(PaymentStatus), default=PaymentStatus.UNPAID.value
    )
    admin_message = models.TextField(blank=True, null=True)
    document_type = models.CharField(max_length=64, blank=True, default="")
    fee = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    completed = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    decided_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["kind", "status"]),
            models.Index(fields=["resident", "kind"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(payment_status=PaymentStatus.UNPAID.value)
                | Q(status=RequestStatus.APPROVED.value),
                name="request_paid_requires_approved",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.kind} request {self.id} ({self.status})"


class RequestLineItem(models.Model):
    """Persistence model for the line items of a request."""

    request = models.ForeignKey(ServiceRequest, on_delete=models.CASCADE, related_name="line_items")
    position = models.PositiveSmallIntegerField()
    inventory_item = models.ForeignKey(
        InventoryItem,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="line_items",
    )
    quantity = models.PositiveIntegerField()
    request_date = models.DateField(null=True, blank=True)
    document_fields = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(fields=["request", "position"], name="line_item_position_unique"),
            models.CheckConstraint(condition=Q(quantity__gte=1), name="line_item_quantity_positive"),
        ]

    def __str__(self) -> str:
        return f"{self.request_id}#{self.position} x{self.quantity}"


class Receipt(models.Model):
    """Persistence model for the single receipt of a paid request."""

    number = models.CharField(max_length=32, unique=True)
    request = models.OneToOneField(ServiceRequest, on_delete=models.PROTECT, related_name="receipt")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    issued_at = models.DateTimeField()

    class Meta:
        ordering = ["-issued_at"]

    def __str__(self) -> str:
        return self.number


class ReceiptSequence(models.Model):
    """Monotonic counter backing receipt numbers, one row per prefix."""

    prefix = models.CharField(max_length=8, primary_key=True)
    last_value = models.PositiveBigIntegerField(default=0)

    def __str__(self) -> str:
        return f"{self.prefix}:{self.last_value}"


class Notification(models.Model):
    """Stored notification, the database delivery channel."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event_type = models.CharField(max_length=32, choices=_choices(EventType))
    audience = models.CharField(max_length=16, choices=_choices(Audience))
    request_id = models.UUIDField()
    resident = models.ForeignKey(
        Resident,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["audience", "-created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_type} -> {self.audience}"
