"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in fulfillment/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import date, datetime

from fulfillment.domain.documents import DocumentFields, DocumentType
from fulfillment.domain.lifecycle import PaymentStatus, RequestKind, RequestStatus
from fulfillment.domain.value_objects import (
    InventoryItemId,
    Money,
    Quantity,
    ReceiptNumber,
    RequestId,
    ResidentId,
    StockLevel,
)


@dataclass(frozen=True)
class Resident:
    """Domain representation of a Resident profile."""

    id: ResidentId
    user_id: int | None
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class InventoryItem:
    """Domain representation of a rentable asset in the catalog."""

    id: InventoryItemId
    name: str
    unit_price: Money
    available: StockLevel


@dataclass(frozen=True)
class LineItem:
    """One requested asset, or the requested document, within a request."""

    position: int
    quantity: Quantity
    item_id: InventoryItemId | None = None
    item_name: str | None = None
    unit_price: Money | None = None
    request_date: date | None = None
    document: DocumentFields | None = None

    def subtotal(self) -> Money:
        if self.unit_price is None:
            return Money.zero()
        return self.unit_price.times(self.quantity.value)


@dataclass(frozen=True)
class Receipt:
    """Immutable record of the single payment of a request."""

    number: ReceiptNumber
    request_id: RequestId
    amount: Money
    issued_at: datetime


@dataclass(frozen=True)
class RequestAggregate:
    """Domain representation of a document or asset request.

    ``fee`` is the per-copy document fee set by the administrator at
    approval. ``amount_paid`` is frozen at payment and wins over live prices.
    """

    id: RequestId
    kind: RequestKind
    resident_id: ResidentId
    line_items: tuple[LineItem, ...]
    status: RequestStatus
    payment_status: PaymentStatus
    created_at: datetime
    admin_message: str | None = None
    fee: Money | None = None
    amount_paid: Money | None = None
    receipt_number: ReceiptNumber | None = None
    decided_at: datetime | None = None
    paid_at: datetime | None = None

    @property
    def is_paid(self) -> bool:
        return self.payment_status is PaymentStatus.PAID

    @property
    def completed(self) -> bool:
        return self.kind is RequestKind.DOCUMENT and self.is_paid

    @property
    def document(self) -> DocumentFields | None:
        if self.kind is not RequestKind.DOCUMENT or not self.line_items:
            return None
        return self.line_items[0].document

    @property
    def document_type(self) -> DocumentType | None:
        doc = self.document
        return doc.document_type if doc else None

    def compute_total(self) -> Money:
        if self.is_paid and self.amount_paid is not None:
            return self.amount_paid
        if self.kind is RequestKind.DOCUMENT:
            fee = self.fee or Money.zero()
            copies = sum(line.quantity.value for line in self.line_items)
            return fee.times(copies)
        total = Money.zero()
        for line in self.line_items:
            total = total + line.subtotal()
        return total


@dataclass(frozen=True)
class StatusCounts:
    """Per-status request counts for dashboards."""

    approved: int = 0
    pending: int = 0
    denied: int = 0
    paid: int = 0
    total: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "approved": self.approved,
            "pending": self.pending,
            "denied": self.denied,
            "paid": self.paid,
            "total": self.total,
        }


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation."""

    user_id: int | None
    resident_id: ResidentId | None = None
    is_admin: bool = False

    def owns(self, aggregate: RequestAggregate) -> bool:
        return self.resident_id is not None and self.resident_id == aggregate.resident_id

    def can_access(self, aggregate: RequestAggregate) -> bool:
        return self.is_admin or self.owns(aggregate)
