from fulfillment.domain.documents import CertificationPurpose, DocumentFields, DocumentType
from fulfillment.domain.lifecycle import Outcome, PaymentStatus, RequestKind, RequestStatus
from fulfillment.domain.models import (
    Actor,
    InventoryItem,
    LineItem,
    Receipt,
    RequestAggregate,
    Resident,
    StatusCounts,
)
from fulfillment.domain.value_objects import (
    InventoryItemId,
    Money,
    Quantity,
    ReceiptNumber,
    RequestId,
    ResidentId,
    StockLevel,
)

__all__ = [
    "Actor",
    "CertificationPurpose",
    "DocumentFields",
    "DocumentType",
    "InventoryItem",
    "InventoryItemId",
    "LineItem",
    "Money",
    "Outcome",
    "PaymentStatus",
    "Quantity",
    "Receipt",
    "ReceiptNumber",
    "RequestAggregate",
    "RequestId",
    "RequestKind",
    "RequestStatus",
    "Resident",
    "ResidentId",
    "StatusCounts",
    "StockLevel",
]
