"""Domain error codes for the fulfillment module.

Every error here is an expected, recoverable outcome that is reported to the
caller. None of them should be logged as a server fault.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_ID = "INVALID_ID"
    FORBIDDEN = "FORBIDDEN"
    RESIDENT_NOT_FOUND = "RESIDENT_NOT_FOUND"
    REQUEST_NOT_FOUND = "REQUEST_NOT_FOUND"
    INVENTORY_ITEM_NOT_FOUND = "INVENTORY_ITEM_NOT_FOUND"
    RECEIPT_NOT_FOUND = "RECEIPT_NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    ALREADY_DECIDED = "ALREADY_DECIDED"
    NOT_APPROVED = "NOT_APPROVED"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    ALREADY_PAID = "ALREADY_PAID"
    NO_PAYMENT_AMOUNT = "NO_PAYMENT_AMOUNT"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code, user-safe message and structured details."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when a submission is malformed. No state is mutated."""

    def __init__(self, message: str, field_name: str | None = None) -> None:
        details = {"field": field_name} if field_name else {}
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message, details=details)
        self.field_name = field_name


class InvalidIdentifierError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
            details={"kind": kind},
        )


class PermissionDeniedError(DomainError):
    """Raised when the actor may not act on a request."""

    def __init__(self, message: str = "Not allowed to access this request") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class ResidentNotFoundError(DomainError):
    """Raised when the requester has no resident profile."""

    def __init__(self, resident_id: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.RESIDENT_NOT_FOUND,
            message="Resident profile not found. Please complete your profile first.",
        )
        self.resident_id = resident_id


class RequestNotFoundError(DomainError):
    """Raised when a request does not exist."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            code=ErrorCode.REQUEST_NOT_FOUND,
            message="Request not found",
            details={"request_id": request_id},
        )
        self.request_id = request_id


class InventoryItemNotFoundError(DomainError):
    """Raised when a line item references an unknown inventory item."""

    def __init__(self, item_id: str) -> None:
        super().__init__(
            code=ErrorCode.INVENTORY_ITEM_NOT_FOUND,
            message="Inventory item not found",
            details={"item_id": item_id},
        )
        self.item_id = item_id


class ReceiptNotFoundError(DomainError):
    """Raised when a receipt is requested for an unpaid request."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            code=ErrorCode.RECEIPT_NOT_FOUND,
            message="No receipt has been issued for this request",
            details={"request_id": request_id},
        )
        self.request_id = request_id


class InvalidTransitionError(DomainError):
    """Raised when a lifecycle transition is not allowed from the current state."""

    def __init__(
        self,
        request_id: str,
        current_status: str,
        attempted: str,
        code: ErrorCode = ErrorCode.INVALID_TRANSITION,
        message: str | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message or f"Cannot {attempted} a request that is {current_status}",
            details={
                "request_id": request_id,
                "current_status": current_status,
                "attempted": attempted,
            },
        )
        self.request_id = request_id
        self.current_status = current_status
        self.attempted = attempted


class AlreadyDecidedError(InvalidTransitionError):
    """Raised when withdrawing a request that has already been decided."""

    def __init__(self, request_id: str, current_status: str) -> None:
        super().__init__(
            request_id,
            current_status,
            "withdraw",
            code=ErrorCode.ALREADY_DECIDED,
            message=f"Request has already been {current_status} and can no longer be withdrawn",
        )


class NotApprovedError(InvalidTransitionError):
    """Raised when paying a request that is not approved."""

    def __init__(self, request_id: str, current_status: str) -> None:
        super().__init__(
            request_id,
            current_status,
            "pay",
            code=ErrorCode.NOT_APPROVED,
            message="Only approved requests can be paid",
        )


class InsufficientStockError(DomainError):
    """Raised when an approval cannot reserve a line item's quantity."""

    def __init__(self, item_id: str, item_name: str, requested: int, available: int) -> None:
        shortfall = requested - available
        super().__init__(
            code=ErrorCode.INSUFFICIENT_STOCK,
            message=f"Asset '{item_name}' does not have enough stock",
            details={
                "item_id": item_id,
                "item_name": item_name,
                "requested": requested,
                "available": available,
                "shortfall": shortfall,
            },
        )
        self.item_id = item_id
        self.item_name = item_name
        self.requested = requested
        self.available = available
        self.shortfall = shortfall


class AlreadyPaidError(DomainError):
    """Raised on a second payment attempt. No duplicate receipt is created."""

    def __init__(self, request_id: str, receipt_number: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_PAID,
            message="This request has already been paid",
            details={"request_id": request_id, "receipt_number": receipt_number},
        )
        self.request_id = request_id
        self.receipt_number = receipt_number


class NoPaymentAmountError(DomainError):
    """Raised when paying a document request that carries no fee."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            code=ErrorCode.NO_PAYMENT_AMOUNT,
            message="No payment amount set for this request",
            details={"request_id": request_id},
        )
        self.request_id = request_id
