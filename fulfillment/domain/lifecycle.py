"""Request lifecycle states and the transition rules between them.

    pending --decide--> approved | denied
    approved (unpaid) --revoke--> denied
    approved (unpaid) --pay--> approved (paid)

Nothing ever returns to ``pending``. The functions here are pure: they check
guards and return the next aggregate. Persisting it, and reserving stock for
an approval, is the job of the services.
"""

from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from fulfillment.domain.errors import (
    AlreadyDecidedError,
    AlreadyPaidError,
    InvalidTransitionError,
    NoPaymentAmountError,
    NotApprovedError,
)
from fulfillment.domain.value_objects import InventoryItemId, Money, Quantity

if TYPE_CHECKING:
    from fulfillment.domain.models import Receipt, RequestAggregate


class RequestKind(str, Enum):
    ASSET = "asset"
    DOCUMENT = "document"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class Outcome(str, Enum):
    """Decision an administrator can take on a pending request."""

    APPROVED = "approved"
    DENIED = "denied"

    @property
    def status(self) -> RequestStatus:
        return RequestStatus(self.value)


# (action, current status) -> statuses the action may move to.
ALLOWED_TRANSITIONS: dict[tuple[str, RequestStatus], frozenset[RequestStatus]] = {
    ("decide", RequestStatus.PENDING): frozenset({RequestStatus.APPROVED, RequestStatus.DENIED}),
    ("revoke", RequestStatus.APPROVED): frozenset({RequestStatus.DENIED}),
}


def can_transition(action: str, current: RequestStatus, target: RequestStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get((action, current), frozenset())


def ensure_decidable(aggregate: "RequestAggregate", outcome: Outcome) -> None:
    if not can_transition("decide", aggregate.status, outcome.status):
        raise InvalidTransitionError(str(aggregate.id), aggregate.status.value, "decide")


def ensure_withdrawable(aggregate: "RequestAggregate") -> None:
    if aggregate.status is not RequestStatus.PENDING:
        raise AlreadyDecidedError(str(aggregate.id), aggregate.status.value)


def ensure_revocable(aggregate: "RequestAggregate") -> None:
    if not can_transition("revoke", aggregate.status, RequestStatus.DENIED):
        raise InvalidTransitionError(str(aggregate.id), aggregate.status.value, "revoke")
    if aggregate.payment_status is PaymentStatus.PAID:
        raise InvalidTransitionError(
            str(aggregate.id),
            "paid",
            "revoke",
            message="A paid request can no longer be revoked",
        )


def ensure_payable(aggregate: "RequestAggregate") -> None:
    """Payment guards, checked in this order."""
    if aggregate.status is not RequestStatus.APPROVED:
        raise NotApprovedError(str(aggregate.id), aggregate.status.value)
    if aggregate.payment_status is PaymentStatus.PAID:
        number = str(aggregate.receipt_number) if aggregate.receipt_number else None
        raise AlreadyPaidError(str(aggregate.id), number)
    if aggregate.kind is RequestKind.DOCUMENT and not (aggregate.fee and aggregate.fee.is_positive()):
        raise NoPaymentAmountError(str(aggregate.id))


def reservations(aggregate: "RequestAggregate") -> list[tuple[InventoryItemId, Quantity]]:
    """Stock to reserve on approval, in stored line item order."""
    return [
        (line.item_id, line.quantity)
        for line in sorted(aggregate.line_items, key=lambda line: line.position)
        if line.item_id is not None
    ]


def decide(
    aggregate: "RequestAggregate",
    outcome: Outcome,
    decided_at: datetime,
    admin_message: str | None = None,
    fee: Money | None = None,
) -> "RequestAggregate":
    ensure_decidable(aggregate, outcome)
    if aggregate.kind is RequestKind.DOCUMENT and outcome is Outcome.APPROVED:
        fee = fee if fee is not None else aggregate.fee
    else:
        fee = aggregate.fee
    return replace(
        aggregate,
        status=outcome.status,
        admin_message=admin_message,
        decided_at=decided_at,
        fee=fee,
    )


def revoke(
    aggregate: "RequestAggregate",
    revoked_at: datetime,
    admin_message: str | None = None,
) -> "RequestAggregate":
    ensure_revocable(aggregate)
    return replace(
        aggregate,
        status=RequestStatus.DENIED,
        admin_message=admin_message or aggregate.admin_message,
        decided_at=revoked_at,
    )


def pay(aggregate: "RequestAggregate", receipt: "Receipt") -> "RequestAggregate":
    ensure_payable(aggregate)
    return replace(
        aggregate,
        payment_status=PaymentStatus.PAID,
        amount_paid=receipt.amount,
        receipt_number=receipt.number,
        paid_at=receipt.issued_at,
    )
