"""Lifecycle events handed to the notification dispatcher."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from fulfillment.domain.models import LineItem, Receipt, RequestAggregate
from fulfillment.domain.value_objects import RequestId, ResidentId


class EventType(str, Enum):
    REQUEST_SUBMITTED = "request_submitted"
    REQUEST_DECIDED = "request_decided"
    APPROVAL_REVOKED = "approval_revoked"
    PAYMENT_RECEIVED = "payment_received"
    ADMIN_AUDIT = "admin_audit"


class Audience(str, Enum):
    RESIDENT = "resident"
    ADMIN = "admin"


@dataclass(frozen=True)
class LifecycleEvent:
    event_type: EventType
    audience: Audience
    request_id: RequestId
    message: str
    resident_id: ResidentId | None = None
    data: Mapping[str, Any] = field(default_factory=dict)


def _subject(aggregate: RequestAggregate, line: LineItem) -> str:
    if line.document is not None:
        return line.document.document_type.value
    return line.item_name or "asset"


def _line_data(aggregate: RequestAggregate, line: LineItem) -> dict[str, Any]:
    data: dict[str, Any] = {"kind": aggregate.kind.value, "subject": _subject(aggregate, line)}
    if line.item_id is not None:
        data["item_id"] = str(line.item_id)
        data["quantity"] = line.quantity.value
    if line.request_date is not None:
        data["request_date"] = line.request_date.isoformat()
    return data


def submitted(aggregate: RequestAggregate) -> list[LifecycleEvent]:
    """One resident-facing event per line item and one admin-facing event."""
    events = [
        LifecycleEvent(
            event_type=EventType.REQUEST_SUBMITTED,
            audience=Audience.RESIDENT,
            request_id=aggregate.id,
            resident_id=aggregate.resident_id,
            message=f'Your request for "{_subject(aggregate, line)}" is pending approval.',
            data={**_line_data(aggregate, line), "status": aggregate.status.value},
        )
        for line in aggregate.line_items
    ]
    events.append(
        LifecycleEvent(
            event_type=EventType.REQUEST_SUBMITTED,
            audience=Audience.ADMIN,
            request_id=aggregate.id,
            resident_id=aggregate.resident_id,
            message=f"New {aggregate.kind.value} request awaiting review.",
            data={"kind": aggregate.kind.value, "line_items": len(aggregate.line_items)},
        )
    )
    return events


def decided(aggregate: RequestAggregate, actor_user_id: int | None) -> list[LifecycleEvent]:
    """One resident-facing event per line item plus a single audit event."""
    outcome = aggregate.status.value
    events = [
        LifecycleEvent(
            event_type=EventType.REQUEST_DECIDED,
            audience=Audience.RESIDENT,
            request_id=aggregate.id,
            resident_id=aggregate.resident_id,
            message=f'Your request for "{_subject(aggregate, line)}" has been {outcome}.',
            data={
                **_line_data(aggregate, line),
                "outcome": outcome,
                "admin_message": aggregate.admin_message,
            },
        )
        for line in aggregate.line_items
    ]
    events.append(audit(aggregate, f"decide:{outcome}", actor_user_id))
    return events


def revoked(aggregate: RequestAggregate, actor_user_id: int | None) -> list[LifecycleEvent]:
    return [
        LifecycleEvent(
            event_type=EventType.APPROVAL_REVOKED,
            audience=Audience.RESIDENT,
            request_id=aggregate.id,
            resident_id=aggregate.resident_id,
            message="The approval of your request has been revoked.",
            data={"kind": aggregate.kind.value, "admin_message": aggregate.admin_message},
        ),
        audit(aggregate, "revoke", actor_user_id),
    ]


def paid(aggregate: RequestAggregate, receipt: Receipt, actor_user_id: int | None) -> list[LifecycleEvent]:
    return [
        LifecycleEvent(
            event_type=EventType.PAYMENT_RECEIVED,
            audience=Audience.RESIDENT,
            request_id=aggregate.id,
            resident_id=aggregate.resident_id,
            message=f"Payment received. Receipt #{receipt.number}",
            data={
                "kind": aggregate.kind.value,
                "receipt_number": str(receipt.number),
                "amount": str(receipt.amount),
            },
        ),
        audit(aggregate, "pay", actor_user_id),
    ]


def audit(aggregate: RequestAggregate, action: str, actor_user_id: int | None) -> LifecycleEvent:
    return LifecycleEvent(
        event_type=EventType.ADMIN_AUDIT,
        audience=Audience.ADMIN,
        request_id=aggregate.id,
        resident_id=aggregate.resident_id,
        message=f"{aggregate.kind.value} request {action}",
        data={
            "action": action,
            "actor_user_id": actor_user_id,
            "status": aggregate.status.value,
            "payment_status": aggregate.payment_status.value,
        },
    )
