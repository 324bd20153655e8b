"""Request service: submission, withdrawal and read projections.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Mapping, Sequence

import structlog
from django.utils import timezone

from fulfillment import cache
from fulfillment.domain import (
    Actor,
    InventoryItem,
    InventoryItemId,
    LineItem,
    Money,
    PaymentStatus,
    Quantity,
    RequestAggregate,
    RequestId,
    RequestKind,
    RequestStatus,
    ResidentId,
    StatusCounts,
)
from fulfillment.domain import events, lifecycle
from fulfillment.domain.documents import parse_document_fields
from fulfillment.domain.errors import (
    AlreadyDecidedError,
    InventoryItemNotFoundError,
    RequestNotFoundError,
    ResidentNotFoundError,
    ValidationError,
)
from fulfillment.notifications import NotificationDispatcher, dispatch_safely
from fulfillment.services.access import ensure_access, parse_id, parse_request_id
from fulfillment.stores.interfaces import InventoryLedger, RequestStore, ResidentStore, UnitOfWork

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AssetLineInput:
    """One asset line as received from the caller, before validation."""

    asset_id: str
    quantity: Any
    request_date: date | None


class RequestService:
    """Service for creating, reading and withdrawing requests."""

    def __init__(
        self,
        requests: RequestStore,
        residents: ResidentStore,
        ledger: InventoryLedger,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._requests = requests
        self._residents = residents
        self._ledger = ledger
        self._uow = uow
        self._dispatcher = dispatcher
        self._clock = clock

    def _requester(self, actor: Actor) -> ResidentId:
        if actor.resident_id is None:
            raise ResidentNotFoundError()
        if self._residents.find_by_id(actor.resident_id) is None:
            raise ResidentNotFoundError(str(actor.resident_id))
        return actor.resident_id

    def _new_aggregate(
        self, kind: RequestKind, resident_id: ResidentId, line_items: tuple[LineItem, ...]
    ) -> RequestAggregate:
        return RequestAggregate(
            id=RequestId(uuid.uuid4()),
            kind=kind,
            resident_id=resident_id,
            line_items=line_items,
            status=RequestStatus.PENDING,
            payment_status=PaymentStatus.UNPAID,
            created_at=self._clock(),
        )

    def _asset_line(self, position: int, line: AssetLineInput) -> LineItem:
        field = f"items[{position}]"
        item_id = parse_id(InventoryItemId.from_string, line.asset_id, "asset")
        try:
            quantity = Quantity(line.quantity)
        except ValueError:
            raise ValidationError(
                "Quantity must be a positive integer", field_name=f"{field}.quantity"
            ) from None
        if line.request_date is None:
            raise ValidationError("Request date is required", field_name=f"{field}.request_date")
        item = self._ledger.get_item(item_id)
        if item is None:
            raise InventoryItemNotFoundError(str(item_id))
        return LineItem(
            position=position,
            quantity=quantity,
            item_id=item.id,
            item_name=item.name,
            unit_price=item.unit_price,
            request_date=line.request_date,
        )

    def submit_asset_request(self, actor: Actor, items: Sequence[AssetLineInput]) -> RequestAggregate:
        """Create a pending asset request.

        Stock is not checked here; it is reserved when the request is approved.

        Raises:
            ResidentNotFoundError: If the actor has no resident profile.
            ValidationError: If there are no items or a quantity/date is invalid.
            InvalidIdentifierError: If an asset ID is not a valid UUID.
            InventoryItemNotFoundError: If an asset does not exist.
        """
        resident_id = self._requester(actor)
        if not items:
            raise ValidationError("At least one item is required", field_name="items")
        line_items = tuple(self._asset_line(position, line) for position, line in enumerate(items))

        aggregate = self._requests.add(
            self._new_aggregate(RequestKind.ASSET, resident_id, line_items)
        )
        logger.info(
            "request_submitted",
            request_id=str(aggregate.id),
            kind=aggregate.kind.value,
            resident_id=str(resident_id),
            line_items=len(line_items),
        )
        dispatch_safely(self._dispatcher, events.submitted(aggregate))
        return aggregate

    def submit_document_request(
        self,
        actor: Actor,
        document_type: str,
        fields: Mapping[str, Any] | None,
        copies: Any = 1,
    ) -> RequestAggregate:
        """Create a pending document request.

        Raises:
            ResidentNotFoundError: If the actor has no resident profile.
            ValidationError: If the document type or its fields are invalid.
        """
        resident_id = self._requester(actor)
        document = parse_document_fields(document_type, fields)
        try:
            quantity = Quantity(copies)
        except ValueError:
            raise ValidationError("Copies must be a positive integer", field_name="copies") from None

        line = LineItem(position=0, quantity=quantity, document=document)
        aggregate = self._requests.add(
            self._new_aggregate(RequestKind.DOCUMENT, resident_id, (line,))
        )
        logger.info(
            "request_submitted",
            request_id=str(aggregate.id),
            kind=aggregate.kind.value,
            resident_id=str(resident_id),
            document_type=document.document_type.value,
        )
        dispatch_safely(self._dispatcher, events.submitted(aggregate))
        return aggregate

    def withdraw(self, actor: Actor, request_id: str, kind: RequestKind | None = None) -> None:
        """Delete a request that has not been decided yet.

        The request row stays locked from the status check to the delete, so
        a decision cannot land in between.

        Raises:
            InvalidIdentifierError: If the request_id is not a valid UUID.
            RequestNotFoundError: If the request does not exist or is not visible to the actor.
            AlreadyDecidedError: If the request is no longer pending.
        """
        rid = parse_request_id(request_id)

        with self._uow.atomic():
            aggregate = ensure_access(actor, self._requests.get_for_update(rid), rid, kind)
            lifecycle.ensure_withdrawable(aggregate)
            if not self._requests.delete_pending(rid):
                current = self._requests.get(rid)
                if current is None:
                    raise RequestNotFoundError(str(rid))
                raise AlreadyDecidedError(str(rid), current.status.value)

        logger.info("request_withdrawn", request_id=str(rid), kind=aggregate.kind.value)
        dispatch_safely(self._dispatcher, [events.audit(aggregate, "withdraw", actor.user_id)])

    def get_request(self, actor: Actor, request_id: str, kind: RequestKind | None = None) -> RequestAggregate:
        """Return a request visible to the actor.

        Raises:
            InvalidIdentifierError: If the request_id is not a valid UUID.
            RequestNotFoundError: If the request does not exist or is not visible to the actor.
        """
        rid = parse_request_id(request_id)
        return ensure_access(actor, self._requests.get(rid), rid, kind)

    def list_requests(self, actor: Actor, kind: RequestKind) -> list[RequestAggregate]:
        """Return all requests for admins, or the actor's own requests."""
        if actor.is_admin:
            return self._requests.list(kind)
        if actor.resident_id is None:
            return []
        return self._requests.list(kind, actor.resident_id)

    def compute_total(self, actor: Actor, request_id: str, kind: RequestKind | None = None) -> Money:
        """Live total while unpaid, the frozen amount once paid."""
        return self.get_request(actor, request_id, kind).compute_total()

    def list_inventory(self) -> list[InventoryItem]:
        return self._ledger.list_items()

    def get_status_counts(self, actor: Actor, kind: RequestKind) -> StatusCounts:
        """Return per-status counts, for everything (admins) or the actor's own requests."""
        if actor.is_admin:
            resident_id = None
        elif actor.resident_id is None:
            return StatusCounts()
        else:
            resident_id = actor.resident_id

        scope = resident_id.value if resident_id else None
        counts = cache.get_status_counts(kind.value, scope)
        if counts is None:
            counts = self._requests.status_counts(kind, resident_id)
            cache.set_status_counts(kind.value, scope, counts)
        return counts
