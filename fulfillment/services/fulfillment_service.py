"""Fulfillment service: administrator decisions on pending requests.

An approval reserves stock for every asset line in stored order. The first
reservation that fails aborts the whole decision: the enclosing transaction
rolls back the reservations already made and the request stays pending.
"""

from datetime import datetime
from typing import Any, Callable

import structlog
from django.utils import timezone

from fulfillment.domain import Actor, Outcome, RequestAggregate, RequestKind
from fulfillment.domain import events, lifecycle
from fulfillment.domain.errors import (
    InsufficientStockError,
    InvalidTransitionError,
    RequestNotFoundError,
    ValidationError,
)
from fulfillment.notifications import NotificationDispatcher, dispatch_safely
from fulfillment.services.access import ensure_access, parse_money, parse_request_id, require_admin
from fulfillment.stores.interfaces import InventoryLedger, RequestStore, UnitOfWork

logger = structlog.get_logger(__name__)


def parse_outcome(value: Any) -> Outcome:
    if isinstance(value, Outcome):
        return value
    try:
        return Outcome(str(value).lower())
    except ValueError:
        raise ValidationError("Status must be 'approved' or 'denied'", field_name="status") from None


class FulfillmentService:
    """Service for the decide and revoke transitions."""

    def __init__(
        self,
        requests: RequestStore,
        ledger: InventoryLedger,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._requests = requests
        self._ledger = ledger
        self._uow = uow
        self._dispatcher = dispatcher
        self._clock = clock

    def decide(
        self,
        actor: Actor,
        request_id: str,
        outcome: Any,
        admin_message: str | None = None,
        fee: Any = None,
        kind: RequestKind | None = None,
    ) -> RequestAggregate:
        """Approve or deny a pending request.

        Raises:
            PermissionDeniedError: If the actor is not an administrator.
            InvalidIdentifierError: If the request_id is not a valid UUID.
            ValidationError: If the outcome or fee is malformed.
            RequestNotFoundError: If the request does not exist.
            InvalidTransitionError: If the request has already been decided.
            InsufficientStockError: If any asset line cannot be reserved.
        """
        require_admin(actor)
        rid = parse_request_id(request_id)
        decision = parse_outcome(outcome)
        fee_amount = parse_money(fee, "fee")

        try:
            with self._uow.atomic():
                aggregate = ensure_access(actor, self._requests.get_for_update(rid), rid, kind)
                decided = lifecycle.decide(aggregate, decision, self._clock(), admin_message, fee_amount)
                if decision is Outcome.APPROVED:
                    for item_id, quantity in lifecycle.reservations(aggregate):
                        self._ledger.reserve(item_id, quantity.value)
                if not self._requests.save_decision(decided):
                    current = self._requests.get(rid)
                    if current is None:
                        raise RequestNotFoundError(str(rid))
                    raise InvalidTransitionError(str(rid), current.status.value, "decide")
        except InsufficientStockError as exc:
            logger.info(
                "approval_rejected",
                request_id=str(rid),
                item_id=exc.item_id,
                requested=exc.requested,
                available=exc.available,
            )
            raise

        logger.info(
            "request_decided",
            request_id=str(rid),
            kind=decided.kind.value,
            outcome=decided.status.value,
            admin_user_id=actor.user_id,
        )
        dispatch_safely(self._dispatcher, events.decided(decided, actor.user_id))
        return decided

    def revoke(
        self,
        actor: Actor,
        request_id: str,
        admin_message: str | None = None,
        kind: RequestKind | None = None,
    ) -> RequestAggregate:
        """Deny an approved, unpaid request and return its reserved stock.

        Raises:
            PermissionDeniedError: If the actor is not an administrator.
            InvalidIdentifierError: If the request_id is not a valid UUID.
            RequestNotFoundError: If the request does not exist.
            InvalidTransitionError: If the request is not approved or already paid.
        """
        require_admin(actor)
        rid = parse_request_id(request_id)

        with self._uow.atomic():
            aggregate = ensure_access(actor, self._requests.get_for_update(rid), rid, kind)
            revoked = lifecycle.revoke(aggregate, self._clock(), admin_message)
            for item_id, quantity in lifecycle.reservations(aggregate):
                self._ledger.restore(item_id, quantity.value)
            if not self._requests.save_revocation(revoked):
                raise InvalidTransitionError(str(rid), aggregate.status.value, "revoke")

        logger.info("approval_revoked", request_id=str(rid), admin_user_id=actor.user_id)
        dispatch_safely(self._dispatcher, events.revoked(revoked, actor.user_id))
        return revoked
