"""Payment service: records the single payment of an approved request."""

from datetime import datetime
from typing import Callable, Mapping

import structlog
from django.utils import timezone

from fulfillment.domain import Actor, Receipt, RequestAggregate, RequestKind
from fulfillment.domain import events, lifecycle
from fulfillment.domain.errors import AlreadyPaidError, DomainError, ReceiptNotFoundError
from fulfillment.notifications import NotificationDispatcher, dispatch_safely
from fulfillment.services.access import ensure_access, parse_request_id
from fulfillment.stores.interfaces import ReceiptBook, RequestStore, UnitOfWork

logger = structlog.get_logger(__name__)

DEFAULT_PREFIXES: Mapping[RequestKind, str] = {
    RequestKind.ASSET: "AR",
    RequestKind.DOCUMENT: "DR",
}


class PaymentService:
    """Service for paying approved requests and reading their receipts."""

    def __init__(
        self,
        requests: RequestStore,
        receipts: ReceiptBook,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
        prefixes: Mapping[RequestKind, str] = DEFAULT_PREFIXES,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._requests = requests
        self._receipts = receipts
        self._uow = uow
        self._dispatcher = dispatcher
        self._prefixes = prefixes
        self._clock = clock

    def pay(
        self, actor: Actor, request_id: str, kind: RequestKind | None = None
    ) -> tuple[RequestAggregate, Receipt]:
        """Mark an approved request paid and issue its receipt.

        The guard checks, the receipt and the payment fields are committed
        together while the request row is locked. A concurrent duplicate
        call waits for the lock and then fails with AlreadyPaidError.

        Raises:
            InvalidIdentifierError: If the request_id is not a valid UUID.
            RequestNotFoundError: If the request does not exist or is not visible to the actor.
            NotApprovedError: If the request is not approved.
            AlreadyPaidError: If the request has already been paid.
            NoPaymentAmountError: If a document request carries no fee.
        """
        rid = parse_request_id(request_id)

        try:
            with self._uow.atomic():
                aggregate = ensure_access(actor, self._requests.get_for_update(rid), rid, kind)
                lifecycle.ensure_payable(aggregate)
                receipt = self._receipts.issue(
                    rid,
                    self._prefixes[aggregate.kind],
                    aggregate.compute_total(),
                    self._clock(),
                )
                paid = lifecycle.pay(aggregate, receipt)
                if not self._requests.save_payment(paid):
                    raise AlreadyPaidError(str(rid))
        except DomainError as exc:
            logger.info("payment_rejected", request_id=str(rid), code=exc.code.value)
            raise

        logger.info(
            "payment_recorded",
            request_id=str(rid),
            receipt_number=str(receipt.number),
            amount=str(receipt.amount),
        )
        dispatch_safely(self._dispatcher, events.paid(paid, receipt, actor.user_id))
        return paid, receipt

    def get_receipt(
        self, actor: Actor, request_id: str, kind: RequestKind | None = None
    ) -> tuple[RequestAggregate, Receipt]:
        """Return a paid request together with its receipt.

        Raises:
            ReceiptNotFoundError: If the request has not been paid.
        """
        rid = parse_request_id(request_id)
        aggregate = ensure_access(actor, self._requests.get(rid), rid, kind)
        receipt = self._receipts.get_for_request(rid)
        if receipt is None:
            raise ReceiptNotFoundError(str(rid))
        return aggregate, receipt
