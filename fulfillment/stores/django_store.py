"""Django ORM implementation of the fulfillment stores."""

from contextlib import AbstractContextManager
from datetime import datetime

import structlog
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q
from django.utils import timezone

from fulfillment import models as orm
from fulfillment.domain import (
    InventoryItem,
    InventoryItemId,
    LineItem,
    Money,
    PaymentStatus,
    Quantity,
    Receipt,
    ReceiptNumber,
    RequestAggregate,
    RequestId,
    RequestKind,
    RequestStatus,
    Resident,
    ResidentId,
    StatusCounts,
    StockLevel,
)
from fulfillment.domain.documents import DocumentFields
from fulfillment.domain.errors import (
    AlreadyPaidError,
    InsufficientStockError,
    InventoryItemNotFoundError,
)
from fulfillment.signals import request_state_changed
from fulfillment.stores.interfaces import (
    InventoryLedger,
    ReceiptBook,
    RequestStore,
    ResidentStore,
    UnitOfWork,
)

logger = structlog.get_logger(__name__)


class DjangoUnitOfWork(UnitOfWork):
    def atomic(self) -> AbstractContextManager:
        return transaction.atomic()


def _to_resident(row: orm.Resident) -> Resident:
    return Resident(
        id=ResidentId(row.id),
        user_id=row.user_id,
        first_name=row.first_name,
        last_name=row.last_name,
    )


def _to_item(row: orm.InventoryItem) -> InventoryItem:
    return InventoryItem(
        id=InventoryItemId(row.id),
        name=row.name,
        unit_price=Money(row.unit_price),
        available=StockLevel(row.available_quantity),
    )


def _to_line(row: orm.RequestLineItem, document_type: str) -> LineItem:
    item = row.inventory_item
    document = None
    if document_type:
        document = DocumentFields.from_json(document_type, row.document_fields or {})
    return LineItem(
        position=row.position,
        quantity=Quantity(row.quantity),
        item_id=InventoryItemId(item.id) if item else None,
        item_name=item.name if item else None,
        unit_price=Money(item.unit_price) if item else None,
        request_date=row.request_date,
        document=document,
    )


def _to_aggregate(row: orm.ServiceRequest) -> RequestAggregate:
    receipt = getattr(row, "receipt", None)
    return RequestAggregate(
        id=RequestId(row.id),
        kind=RequestKind(row.kind),
        resident_id=ResidentId(row.resident_id),
        line_items=tuple(_to_line(line, row.document_type) for line in row.line_items.all()),
        status=RequestStatus(row.status),
        payment_status=PaymentStatus(row.payment_status),
        created_at=row.created_at,
        admin_message=row.admin_message,
        fee=Money(row.fee) if row.fee is not None else None,
        amount_paid=Money(row.amount_paid) if row.amount_paid is not None else None,
        receipt_number=ReceiptNumber.parse(receipt.number) if receipt else None,
        decided_at=row.decided_at,
        paid_at=row.paid_at,
    )


def _to_receipt(row: orm.Receipt) -> Receipt:
    return Receipt(
        number=ReceiptNumber.parse(row.number),
        request_id=RequestId(row.request_id),
        amount=Money(row.amount),
        issued_at=row.issued_at,
    )


def _state_changed(aggregate: RequestAggregate) -> None:
    transaction.on_commit(
        lambda: request_state_changed.send(
            sender=orm.ServiceRequest,
            kind=aggregate.kind.value,
            resident_id=aggregate.resident_id.value,
        )
    )


class DjangoResidentStore(ResidentStore):
    def find_by_id(self, resident_id: ResidentId) -> Resident | None:
        row = orm.Resident.objects.filter(pk=resident_id.value).first()
        return _to_resident(row) if row else None

    def find_by_user(self, user_id: int) -> Resident | None:
        row = orm.Resident.objects.filter(user_id=user_id).first()
        return _to_resident(row) if row else None


class DjangoInventoryLedger(InventoryLedger):
    """Stock ledger backed by conditional UPDATE statements.

    ``reserve`` checks and decrements in one statement, so two transactions
    can never both take the last unit, with or without row locks.
    """

    def get_item(self, item_id: InventoryItemId) -> InventoryItem | None:
        row = orm.InventoryItem.objects.filter(pk=item_id.value).first()
        return _to_item(row) if row else None

    def list_items(self) -> list[InventoryItem]:
        return [_to_item(row) for row in orm.InventoryItem.objects.all()]

    def reserve(self, item_id: InventoryItemId, quantity: int) -> None:
        updated = orm.InventoryItem.objects.filter(
            pk=item_id.value,
            available_quantity__gte=quantity,
        ).update(
            available_quantity=F("available_quantity") - quantity,
            updated_at=timezone.now(),
        )
        if updated:
            logger.info("stock_reserved", item_id=str(item_id), quantity=quantity)
            return

        row = orm.InventoryItem.objects.filter(pk=item_id.value).first()
        if row is None:
            raise InventoryItemNotFoundError(str(item_id))
        raise InsufficientStockError(
            item_id=str(item_id),
            item_name=row.name,
            requested=quantity,
            available=row.available_quantity,
        )

    def restore(self, item_id: InventoryItemId, quantity: int) -> None:
        updated = orm.InventoryItem.objects.filter(pk=item_id.value).update(
            available_quantity=F("available_quantity") + quantity,
            updated_at=timezone.now(),
        )
        if not updated:
            raise InventoryItemNotFoundError(str(item_id))
        logger.info("stock_restored", item_id=str(item_id), quantity=quantity)


class DjangoRequestStore(RequestStore):
    """PostgreSQL/SQLite-backed request store using Django ORM."""

    def _queryset(self):
        return orm.ServiceRequest.objects.select_related("receipt").prefetch_related(
            "line_items__inventory_item"
        )

    def add(self, aggregate: RequestAggregate) -> RequestAggregate:
        document = aggregate.document
        with transaction.atomic():
            row = orm.ServiceRequest.objects.create(
                id=aggregate.id.value,
                kind=aggregate.kind.value,
                resident_id=aggregate.resident_id.value,
                status=aggregate.status.value,
                payment_status=aggregate.payment_status.value,
                document_type=document.document_type.value if document else "",
            )
            orm.RequestLineItem.objects.bulk_create(
                [
                    orm.RequestLineItem(
                        request=row,
                        position=line.position,
                        inventory_item_id=line.item_id.value if line.item_id else None,
                        quantity=line.quantity.value,
                        request_date=line.request_date,
                        document_fields=line.document.as_json() if line.document else {},
                    )
                    for line in aggregate.line_items
                ]
            )
        return self.get(aggregate.id)

    def get(self, request_id: RequestId) -> RequestAggregate | None:
        row = self._queryset().filter(pk=request_id.value).first()
        return _to_aggregate(row) if row else None

    def get_for_update(self, request_id: RequestId) -> RequestAggregate | None:
        locked = (
            orm.ServiceRequest.objects.select_for_update()
            .filter(pk=request_id.value)
            .values_list("pk", flat=True)
            .first()
        )
        if locked is None:
            return None
        return self.get(request_id)

    def list(self, kind: RequestKind, resident_id: ResidentId | None = None) -> list[RequestAggregate]:
        qs = self._queryset().filter(kind=kind.value)
        if resident_id is not None:
            qs = qs.filter(resident_id=resident_id.value)
        return [_to_aggregate(row) for row in qs]

    def save_decision(self, aggregate: RequestAggregate) -> bool:
        updated = orm.ServiceRequest.objects.filter(
            pk=aggregate.id.value,
            status=RequestStatus.PENDING.value,
        ).update(
            status=aggregate.status.value,
            admin_message=aggregate.admin_message,
            decided_at=aggregate.decided_at,
            fee=aggregate.fee.amount if aggregate.fee else None,
            updated_at=timezone.now(),
        )
        if updated:
            _state_changed(aggregate)
        return bool(updated)

    def save_revocation(self, aggregate: RequestAggregate) -> bool:
        updated = orm.ServiceRequest.objects.filter(
            pk=aggregate.id.value,
            status=RequestStatus.APPROVED.value,
            payment_status=PaymentStatus.UNPAID.value,
        ).update(
            status=aggregate.status.value,
            admin_message=aggregate.admin_message,
            decided_at=aggregate.decided_at,
            updated_at=timezone.now(),
        )
        if updated:
            _state_changed(aggregate)
        return bool(updated)

    def save_payment(self, aggregate: RequestAggregate) -> bool:
        updated = orm.ServiceRequest.objects.filter(
            pk=aggregate.id.value,
            status=RequestStatus.APPROVED.value,
            payment_status=PaymentStatus.UNPAID.value,
        ).update(
            payment_status=aggregate.payment_status.value,
            amount_paid=aggregate.amount_paid.amount if aggregate.amount_paid else None,
            paid_at=aggregate.paid_at,
            completed=aggregate.completed,
            updated_at=timezone.now(),
        )
        if updated:
            _state_changed(aggregate)
        return bool(updated)

    def delete_pending(self, request_id: RequestId) -> bool:
        # Model.delete() so post_delete receivers run.
        with transaction.atomic():
            row = (
                orm.ServiceRequest.objects.select_for_update()
                .filter(pk=request_id.value, status=RequestStatus.PENDING.value)
                .first()
            )
            if row is None:
                return False
            row.delete()
        return True

    def status_counts(self, kind: RequestKind, resident_id: ResidentId | None = None) -> StatusCounts:
        qs = orm.ServiceRequest.objects.filter(kind=kind.value)
        if resident_id is not None:
            qs = qs.filter(resident_id=resident_id.value)
        counts = qs.aggregate(
            approved=Count("pk", filter=Q(status=RequestStatus.APPROVED.value)),
            pending=Count("pk", filter=Q(status=RequestStatus.PENDING.value)),
            denied=Count("pk", filter=Q(status=RequestStatus.DENIED.value)),
            paid=Count("pk", filter=Q(payment_status=PaymentStatus.PAID.value)),
            total=Count("pk"),
        )
        return StatusCounts(**counts)


class DjangoReceiptBook(ReceiptBook):
    """Receipts numbered from a per-prefix counter row.

    The counter row is locked and incremented inside the payment transaction,
    so concurrent payments serialize on it and never share an ordinal.
    """

    def _next_ordinal(self, prefix: str) -> int:
        orm.ReceiptSequence.objects.get_or_create(prefix=prefix)
        sequence = orm.ReceiptSequence.objects.select_for_update().get(prefix=prefix)
        sequence.last_value = F("last_value") + 1
        sequence.save(update_fields=["last_value"])
        sequence.refresh_from_db(fields=["last_value"])
        return sequence.last_value

    def issue(self, request_id: RequestId, prefix: str, amount: Money, issued_at: datetime) -> Receipt:
        number = ReceiptNumber(
            prefix=prefix,
            issued_on=timezone.localdate(issued_at),
            ordinal=self._next_ordinal(prefix),
        )
        try:
            with transaction.atomic():
                row = orm.Receipt.objects.create(
                    number=str(number),
                    request_id=request_id.value,
                    amount=amount.amount,
                    issued_at=issued_at,
                )
        except IntegrityError:
            existing = orm.Receipt.objects.filter(request_id=request_id.value).first()
            raise AlreadyPaidError(str(request_id), existing.number if existing else None) from None
        return _to_receipt(row)

    def get_for_request(self, request_id: RequestId) -> Receipt | None:
        row = orm.Receipt.objects.filter(request_id=request_id.value).first()
        return _to_receipt(row) if row else None
