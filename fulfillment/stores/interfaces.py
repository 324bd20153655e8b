"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Writes to stock and to
request lifecycle columns go through these interfaces only.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime

from fulfillment.domain import (
    InventoryItem,
    InventoryItemId,
    Money,
    Receipt,
    RequestAggregate,
    RequestId,
    RequestKind,
    Resident,
    ResidentId,
    StatusCounts,
)


class UnitOfWork(ABC):
    """Transaction boundary for one lifecycle transition."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Return a context manager that commits on success and rolls back on error."""
        ...


class ResidentStore(ABC):
    """Read access to resident profiles."""

    @abstractmethod
    def find_by_id(self, resident_id: ResidentId) -> Resident | None:
        """Return a resident by ID, or None if not found."""
        ...

    @abstractmethod
    def find_by_user(self, user_id: int) -> Resident | None:
        """Return the resident profile linked to a user account, or None."""
        ...


class InventoryLedger(ABC):
    """The only mutator of inventory stock counts."""

    @abstractmethod
    def get_item(self, item_id: InventoryItemId) -> InventoryItem | None:
        """Return an inventory item by ID, or None if not found."""
        ...

    @abstractmethod
    def list_items(self) -> list[InventoryItem]:
        """Return all inventory items ordered by name."""
        ...

    @abstractmethod
    def reserve(self, item_id: InventoryItemId, quantity: int) -> None:
        """Atomically decrement available stock by ``quantity``.

        Raises:
            InsufficientStockError: If fewer than ``quantity`` units are available.
            InventoryItemNotFoundError: If the item does not exist.
        """
        ...

    @abstractmethod
    def restore(self, item_id: InventoryItemId, quantity: int) -> None:
        """Return ``quantity`` units to available stock."""
        ...


class RequestStore(ABC):
    """Interface for request aggregate persistence."""

    @abstractmethod
    def add(self, aggregate: RequestAggregate) -> RequestAggregate:
        """Persist a new pending aggregate with its line items."""
        ...

    @abstractmethod
    def get(self, request_id: RequestId) -> RequestAggregate | None:
        """Return an aggregate by ID, or None if not found."""
        ...

    @abstractmethod
    def get_for_update(self, request_id: RequestId) -> RequestAggregate | None:
        """Return an aggregate and lock its row until the transaction ends."""
        ...

    @abstractmethod
    def list(self, kind: RequestKind, resident_id: ResidentId | None = None) -> list[RequestAggregate]:
        """Return aggregates of ``kind``, newest first, optionally for one resident."""
        ...

    @abstractmethod
    def save_decision(self, aggregate: RequestAggregate) -> bool:
        """Persist a decision if the stored row is still pending.

        Returns False when another transition got there first.
        """
        ...

    @abstractmethod
    def save_revocation(self, aggregate: RequestAggregate) -> bool:
        """Persist a revocation if the stored row is still approved and unpaid."""
        ...

    @abstractmethod
    def save_payment(self, aggregate: RequestAggregate) -> bool:
        """Persist payment fields if the stored row is still approved and unpaid."""
        ...

    @abstractmethod
    def delete_pending(self, request_id: RequestId) -> bool:
        """Delete the aggregate if it is still pending. Returns whether a row was deleted."""
        ...

    @abstractmethod
    def status_counts(self, kind: RequestKind, resident_id: ResidentId | None = None) -> StatusCounts:
        """Return per-status counts, optionally scoped to one resident."""
        ...


class ReceiptBook(ABC):
    """Issues and reads receipts."""

    @abstractmethod
    def issue(self, request_id: RequestId, prefix: str, amount: Money, issued_at: datetime) -> Receipt:
        """Allocate the next receipt number and record the receipt.

        Must run inside the payment transaction.

        Raises:
            AlreadyPaidError: If a receipt already exists for the request.
        """
        ...

    @abstractmethod
    def get_for_request(self, request_id: RequestId) -> Receipt | None:
        """Return the receipt of a request, or None if it is unpaid."""
        ...
