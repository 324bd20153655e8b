from fulfillment.stores.interfaces import (
    InventoryLedger,
    ReceiptBook,
    RequestStore,
    ResidentStore,
    UnitOfWork,
)

__all__ = [
    "InventoryLedger",
    "ReceiptBook",
    "RequestStore",
    "ResidentStore",
    "UnitOfWork",
]
