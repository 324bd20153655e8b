from fulfillment.handlers.views import (
    InventoryListView,
    PaymentView,
    ReceiptView,
    RequestDetailView,
    RequestListCreateView,
    RevokeView,
    StatusCountsView,
)

__all__ = [
    "InventoryListView",
    "PaymentView",
    "ReceiptView",
    "RequestDetailView",
    "RequestListCreateView",
    "RevokeView",
    "StatusCountsView",
]
