from django.urls import path

from fulfillment.domain import RequestKind
from fulfillment.handlers import (
    InventoryListView,
    PaymentView,
    ReceiptView,
    RequestDetailView,
    RequestListCreateView,
    RevokeView,
    StatusCountsView,
)


def request_routes(prefix: str, kind: RequestKind) -> list:
    return [
        path(prefix, RequestListCreateView.as_view(kind=kind), name=f"{kind.value}-request-list"),
        path(
            f"{prefix}/status-counts",
            StatusCountsView.as_view(kind=kind),
            name=f"{kind.value}-request-status-counts",
        ),
        path(
            f"{prefix}/<str:request_id>",
            RequestDetailView.as_view(kind=kind),
            name=f"{kind.value}-request-detail",
        ),
        path(
            f"{prefix}/<str:request_id>/revoke",
            RevokeView.as_view(kind=kind),
            name=f"{kind.value}-request-revoke",
        ),
        path(
            f"{prefix}/<str:request_id>/pay",
            PaymentView.as_view(kind=kind),
            name=f"{kind.value}-request-pay",
        ),
        path(
            f"{prefix}/<str:request_id>/receipt",
            ReceiptView.as_view(kind=kind),
            name=f"{kind.value}-request-receipt",
        ),
    ]


urlpatterns = [
    path("assets", InventoryListView.as_view(), name="asset-list"),
    *request_routes("asset-requests", RequestKind.ASSET),
    *request_routes("document-requests", RequestKind.DOCUMENT),
]
