"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain error mapping to handlers.errors.exception_handler
- Never contain business logic

The same views serve asset and document requests; ``kind`` is bound in
urls.py through ``as_view(kind=...)``.
"""

from django.conf import settings
from django.http import HttpResponse
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.settings import api_settings
from rest_framework.views import APIView

from fulfillment.domain import Actor, RequestKind
from fulfillment.handlers.serializers import (
    AssetRequestCreateSerializer,
    DecisionSerializer,
    DocumentRequestCreateSerializer,
    InventoryItemSerializer,
    RequestSerializer,
    RevokeSerializer,
    StatusCountsSerializer,
)
from fulfillment.notifications import get_dispatcher
from fulfillment.receipts import HtmlReceiptRenderer
from fulfillment.services import AssetLineInput, FulfillmentService, PaymentService, RequestService
from fulfillment.stores.django_store import (
    DjangoInventoryLedger,
    DjangoReceiptBook,
    DjangoRequestStore,
    DjangoResidentStore,
    DjangoUnitOfWork,
)


def get_request_service() -> RequestService:
    return RequestService(
        requests=DjangoRequestStore(),
        residents=DjangoResidentStore(),
        ledger=DjangoInventoryLedger(),
        uow=DjangoUnitOfWork(),
        dispatcher=get_dispatcher(),
    )


def get_fulfillment_service() -> FulfillmentService:
    return FulfillmentService(
        requests=DjangoRequestStore(),
        ledger=DjangoInventoryLedger(),
        uow=DjangoUnitOfWork(),
        dispatcher=get_dispatcher(),
    )


def get_payment_service() -> PaymentService:
    return PaymentService(
        requests=DjangoRequestStore(),
        receipts=DjangoReceiptBook(),
        uow=DjangoUnitOfWork(),
        dispatcher=get_dispatcher(),
        prefixes={
            RequestKind.ASSET: settings.RECEIPT_PREFIX_ASSET,
            RequestKind.DOCUMENT: settings.RECEIPT_PREFIX_DOCUMENT,
        },
    )


def actor_for(request: Request) -> Actor:
    """Build the acting identity from the authenticated user."""
    user = request.user
    resident = DjangoResidentStore().find_by_user(user.pk)
    return Actor(
        user_id=user.pk,
        resident_id=resident.id if resident else None,
        is_admin=user.is_staff,
    )


class InventoryListView(APIView):
    """Handler for GET /api/assets"""

    def get(self, request: Request) -> Response:
        items = get_request_service().list_inventory()
        return Response(InventoryItemSerializer(items, many=True).data)


class RequestListCreateView(APIView):
    """Handler for GET/POST /api/{kind}-requests"""

    kind: RequestKind = RequestKind.ASSET
    pagination_class = api_settings.DEFAULT_PAGINATION_CLASS

    def get(self, request: Request) -> Response:
        requests = get_request_service().list_requests(actor_for(request), self.kind)
        paginator = self.pagination_class()
        page = paginator.paginate_queryset(requests, request, view=self)
        return paginator.get_paginated_response(RequestSerializer(page, many=True).data)

    def post(self, request: Request) -> Response:
        service = get_request_service()
        actor = actor_for(request)

        if self.kind is RequestKind.ASSET:
            serializer = AssetRequestCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            lines = [
                AssetLineInput(
                    asset_id=line["asset_id"],
                    quantity=line["quantity"],
                    request_date=line["request_date"],
                )
                for line in serializer.validated_data["items"]
            ]
            aggregate = service.submit_asset_request(actor, lines)
        else:
            serializer = DocumentRequestCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            data = serializer.validated_data
            aggregate = service.submit_document_request(
                actor, data["document_type"], data["fields"], data["copies"]
            )

        return Response(RequestSerializer(aggregate).data, status=status.HTTP_201_CREATED)


class StatusCountsView(APIView):
    """Handler for GET /api/{kind}-requests/status-counts"""

    kind: RequestKind = RequestKind.ASSET

    def get(self, request: Request) -> Response:
        counts = get_request_service().get_status_counts(actor_for(request), self.kind)
        return Response(StatusCountsSerializer(counts).data)


class RequestDetailView(APIView):
    """Handler for GET/PATCH/DELETE /api/{kind}-requests/{request_id}

    PATCH records the administrator's decision; DELETE withdraws a pending
    request.
    """

    kind: RequestKind = RequestKind.ASSET

    def get(self, request: Request, request_id: str) -> Response:
        aggregate = get_request_service().get_request(actor_for(request), request_id, self.kind)
        return Response(RequestSerializer(aggregate).data)

    def patch(self, request: Request, request_id: str) -> Response:
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        aggregate = get_fulfillment_service().decide(
            actor_for(request),
            request_id,
            data["status"],
            admin_message=data.get("admin_message"),
            fee=data.get("fee"),
            kind=self.kind,
        )
        return Response(RequestSerializer(aggregate).data)

    def delete(self, request: Request, request_id: str) -> Response:
        get_request_service().withdraw(actor_for(request), request_id, self.kind)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RevokeView(APIView):
    """Handler for POST /api/{kind}-requests/{request_id}/revoke"""

    kind: RequestKind = RequestKind.ASSET

    def post(self, request: Request, request_id: str) -> Response:
        serializer = RevokeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        aggregate = get_fulfillment_service().revoke(
            actor_for(request),
            request_id,
            admin_message=serializer.validated_data.get("admin_message"),
            kind=self.kind,
        )
        return Response(RequestSerializer(aggregate).data)


class PaymentView(APIView):
    """Handler for POST /api/{kind}-requests/{request_id}/pay"""

    kind: RequestKind = RequestKind.ASSET

    def post(self, request: Request, request_id: str) -> Response:
        aggregate, receipt = get_payment_service().pay(actor_for(request), request_id, self.kind)
        return Response(
            {
                "message": "Payment recorded",
                "receipt_number": str(receipt.number),
                "amount_paid": str(receipt.amount),
                "request": RequestSerializer(aggregate).data,
            }
        )


class ReceiptView(APIView):
    """Handler for GET /api/{kind}-requests/{request_id}/receipt"""

    kind: RequestKind = RequestKind.ASSET
    receipt_renderer = HtmlReceiptRenderer()

    def get(self, request: Request, request_id: str) -> HttpResponse:
        aggregate, receipt = get_payment_service().get_receipt(actor_for(request), request_id, self.kind)
        resident = DjangoResidentStore().find_by_id(aggregate.resident_id)
        body = self.receipt_renderer.render(aggregate, receipt, resident)
        return HttpResponse(body, content_type=self.receipt_renderer.content_type)
