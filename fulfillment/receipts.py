"""Receipt rendering boundary.

Rendering only reads a paid request and its receipt; it runs after the
payment transaction has committed and never touches lifecycle state.
"""

from abc import ABC, abstractmethod

from django.template.loader import render_to_string

from fulfillment.domain import Receipt, RequestAggregate, Resident


class ReceiptRenderer(ABC):
    """Produces a printable artifact for a paid request."""

    content_type: str = "text/plain"

    @abstractmethod
    def render(self, aggregate: RequestAggregate, receipt: Receipt, resident: Resident | None) -> str:
        ...


class HtmlReceiptRenderer(ReceiptRenderer):
    content_type = "text/html; charset=utf-8"
    template_name = "fulfillment/receipt.html"

    def render(self, aggregate: RequestAggregate, receipt: Receipt, resident: Resident | None) -> str:
        lines = [
            {
                "description": line.item_name or (line.document.document_type.value if line.document else ""),
                "quantity": line.quantity.value,
                "request_date": line.request_date,
            }
            for line in aggregate.line_items
        ]
        return render_to_string(
            self.template_name,
            {
                "receipt_number": str(receipt.number),
                "issued_at": receipt.issued_at,
                "amount": str(receipt.amount),
                "kind": aggregate.kind.value,
                "request_id": str(aggregate.id),
                "resident_name": resident.full_name if resident else "",
                "lines": lines,
            },
        )
