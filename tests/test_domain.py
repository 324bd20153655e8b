"""Unit tests for domain primitives and lifecycle rules.

These test invariants that must hold at construction time and the
transition guards. No database access.
Run with: pytest tests/test_domain.py -v
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from fulfillment.domain import (
    DocumentType,
    InventoryItemId,
    LineItem,
    Money,
    Outcome,
    PaymentStatus,
    Quantity,
    Receipt,
    ReceiptNumber,
    RequestAggregate,
    RequestId,
    RequestKind,
    RequestStatus,
    ResidentId,
    StockLevel,
)
from fulfillment.domain import lifecycle
from fulfillment.domain.documents import DocumentFields, parse_document_fields
from fulfillment.domain.errors import (
    AlreadyDecidedError,
    AlreadyPaidError,
    ErrorCode,
    InsufficientStockError,
    InvalidTransitionError,
    NoPaymentAmountError,
    NotApprovedError,
    ValidationError,
)

NOW = datetime(2024, 3, 15, 8, 0, tzinfo=timezone.utc)


def asset_aggregate(*lines, status=RequestStatus.PENDING, payment_status=PaymentStatus.UNPAID, **kwargs):
    return RequestAggregate(
        id=RequestId(uuid.uuid4()),
        kind=RequestKind.ASSET,
        resident_id=ResidentId(uuid.uuid4()),
        line_items=tuple(lines),
        status=status,
        payment_status=payment_status,
        created_at=NOW,
        **kwargs,
    )


def asset_line(position=0, quantity=1, price="100.00"):
    return LineItem(
        position=position,
        quantity=Quantity(quantity),
        item_id=InventoryItemId(uuid.uuid4()),
        item_name="Tent",
        unit_price=Money(Decimal(price)),
        request_date=date(2024, 4, 1),
    )


def document_aggregate(copies=1, fee=None, status=RequestStatus.PENDING):
    document = parse_document_fields("Brgy Clearance", {"purpose": "Employment"})
    return RequestAggregate(
        id=RequestId(uuid.uuid4()),
        kind=RequestKind.DOCUMENT,
        resident_id=ResidentId(uuid.uuid4()),
        line_items=(LineItem(position=0, quantity=Quantity(copies), document=document),),
        status=status,
        payment_status=PaymentStatus.UNPAID,
        created_at=NOW,
        fee=fee,
    )


def receipt_for(aggregate, amount):
    return Receipt(
        number=ReceiptNumber("AR", date(2024, 3, 15), 1),
        request_id=aggregate.id,
        amount=amount,
        issued_at=NOW,
    )


class TestMoney:
    """Tests for Money value object."""

    def test_money_accepts_positive_amount(self):
        assert Money(Decimal("150.5")).amount == Decimal("150.50")

    def test_money_accepts_zero(self):
        assert Money.zero().amount == Decimal("0.00")
        assert not Money.zero().is_positive()

    def test_money_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            Money(Decimal("-1"))

    def test_money_str_format(self):
        assert str(Money(Decimal("200"))) == "200.00"

    def test_money_times_and_add(self):
        total = Money(Decimal("100")).times(2) + Money(Decimal("0.50"))
        assert total == Money(Decimal("200.50"))


class TestQuantity:
    """Tests for Quantity value object."""

    def test_quantity_accepts_positive_integer(self):
        assert Quantity(3).value == 3

    @pytest.mark.parametrize("value", [0, -1, 1.5, "2", True])
    def test_quantity_rejects_invalid_values(self, value):
        with pytest.raises(ValueError):
            Quantity(value)


class TestStockLevel:
    """Tests for StockLevel value object."""

    def test_stock_level_accepts_zero(self):
        assert StockLevel(0).value == 0

    def test_stock_level_rejects_negative(self):
        with pytest.raises(ValueError):
            StockLevel(-1)


class TestIdentifiers:
    """Tests for identifier value objects."""

    def test_from_string_valid_uuid(self):
        raw = uuid.uuid4()
        assert RequestId.from_string(str(raw)).value == raw

    def test_from_string_invalid_uuid(self):
        with pytest.raises(ValueError):
            RequestId.from_string("not-a-uuid")


class TestReceiptNumber:
    """Tests for ReceiptNumber formatting and parsing."""

    def test_str_format(self):
        number = ReceiptNumber("AR", date(2024, 3, 15), 42)
        assert str(number) == "AR-20240315-000042"

    def test_parse_reads_back_formatted_number(self):
        number = ReceiptNumber.parse("DR-20240101-001234")
        assert number == ReceiptNumber("DR", date(2024, 1, 1), 1234)

    def test_ordinal_may_exceed_six_digits(self):
        assert str(ReceiptNumber("AR", date(2024, 1, 1), 1234567)) == "AR-20240101-1234567"

    @pytest.mark.parametrize("value", ["ar-20240101-000001", "AR-2024-000001", "AR20240101000001"])
    def test_parse_rejects_malformed_numbers(self, value):
        with pytest.raises(ValueError):
            ReceiptNumber.parse(value)

    def test_rejects_lowercase_prefix(self):
        with pytest.raises(ValueError):
            ReceiptNumber("ar", date(2024, 1, 1), 1)


class TestDocumentFields:
    """Tests for document type validation."""

    def test_clearance_requires_purpose(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_document_fields("Brgy Clearance", {})
        assert exc_info.value.field_name == "fields.purpose"

    def test_unknown_document_type_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_document_fields("Cedula", {"purpose": "x"})
        assert exc_info.value.field_name == "document_type"

    def test_business_permit_requires_business_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_document_fields(
                "Brgy Business Permit",
                {"businessName": "Sari-sari", "businessOwner": "Juan", "purpose": "New"},
            )
        assert exc_info.value.field_name == "fields.businessAddress"

    def test_extension_fields_are_kept_apart(self):
        fields = parse_document_fields(
            "Brgy Residency", {"purpose": "School", "yearsOfResidency": 4}
        )
        assert fields.required == {"purpose": "School"}
        assert fields.extensions == {"yearsOfResidency": 4}
        assert fields.as_json() == {"purpose": "School", "yearsOfResidency": 4}

    def test_solo_parent_certification_requires_child_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_document_fields(
                "Brgy Certification",
                {"purpose": "Solo Parent Certification", "childName": "Ana"},
            )
        assert exc_info.value.field_name == "fields.childBirthDate"

    def test_certification_dates_must_be_iso(self):
        with pytest.raises(ValidationError):
            parse_document_fields(
                "Brgy Certification",
                {
                    "purpose": "Solo Parent Certification",
                    "childName": "Ana",
                    "childBirthDate": "03/15/2020",
                },
            )

    def test_unknown_certification_purpose_is_rejected(self):
        with pytest.raises(ValidationError):
            parse_document_fields("Brgy Certification", {"purpose": "Anything"})

    def test_from_json_splits_stored_fields(self):
        fields = DocumentFields.from_json(
            "Brgy Certification",
            {
                "purpose": "Delayed Registration of Birth Certificate",
                "registrationOffice": "PSA",
                "registrationDate": "2020-01-01",
                "remarks": "rush",
            },
        )
        assert fields.document_type is DocumentType.CERTIFICATION
        assert set(fields.required) == {"purpose", "registrationOffice", "registrationDate"}
        assert fields.extensions == {"remarks": "rush"}


class TestTotals:
    """Tests for RequestAggregate.compute_total."""

    def test_asset_total_sums_subtotals(self):
        aggregate = asset_aggregate(asset_line(0, 2, "100.00"), asset_line(1, 1, "50.00"))
        assert aggregate.compute_total() == Money(Decimal("250.00"))

    def test_document_total_is_fee_times_copies(self):
        aggregate = document_aggregate(copies=3, fee=Money(Decimal("50")))
        assert aggregate.compute_total() == Money(Decimal("150.00"))

    def test_document_total_without_fee_is_zero(self):
        assert document_aggregate().compute_total() == Money.zero()

    def test_paid_total_is_frozen(self):
        aggregate = asset_aggregate(
            asset_line(0, 2, "999.00"),
            status=RequestStatus.APPROVED,
            payment_status=PaymentStatus.PAID,
            amount_paid=Money(Decimal("200.00")),
        )
        assert aggregate.compute_total() == Money(Decimal("200.00"))


class TestLifecycle:
    """Tests for transition guards."""

    def test_allowed_transitions(self):
        assert lifecycle.can_transition("decide", RequestStatus.PENDING, RequestStatus.APPROVED)
        assert lifecycle.can_transition("revoke", RequestStatus.APPROVED, RequestStatus.DENIED)
        assert not lifecycle.can_transition("decide", RequestStatus.APPROVED, RequestStatus.DENIED)
        assert not lifecycle.can_transition("revoke", RequestStatus.DENIED, RequestStatus.DENIED)

    def test_module_diagram_has_no_escapes(self):
        assert "approved (unpaid) --revoke--> denied" in lifecycle.__doc__
        assert "\\" not in lifecycle.__doc__

    def test_approved_request_cannot_be_decided_again(self):
        approved = asset_aggregate(asset_line(), status=RequestStatus.APPROVED)
        with pytest.raises(InvalidTransitionError) as exc_info:
            lifecycle.decide(approved, Outcome.DENIED, NOW)
        assert exc_info.value.details["attempted"] == "decide"

    def test_decide_sets_status_and_message(self):
        decided = lifecycle.decide(asset_aggregate(asset_line()), Outcome.DENIED, NOW, "No stock")
        assert decided.status is RequestStatus.DENIED
        assert decided.admin_message == "No stock"
        assert decided.decided_at == NOW

    @pytest.mark.parametrize("status", [RequestStatus.APPROVED, RequestStatus.DENIED])
    def test_decide_rejects_decided_requests(self, status):
        with pytest.raises(InvalidTransitionError) as exc_info:
            lifecycle.decide(asset_aggregate(asset_line(), status=status), Outcome.APPROVED, NOW)
        assert exc_info.value.code is ErrorCode.INVALID_TRANSITION

    def test_decide_sets_fee_on_approved_document(self):
        decided = lifecycle.decide(document_aggregate(), Outcome.APPROVED, NOW, fee=Money(Decimal("75")))
        assert decided.fee == Money(Decimal("75.00"))

    def test_decide_ignores_fee_on_asset_request(self):
        decided = lifecycle.decide(
            asset_aggregate(asset_line()), Outcome.APPROVED, NOW, fee=Money(Decimal("75"))
        )
        assert decided.fee is None

    def test_withdraw_requires_pending(self):
        with pytest.raises(AlreadyDecidedError):
            lifecycle.ensure_withdrawable(asset_aggregate(asset_line(), status=RequestStatus.DENIED))

    def test_revoke_requires_approved_unpaid(self):
        with pytest.raises(InvalidTransitionError):
            lifecycle.revoke(asset_aggregate(asset_line()), NOW)
        paid = asset_aggregate(
            asset_line(), status=RequestStatus.APPROVED, payment_status=PaymentStatus.PAID
        )
        with pytest.raises(InvalidTransitionError):
            lifecycle.revoke(paid, NOW)

    def test_revoke_denies_approved_request(self):
        approved = asset_aggregate(asset_line(), status=RequestStatus.APPROVED)
        assert lifecycle.revoke(approved, NOW).status is RequestStatus.DENIED

    def test_pay_requires_approval(self):
        with pytest.raises(NotApprovedError):
            lifecycle.ensure_payable(asset_aggregate(asset_line()))

    def test_pay_rejects_second_payment(self):
        paid = asset_aggregate(
            asset_line(),
            status=RequestStatus.APPROVED,
            payment_status=PaymentStatus.PAID,
            receipt_number=ReceiptNumber("AR", date(2024, 3, 15), 1),
        )
        with pytest.raises(AlreadyPaidError) as exc_info:
            lifecycle.ensure_payable(paid)
        assert exc_info.value.receipt_number == "AR-20240315-000001"

    def test_pay_document_without_fee(self):
        with pytest.raises(NoPaymentAmountError):
            lifecycle.ensure_payable(document_aggregate(status=RequestStatus.APPROVED))

    def test_pay_freezes_amount_and_completes_document(self):
        approved = document_aggregate(copies=2, fee=Money(Decimal("50")), status=RequestStatus.APPROVED)
        paid = lifecycle.pay(approved, receipt_for(approved, approved.compute_total()))
        assert paid.is_paid
        assert paid.completed
        assert paid.amount_paid == Money(Decimal("100.00"))

    def test_reservations_follow_stored_order(self):
        first, second = asset_line(0, 2), asset_line(1, 1)
        aggregate = asset_aggregate(second, first)
        assert lifecycle.reservations(aggregate) == [
            (first.item_id, Quantity(2)),
            (second.item_id, Quantity(1)),
        ]


class TestErrors:
    """Tests for domain error details."""

    def test_insufficient_stock_reports_shortfall(self):
        error = InsufficientStockError(item_id="x", item_name="Tent", requested=3, available=2)
        assert error.shortfall == 1
        assert error.details["shortfall"] == 1
        assert str(error).startswith("INSUFFICIENT_STOCK")
