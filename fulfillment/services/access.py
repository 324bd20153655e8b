"""Identifier parsing and access checks shared by the services."""

from decimal import Decimal, InvalidOperation
from typing import Callable, TypeVar

from fulfillment.domain import Actor, Money, RequestAggregate, RequestId, RequestKind
from fulfillment.domain.errors import (
    InvalidIdentifierError,
    PermissionDeniedError,
    RequestNotFoundError,
    ValidationError,
)

T = TypeVar("T")


def parse_id(factory: Callable[[str], T], value: str, kind: str) -> T:
    """Build an identifier value object, mapping bad input to InvalidIdentifierError."""
    try:
        return factory(value)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdentifierError(kind) from None


def parse_request_id(value: str) -> RequestId:
    return parse_id(RequestId.from_string, value, "request")


def parse_money(value, field_name: str) -> Money | None:
    if value is None or value == "":
        return None
    try:
        return Money(Decimal(str(value)))
    except (InvalidOperation, ValueError):
        raise ValidationError(
            f"'{field_name}' must be a non-negative amount", field_name=field_name
        ) from None


def require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise PermissionDeniedError("Only administrators can perform this action")


def ensure_access(
    actor: Actor,
    aggregate: RequestAggregate | None,
    request_id: RequestId,
    kind: RequestKind | None = None,
) -> RequestAggregate:
    """Return the aggregate if it exists and the actor may see it.

    Residents get RequestNotFoundError for other residents' requests, so
    existence is not leaked. A request of another kind is also not found.
    """
    if aggregate is None or not actor.can_access(aggregate):
        raise RequestNotFoundError(str(request_id))
    if kind is not None and aggregate.kind is not kind:
        raise RequestNotFoundError(str(request_id))
    return aggregate
