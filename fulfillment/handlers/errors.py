"""Maps domain errors to HTTP responses.

Installed as REST_FRAMEWORK["EXCEPTION_HANDLER"]. Domain errors are expected
outcomes: they are logged at info level and returned with their code and
details. DRF's own exceptions are reshaped into the same error envelope.
Anything else surfaces as a 500.
"""

import structlog
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from fulfillment.domain.errors import DomainError, ErrorCode

logger = structlog.get_logger(__name__)

HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.RESIDENT_NOT_FOUND: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.REQUEST_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVENTORY_ITEM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RECEIPT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_DECIDED: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_APPROVED: status.HTTP_409_CONFLICT,
    ErrorCode.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_PAID: status.HTTP_409_CONFLICT,
    ErrorCode.NO_PAYMENT_AMOUNT: status.HTTP_409_CONFLICT,
}


def error_body(exc: DomainError) -> dict:
    return {"error": {"code": exc.code.value, "message": exc.message, **exc.details}}


def _api_error_body(exc: exceptions.APIException) -> dict:
    if isinstance(exc, exceptions.ValidationError):
        return {
            "error": {
                "code": ErrorCode.VALIDATION_FAILED.value,
                "message": "Invalid input",
                "fields": exc.detail,
            }
        }
    return {"error": {"code": exc.default_code.upper(), "message": str(exc.detail)}}


def exception_handler(exc, context):
    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.info(
            "domain_error",
            code=exc.code.value,
            view=type(view).__name__ if view else None,
            **{k: v for k, v in exc.details.items() if v is not None},
        )
        return Response(error_body(exc), status=HTTP_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST))

    response = drf_exception_handler(exc, context)
    if response is not None and isinstance(exc, exceptions.APIException):
        response.data = _api_error_body(exc)
    return response
