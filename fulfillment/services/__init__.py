from fulfillment.services.fulfillment_service import FulfillmentService
from fulfillment.services.payment_service import PaymentService
from fulfillment.services.request_service import AssetLineInput, RequestService

__all__ = [
    "AssetLineInput",
    "FulfillmentService",
    "PaymentService",
    "RequestService",
]
