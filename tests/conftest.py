"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

FIXED_NOW = datetime(2024, 3, 15, 2, 30, tzinfo=timezone.utc)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def database_notifications(settings):
    settings.NOTIFICATION_DISPATCHER = "fulfillment.notifications.DatabaseNotificationDispatcher"


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def admin_user(django_user_model):
    return django_user_model.objects.create_user(username="captain", password="pw", is_staff=True)


@pytest.fixture
def resident_user(django_user_model):
    return django_user_model.objects.create_user(username="juan", password="pw")


@pytest.fixture
def other_user(django_user_model):
    return django_user_model.objects.create_user(username="maria", password="pw")


@pytest.fixture
def resident(resident_user):
    from fulfillment.models import Resident
    return Resident.objects.create(user=resident_user, first_name="Juan", last_name="Dela Cruz")


@pytest.fixture
def other_resident(other_user):
    from fulfillment.models import Resident
    return Resident.objects.create(user=other_user, first_name="Maria", last_name="Santos")


@pytest.fixture
def admin_actor(admin_user):
    from fulfillment.domain import Actor
    return Actor(user_id=admin_user.pk, is_admin=True)


@pytest.fixture
def resident_actor(resident):
    from fulfillment.domain import Actor, ResidentId
    return Actor(user_id=resident.user_id, resident_id=ResidentId(resident.id))


@pytest.fixture
def other_actor(other_resident):
    from fulfillment.domain import Actor, ResidentId
    return Actor(user_id=other_resident.user_id, resident_id=ResidentId(other_resident.id))


@pytest.fixture
def make_item():
    from fulfillment.models import InventoryItem

    def _make(name: str = "Monobloc Chair", price: str = "100.00", stock: int = 5) -> InventoryItem:
        return InventoryItem.objects.create(
            name=name, unit_price=Decimal(price), available_quantity=stock
        )

    return _make


@pytest.fixture
def stores():
    from fulfillment.stores.django_store import (
        DjangoInventoryLedger,
        DjangoReceiptBook,
        DjangoRequestStore,
        DjangoResidentStore,
        DjangoUnitOfWork,
    )

    return {
        "requests": DjangoRequestStore(),
        "residents": DjangoResidentStore(),
        "ledger": DjangoInventoryLedger(),
        "receipts": DjangoReceiptBook(),
        "uow": DjangoUnitOfWork(),
    }


@pytest.fixture
def request_service(stores, clock):
    from fulfillment.notifications import DatabaseNotificationDispatcher
    from fulfillment.services import RequestService
    return RequestService(
        requests=stores["requests"],
        residents=stores["residents"],
        ledger=stores["ledger"],
        uow=stores["uow"],
        dispatcher=DatabaseNotificationDispatcher(),
        clock=clock,
    )


@pytest.fixture
def fulfillment_service(stores, clock):
    from fulfillment.notifications import DatabaseNotificationDispatcher
    from fulfillment.services import FulfillmentService
    return FulfillmentService(
        requests=stores["requests"],
        ledger=stores["ledger"],
        uow=stores["uow"],
        dispatcher=DatabaseNotificationDispatcher(),
        clock=clock,
    )


@pytest.fixture
def payment_service(stores, clock):
    from fulfillment.notifications import DatabaseNotificationDispatcher
    from fulfillment.services import PaymentService
    return PaymentService(
        requests=stores["requests"],
        receipts=stores["receipts"],
        uow=stores["uow"],
        dispatcher=DatabaseNotificationDispatcher(),
        clock=clock,
    )


@pytest.fixture
def asset_line():
    from fulfillment.services import AssetLineInput

    def _line(item, quantity=1, request_date=date(2024, 4, 1)) -> AssetLineInput:
        return AssetLineInput(asset_id=str(item.id), quantity=quantity, request_date=request_date)

    return _line
