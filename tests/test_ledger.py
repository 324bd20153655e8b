"""Tests for the inventory ledger.

Stock must never go negative, no matter how reservations interleave.
Run with: pytest tests/test_ledger.py -v
"""

import uuid

import pytest

from fulfillment.domain import InventoryItemId
from fulfillment.domain.errors import InsufficientStockError, InventoryItemNotFoundError
from fulfillment.stores.django_store import DjangoInventoryLedger


@pytest.fixture
def ledger():
    return DjangoInventoryLedger()


@pytest.mark.django_db
class TestInventoryLedger:
    """Tests for DjangoInventoryLedger."""

    def test_reserve_decrements_stock(self, ledger, make_item):
        item = make_item(stock=5)
        ledger.reserve(InventoryItemId(item.id), 2)
        item.refresh_from_db()
        assert item.available_quantity == 3

    def test_reserve_exact_stock_leaves_zero(self, ledger, make_item):
        item = make_item(stock=2)
        ledger.reserve(InventoryItemId(item.id), 2)
        item.refresh_from_db()
        assert item.available_quantity == 0

    def test_reserve_more_than_available(self, ledger, make_item):
        item = make_item(name="Tent", stock=2)
        with pytest.raises(InsufficientStockError) as exc_info:
            ledger.reserve(InventoryItemId(item.id), 3)

        error = exc_info.value
        assert error.item_name == "Tent"
        assert (error.requested, error.available, error.shortfall) == (3, 2, 1)
        item.refresh_from_db()
        assert item.available_quantity == 2

    def test_last_unit_can_only_be_taken_once(self, ledger, make_item):
        item = make_item(stock=1)
        ledger.reserve(InventoryItemId(item.id), 1)
        with pytest.raises(InsufficientStockError):
            ledger.reserve(InventoryItemId(item.id), 1)
        item.refresh_from_db()
        assert item.available_quantity == 0

    def test_reserve_unknown_item(self, ledger):
        with pytest.raises(InventoryItemNotFoundError):
            ledger.reserve(InventoryItemId(uuid.uuid4()), 1)

    def test_restore_increments_stock(self, ledger, make_item):
        item = make_item(stock=0)
        ledger.restore(InventoryItemId(item.id), 4)
        item.refresh_from_db()
        assert item.available_quantity == 4

    def test_list_items_maps_domain_models(self, ledger, make_item):
        make_item(name="Tent", price="250.00", stock=3)
        [item] = ledger.list_items()
        assert item.name == "Tent"
        assert str(item.unit_price) == "250.00"
        assert item.available.value == 3
