"""Tests for the admin site's stock and deletion rules.

Run with: pytest tests/test_admin.py -v
"""

from decimal import Decimal

import pytest
from django.contrib.admin.sites import AdminSite

from fulfillment.admin import InventoryItemAdmin, InventoryItemForm, ServiceRequestAdmin
from fulfillment.models import InventoryItem, ServiceRequest


@pytest.fixture
def superuser(django_user_model):
    return django_user_model.objects.create_superuser(username="root", password="pw")


@pytest.fixture
def admin_request(rf, superuser):
    request = rf.post("/admin/")
    request.user = superuser
    return request


@pytest.mark.django_db
class TestInventoryItemAdmin:
    """Stock of an existing item is only changed through the ledger."""

    def test_saving_a_stale_item_keeps_reserved_stock(
        self, request_service, fulfillment_service, resident_actor, admin_actor, make_item, asset_line
    ):
        item = make_item(price="100.00", stock=5)
        stale = InventoryItem.objects.get(pk=item.pk)
        aggregate = request_service.submit_asset_request(resident_actor, [asset_line(item, 2)])
        fulfillment_service.decide(admin_actor, str(aggregate.id), "approved")

        stale.unit_price = Decimal("150.00")
        stale.save()

        item.refresh_from_db()
        assert item.unit_price == Decimal("150.00")
        assert item.available_quantity == 3

    def test_stock_is_read_only_on_change(self, admin_request, make_item):
        model_admin = InventoryItemAdmin(InventoryItem, AdminSite())
        assert model_admin.get_readonly_fields(admin_request) == []
        assert "available_quantity" in model_admin.get_readonly_fields(admin_request, make_item())

    def test_restock_goes_through_the_ledger(self, admin_request, make_item):
        item = make_item(price="100.00", stock=5)
        model_admin = InventoryItemAdmin(InventoryItem, AdminSite())
        form = InventoryItemForm(
            data={"name": item.name, "unit_price": "100.00", "available_quantity": 5, "restock": 4},
            instance=item,
        )
        assert form.is_valid(), form.errors

        model_admin.save_model(admin_request, form.save(commit=False), form, change=True)

        item.refresh_from_db()
        assert item.available_quantity == 9


@pytest.mark.django_db
class TestServiceRequestAdmin:
    """Only pending requests can be deleted from the admin."""

    def test_delete_permission_follows_status(
        self,
        admin_request,
        request_service,
        fulfillment_service,
        resident_actor,
        admin_actor,
        make_item,
        asset_line,
    ):
        model_admin = ServiceRequestAdmin(ServiceRequest, AdminSite())
        pending = request_service.submit_asset_request(resident_actor, [asset_line(make_item())])
        approved = request_service.submit_asset_request(resident_actor, [asset_line(make_item())])
        fulfillment_service.decide(admin_actor, str(approved.id), "approved")

        assert model_admin.has_delete_permission(
            admin_request, ServiceRequest.objects.get(pk=pending.id.value)
        )
        assert not model_admin.has_delete_permission(
            admin_request, ServiceRequest.objects.get(pk=approved.id.value)
        )

    def test_bulk_delete_action_is_removed(self, admin_request):
        model_admin = ServiceRequestAdmin(ServiceRequest, AdminSite())
        assert "delete_selected" not in model_admin.get_actions(admin_request)
