"""
Unit tests for StoreService.

Run: pytest tests/unit/test_store_service.py -v
"""

import pytest

from exceptions import BackendApiError, StoreActionError, StoreNotFoundError
from models.store import CreateStoreForm, RouteProductStatus, UpdateStoreRequest
from services.store_service import store_detail_key, store_list_key

from tests.factories import StoreFactory


def notifications(console) -> list[tuple[str, str]]:
    return [(n.kind.value, n.message) for n in console.notifier.drain()]


class TestStoreServiceReads:
    """Tests for cached reads."""

    def test_list_stores_sends_paging_and_search(self, signed_in_console, backend):
        """Should forward page, limit and the trimmed search term."""
        # Arrange
        backend.add("GET", "/admin/stores", body=StoreFactory.create_page(count=2, total=2))

        # Act
        result = signed_in_console.stores.list_stores(page=2, limit=20, search="  corner ")

        # Assert
        assert len(result.stores) == 2
        assert backend.calls_to("GET", "/admin/stores")[0]["params"] == {
            "page": 2, "limit": 20, "search": "corner"
        }

    def test_list_stores_omits_blank_search(self, signed_in_console, backend):
        backend.add("GET", "/admin/stores", body=StoreFactory.create_page())

        signed_in_console.stores.list_stores(page=1, limit=20, search="   ")

        assert "search" not in backend.calls_to("GET", "/admin/stores")[0]["params"]

    def test_list_stores_is_cached_per_key(self, signed_in_console, backend):
        """Should serve a repeated read from the cache."""
        # Arrange
        backend.add("GET", "/admin/stores", body=StoreFactory.create_page())

        # Act
        signed_in_console.stores.list_stores(1, 20, "")
        signed_in_console.stores.list_stores(1, 20, "")

        # Assert
        assert len(backend.calls_to("GET", "/admin/stores")) == 1

    def test_get_store_not_found(self, signed_in_console, backend):
        """Should map a backend 404 to StoreNotFoundError."""
        # Arrange
        backend.add("GET", "/admin/stores/missing", status=404, body={"message": "Store not found"})

        # Act & Assert
        with pytest.raises(StoreNotFoundError) as exc_info:
            signed_in_console.stores.get_store("missing")

        assert exc_info.value.details["id"] == "missing"

    def test_analytics_read_separately(self, signed_in_console, backend):
        backend.add("GET", "/admin/stores/store-1/analytics", body=StoreFactory.create_analytics())

        analytics = signed_in_console.stores.get_store_analytics("store-1")

        assert analytics.total_orders == 42


class TestStoreServiceCreate:
    """Tests for create_store()."""

    def _form(self, **overrides) -> CreateStoreForm:
        data = {
            "store_name": "Corner Shop",
            "owner_name": "Asha Rao",
            "email": "owner@corner.shop",
            "phone_number": "9876543210",
        }
        data.update(overrides)
        return CreateStoreForm(**data)

    def test_create_applies_defaults(self, signed_in_console, backend):
        """Should default whatsapp, business name and type, and drop blanks."""
        # Arrange
        backend.add("POST", "/admin/stores/create", body={
            "success": True, "dxtin": "DX000042", "storeUsername": "cornershop", "tempPassword": "Temp#123"
        })

        # Act
        response = signed_in_console.stores.create_store(self._form())

        # Assert
        body = backend.calls_to("POST", "/admin/stores/create")[0]["json"]
        assert body["whatsappNumber"] == "9876543210"
        assert body["businessName"] == "Corner Shop"
        assert body["businessType"] == "Retail"
        assert body["productCategory"] == "FASHION"
        assert "gstNumber" not in body
        assert "sellerRegistrationType" not in body
        assert response.temp_password == "Temp#123"
        assert notifications(signed_in_console) == [("success", "Store created successfully")]

    def test_create_invalidates_store_lists(self, signed_in_console, backend):
        """Should make the next directory read refetch."""
        # Arrange
        backend.add("GET", "/admin/stores", body=StoreFactory.create_page())
        backend.add("POST", "/admin/stores/create", body={"success": True})
        signed_in_console.stores.list_stores(1, 20, "")

        # Act
        signed_in_console.stores.create_store(self._form())

        # Assert
        assert signed_in_console.cache.is_stale(store_list_key(1, 20, ""))

    def test_create_rejected(self, signed_in_console, backend):
        """Should notify and raise when the backend answers success=false."""
        # Arrange
        backend.add("POST", "/admin/stores/create", body={"success": False, "message": "Username taken"})

        # Act & Assert
        with pytest.raises(StoreActionError):
            signed_in_console.stores.create_store(self._form())

        assert notifications(signed_in_console) == [("error", "Username taken")]

    def test_create_is_not_retried(self, signed_in_console, backend, sleeps):
        backend.add("POST", "/admin/stores/create", status=500)

        with pytest.raises(BackendApiError):
            signed_in_console.stores.create_store(self._form())

        assert len(backend.calls_to("POST", "/admin/stores/create")) == 1
        assert notifications(signed_in_console) == [("error", "Failed to create store")]

    def test_gst_number_carries_registration_type(self, signed_in_console, backend):
        backend.add("POST", "/admin/stores/create", body={"success": True})

        signed_in_console.stores.create_store(self._form(gst_number="29ABCDE1234F1Z5"))

        body = backend.calls_to("POST", "/admin/stores/create")[0]["json"]
        assert body["sellerRegistrationType"] == "GST_REGISTERED"

    def test_same_day_delivery_range_is_sent(self, signed_in_console, backend):
        """Should send a zero minimum delivery day rather than dropping it."""
        # Arrange
        backend.add("POST", "/admin/stores/create", body={"success": True})

        # Act
        signed_in_console.stores.create_store(self._form(
            default_delivery_min_days=0,
            default_delivery_max_days=1,
            default_shipping_local_cost=40,
        ))

        # Assert
        body = backend.calls_to("POST", "/admin/stores/create")[0]["json"]
        assert body["defaultDeliveryMinDays"] == 0
        assert body["defaultDeliveryMaxDays"] == 1
        assert body["defaultShippingLocalCost"] == 40
        assert "defaultShippingRegionalCost" not in body


class TestStoreServiceMutations:
    """Tests for the cache consequences of store mutations."""

    @pytest.fixture
    def cached_store(self, signed_in_console, backend):
        """Store detail already in the cache."""
        backend.add("GET", "/admin/stores/store-1", body=StoreFactory.create_detail(isActive=True))
        return signed_in_console.stores.get_store("store-1")

    def test_failed_mutation_leaves_cache_untouched(self, signed_in_console, backend, cached_store):
        """Should keep the cached profile fresh and surface the backend message."""
        # Arrange
        backend.add(
            "PATCH", "/admin/stores/store-1/suspend",
            status=500, body={"message": "Suspension service unavailable"}
        )

        # Act & Assert
        with pytest.raises(BackendApiError):
            signed_in_console.stores.set_suspended("store-1", True)

        cache = signed_in_console.cache
        assert not cache.is_stale(store_detail_key("store-1"))
        assert cache.get_query_data(store_detail_key("store-1")).is_active is True
        assert notifications(signed_in_console) == [("error", "Suspension service unavailable")]

    def test_failed_mutation_retried_once(self, signed_in_console, backend, cached_store, sleeps):
        backend.add("PATCH", "/admin/stores/store-1/suspend", status=503)

        with pytest.raises(BackendApiError):
            signed_in_console.stores.set_suspended("store-1", True)

        assert len(backend.calls_to("PATCH", "/admin/stores/store-1/suspend")) == 2
        assert sleeps == [1.0]

    def test_rejected_mutation_leaves_cache_untouched(self, signed_in_console, backend, cached_store):
        # Arrange
        backend.add(
            "PATCH", "/admin/stores/store-1/verify-gst",
            body={"success": False, "message": "GST number missing"}
        )

        # Act & Assert
        with pytest.raises(StoreActionError):
            signed_in_console.stores.set_gst_verified("store-1", True)

        assert not signed_in_console.cache.is_stale(store_detail_key("store-1"))
        assert notifications(signed_in_console) == [("error", "GST number missing")]

    def test_successful_suspend_refetches_detail(self, signed_in_console, backend, cached_store):
        """Should invalidate the detail so the next read shows the new state."""
        # Arrange
        backend.add("PATCH", "/admin/stores/store-1/suspend", body={"success": True})
        backend.add("GET", "/admin/stores/store-1", body=StoreFactory.create_detail(isActive=False))

        # Act
        signed_in_console.stores.set_suspended("store-1", True)
        store = signed_in_console.stores.get_store("store-1")

        # Assert
        assert store.is_active is False
        assert backend.calls_to("PATCH", "/admin/stores/store-1/suspend")[0]["json"] == {"suspend": True}
        assert notifications(signed_in_console) == [("success", "Store suspended successfully")]

    def test_update_sends_only_given_fields(self, signed_in_console, backend, cached_store):
        # Arrange
        backend.add("PUT", "/admin/stores/store-1", body={"success": True, "message": "Updated"})

        # Act
        signed_in_console.stores.update_store("store-1", UpdateStoreRequest(store_name="New Name"))

        # Assert
        assert backend.calls_to("PUT", "/admin/stores/store-1")[0]["json"] == {"storeName": "New Name"}
        assert signed_in_console.cache.is_stale(store_detail_key("store-1"))

    def test_route_product_status_body(self, signed_in_console, backend):
        backend.add("PATCH", "/admin/stores/store-1/route-product", body={"success": True})

        signed_in_console.stores.set_route_product_status("store-1", RouteProductStatus.ACTIVATED)

        call = backend.calls_to("PATCH", "/admin/stores/store-1/route-product")[0]
        assert call["json"] == {"status": "activated"}
