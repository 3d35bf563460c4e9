"""
Store reads and mutations against the backend.

Reads go through the query cache. Mutations notify the admin of the
outcome and, only on success, invalidate the cache keys they touched.
A failed mutation leaves every cached entry as it was.
"""

from typing import Callable

import structlog

from exceptions import (
    BackendApiError,
    StoreActionError,
    StoreNotFoundError,
)
from models.store import (
    CreateStoreForm,
    CreateStoreResponse,
    RouteProductStatus,
    StoreActionResponse,
    StoreAnalytics,
    StoreDetail,
    StoreListResponse,
    UpdateStoreRequest,
)
from utils.text_utils import normalize_search_term

logger = structlog.get_logger(__name__)


# ===================
# QUERY KEYS
# ===================

STORE_LISTS_KEY = ("stores", "list")


def store_list_key(page: int, limit: int, search: str) -> tuple:
    return ("stores", "list", page, limit, search)


def store_detail_key(store_id: str) -> tuple:
    return ("stores", "detail", store_id)


def store_analytics_key(store_id: str) -> tuple:
    return ("stores", "detail", store_id, "analytics")


class StoreService:
    """
    Store operations.

    Args:
        api: ApiClient
        cache: QueryCache
        notifier: Notifier for user-visible outcomes
    """

    def __init__(self, api, cache, notifier):
        self.api = api
        self.cache = cache
        self.notifier = notifier

    # ===================
    # READ OPERATIONS
    # ===================

    def list_stores(self, page: int = 1, limit: int = 20, search: str = "") -> StoreListResponse:
        """
        Page of stores, optionally filtered by a search term.

        The backend matches the term against name, username and DXTIN.
        """
        term = normalize_search_term(search)

        def fetch() -> StoreListResponse:
            params = {"page": page, "limit": limit, "search": term or None}
            payload = self.api.get("/admin/stores", params=params)
            return self.api.parse(StoreListResponse, payload, "/admin/stores")

        return self.cache.fetch(store_list_key(page, limit, term), fetch)

    def get_store(self, store_id: str) -> StoreDetail:
        """
        Store profile.

        Raises:
            StoreNotFoundError: Backend answered 404
        """
        path = f"/admin/stores/{store_id}"

        def fetch() -> StoreDetail:
            try:
                payload = self.api.get(path)
            except BackendApiError as e:
                if e.backend_status == 404:
                    raise StoreNotFoundError(store_id) from e
                raise
            return self.api.parse(StoreDetail, payload, path)

        return self.cache.fetch(store_detail_key(store_id), fetch)

    def get_store_analytics(self, store_id: str) -> StoreAnalytics:
        path = f"/admin/stores/{store_id}/analytics"

        def fetch() -> StoreAnalytics:
            return self.api.parse(StoreAnalytics, self.api.get(path), path)

        return self.cache.fetch(store_analytics_key(store_id), fetch)

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create_store(self, form: CreateStoreForm) -> CreateStoreResponse:
        """
        Create a store (tenant).

        Returns:
            Response carrying the issued DXTIN, username and temporary password

        Raises:
            StoreActionError: Backend answered success=false
            BackendApiError: Transport failure
        """
        logger.info("creating_store", store_name=form.store_name, category=form.product_category.value)
        body = form.to_request().to_payload()

        try:
            payload = self.api.post("/admin/stores/create", json=body)
            response = self.api.parse(CreateStoreResponse, payload, "/admin/stores/create")
        except BackendApiError as e:
            self.notifier.error(e.display_message("Failed to create store"))
            raise

        if not response.success:
            message = response.message or "Failed to create store"
            self.notifier.error(message)
            raise StoreActionError("create", message)

        self.cache.invalidate(STORE_LISTS_KEY)
        self.notifier.success(response.message or "Store created successfully")

        logger.info("store_created", dxtin=response.dxtin, store_username=response.store_username)
        return response

    def update_store(self, store_id: str, changes: UpdateStoreRequest) -> StoreActionResponse:
        """Send a partial update; only the fields set on changes are sent."""
        body = changes.to_payload()
        return self._run_mutation(
            action="update",
            store_id=store_id,
            send=lambda: self.api.put(f"/admin/stores/{store_id}", json=body),
            success_message="Store updated successfully",
            fallback_message="Failed to update store",
            invalidate_lists=True,
            fields=sorted(body)
        )

    def set_suspended(self, store_id: str, suspend: bool) -> StoreActionResponse:
        return self._run_mutation(
            action="suspend" if suspend else "activate",
            store_id=store_id,
            send=lambda: self.api.patch(
                f"/admin/stores/{store_id}/suspend",
                json={"suspend": suspend}
            ),
            success_message=(
                "Store suspended successfully" if suspend else "Store activated successfully"
            ),
            fallback_message="Failed to update store status",
            invalidate_lists=True
        )

    def set_gst_verified(self, store_id: str, verified: bool) -> StoreActionResponse:
        return self._run_mutation(
            action="verify_gst",
            store_id=store_id,
            send=lambda: self.api.patch(
                f"/admin/stores/{store_id}/verify-gst",
                json={"verified": verified}
            ),
            success_message="GST verification status updated",
            fallback_message="Failed to update GST verification"
        )

    def set_route_product_status(
        self,
        store_id: str,
        status: RouteProductStatus
    ) -> StoreActionResponse:
        return self._run_mutation(
            action="route_product",
            store_id=store_id,
            send=lambda: self.api.patch(
                f"/admin/stores/{store_id}/route-product",
                json={"status": status.value}
            ),
            success_message="Route product status updated",
            fallback_message="Failed to update route product status"
        )

    # ===================
    # HELPERS
    # ===================

    def _run_mutation(
        self,
        action: str,
        store_id: str,
        send: Callable[[], object],
        success_message: str,
        fallback_message: str,
        invalidate_lists: bool = False,
        **log_context
    ) -> StoreActionResponse:
        """
        Send a store mutation and settle its outcome.

        Success invalidates the store's detail keys (and list keys when
        the change is visible in listings) and notifies success. Failure
        notifies the error and leaves the cache untouched.
        """
        path = f"/admin/stores/{store_id}"
        logger.info("store_mutation_started", action=action, store_id=store_id, **log_context)

        try:
            payload = self.cache.mutate(f"store_{action}", send)
            response = self.api.parse(StoreActionResponse, payload, path)
        except BackendApiError as e:
            logger.warning("store_mutation_failed", action=action, store_id=store_id, error=e.message)
            self.notifier.error(e.display_message(fallback_message))
            raise

        if not response.success:
            message = response.message or fallback_message
            logger.warning("store_mutation_rejected", action=action, store_id=store_id, message=message)
            self.notifier.error(message)
            raise StoreActionError(action, message, store_id)

        self.cache.invalidate(store_detail_key(store_id))
        if invalidate_lists:
            self.cache.invalidate(STORE_LISTS_KEY)

        self.notifier.success(success_message)
        logger.info("store_mutation_complete", action=action, store_id=store_id)
        return response
