"""
Store directory and store detail screens.

    StoreDirectory          paginated, searchable store list
    StoreDetailWorkflow     profile and analytics, loaded independently
    StoreEditor             edit modal; submits only changed fields
    StoreVerificationPanel  suspend/activate and verification actions
"""

import asyncio
import math
from typing import Optional

import structlog
from fastapi.concurrency import run_in_threadpool

from exceptions import (
    AppError,
    BackendApiError,
    BackendUnauthorizedError,
    RouteStatusUnchangedError,
    SuspendConfirmationRequiredError,
    ValidationError,
)
from models.store import (
    EDITABLE_STORE_FIELDS,
    REQUESTABLE_ROUTE_STATUSES,
    RouteProductStatus,
    StoreActionResponse,
    StoreEditForm,
    StoreListView,
    UpdateStoreRequest,
)
from utils.async_result import AsyncResult, capture
from utils.text_utils import normalize_search_term

logger = structlog.get_logger(__name__)


# ===================
# DIRECTORY
# ===================

class StoreDirectory:
    """
    Store list screen state.

    A new search term always goes back to page 1.
    """

    def __init__(self, stores, page_size: int = 20):
        self.stores = stores
        self.page_size = page_size
        self.page = 1
        self.search = ""

    def submit_search(self, term: Optional[str]) -> None:
        self.search = normalize_search_term(term)
        self.page = 1
        logger.debug("store_search_submitted", search=self.search)

    def clear_search(self) -> None:
        self.submit_search("")

    def go_to_page(self, page: int) -> None:
        self.page = max(1, page)

    def next_page(self) -> None:
        self.go_to_page(self.page + 1)

    def previous_page(self) -> None:
        self.go_to_page(self.page - 1)

    def load(self) -> StoreListView:
        """Current page as a view; a failed read becomes an error string."""
        try:
            response = self.stores.list_stores(self.page, self.page_size, self.search)
        except BackendUnauthorizedError:
            raise
        except AppError as e:
            message = e.display_message("Failed to load stores") if isinstance(e, BackendApiError) else e.message
            return StoreListView(
                page=self.page,
                limit=self.page_size,
                search=self.search,
                error=message
            )

        view = StoreListView(
            stores=[store.model_dump(by_alias=True) for store in response.stores],
            total=response.total,
            page=response.page,
            limit=response.limit,
            has_more=response.has_more,
            total_pages=math.ceil(response.total / response.limit) if response.limit else 0,
            search=self.search
        )

        if not response.stores:
            if self.search:
                view.empty_title = "No stores found"
                view.empty_message = f'No stores match "{self.search}". Try a different search term.'
            else:
                view.empty_title = "No stores yet"
                view.empty_message = "Get started by creating your first store."

        return view


# ===================
# DETAIL
# ===================

class StoreDetailWorkflow:
    """Store detail screen: profile and analytics, each with its own outcome."""

    def __init__(self, stores, editor: "StoreEditor", panel: "StoreVerificationPanel"):
        self.stores = stores
        self.editor = editor
        self.panel = panel

    async def load(self, store_id: str) -> dict:
        """
        Load the detail screen.

        Profile and analytics are fetched concurrently; either may fail
        without affecting the other.
        """
        profile, analytics = await asyncio.gather(
            run_in_threadpool(capture, lambda: self.stores.get_store(store_id), "Failed to load store"),
            run_in_threadpool(
                capture,
                lambda: self.stores.get_store_analytics(store_id),
                "Failed to load analytics"
            ),
        )

        view = {
            "store": profile.to_dict(lambda s: s.model_dump(by_alias=True, mode="json")),
            "analytics": analytics.to_dict(lambda a: a.model_dump(by_alias=True, mode="json")),
            "suspend_confirmation_pending": self.panel.is_confirming(store_id),
            "edit_form": None,
            "route_status": None,
            "available_route_statuses": [],
        }

        if profile.ok:
            store = profile.data
            view["edit_form"] = self.editor.open_from(store).model_dump()
            view["route_status"] = store.effective_route_status.value
            view["available_route_statuses"] = [
                status.value for status in REQUESTABLE_ROUTE_STATUSES
                if status != store.effective_route_status
            ]

        return view


# ===================
# EDIT
# ===================

class StoreEditor:
    """
    Edit modal.

    The values shown when the modal opens are the snapshot; submit sends
    only the fields that differ from it.
    """

    def __init__(self, stores):
        self.stores = stores
        self._snapshots: dict[str, StoreEditForm] = {}

    def open(self, store_id: str) -> StoreEditForm:
        return self.open_from(self.stores.get_store(store_id))

    def open_from(self, store) -> StoreEditForm:
        form = StoreEditForm.from_store(store)
        self._snapshots[store.id] = form
        return form

    def close(self, store_id: str) -> None:
        self._snapshots.pop(store_id, None)

    def is_open(self, store_id: str) -> bool:
        return store_id in self._snapshots

    def diff(self, store_id: str, form: StoreEditForm) -> UpdateStoreRequest:
        snapshot = self._snapshots.get(store_id) or self.open(store_id)
        changes = {
            field: getattr(form, field)
            for field in EDITABLE_STORE_FIELDS
            if getattr(form, field) != getattr(snapshot, field)
        }
        return UpdateStoreRequest(**changes)

    def submit(self, store_id: str, form: StoreEditForm) -> Optional[StoreActionResponse]:
        """
        Submit the modal.

        Returns:
            Backend response, or None when nothing changed (no request sent)
        """
        changes = self.diff(store_id, form)

        if changes.is_empty():
            logger.debug("store_edit_unchanged", store_id=store_id)
            self.close(store_id)
            return None

        response = self.stores.update_store(store_id, changes)
        self.close(store_id)
        return response


# ===================
# STATUS & VERIFICATION
# ===================

class StoreVerificationPanel:
    """
    Suspend/activate and verification actions.

    Suspending needs an explicit confirmation step; activating does not.
    """

    def __init__(self, stores):
        self.stores = stores
        self._confirming: set[str] = set()

    def is_confirming(self, store_id: str) -> bool:
        return store_id in self._confirming

    def request_suspend(self, store_id: str) -> None:
        self._confirming.add(store_id)

    def cancel_suspend(self, store_id: str) -> None:
        self._confirming.discard(store_id)

    def confirm_suspend(self, store_id: str) -> StoreActionResponse:
        """
        Raises:
            SuspendConfirmationRequiredError: request_suspend() was not called first
        """
        if store_id not in self._confirming:
            raise SuspendConfirmationRequiredError(store_id)
        try:
            return self.stores.set_suspended(store_id, True)
        finally:
            self._confirming.discard(store_id)

    def activate(self, store_id: str) -> StoreActionResponse:
        self._confirming.discard(store_id)
        return self.stores.set_suspended(store_id, False)

    def set_gst_verified(self, store_id: str, verified: bool) -> StoreActionResponse:
        return self.stores.set_gst_verified(store_id, verified)

    def set_route_status(self, store_id: str, status: RouteProductStatus) -> StoreActionResponse:
        """
        Raises:
            ValidationError: status is not one an admin can request
            RouteStatusUnchangedError: store already has this status
        """
        if status not in REQUESTABLE_ROUTE_STATUSES:
            raise ValidationError(
                f"Route product status cannot be set to {status.value}",
                code="ROUTE_STATUS_NOT_REQUESTABLE",
                details={"status": status.value}
            )

        current = self.stores.get_store(store_id).effective_route_status
        if current == status:
            raise RouteStatusUnchangedError(status.value)

        return self.stores.set_route_product_status(store_id, status)
