"""
Store directory, detail, selector and store action routes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
import structlog

from models.admin import Admin
from models.store import (
    CreateStoreForm,
    GstVerificationRequest,
    RouteProductStatusRequest,
    StoreEditForm,
    StoreListView,
    StoreSelectionRequest,
)
from routes.dependencies import current_admin, get_console, handle_error
from services.console_service import AdminConsole

logger = structlog.get_logger(__name__)

router = APIRouter()

STORES_PATH = "/dashboard/stores"


# ===================
# DIRECTORY
# ===================

@router.get("", response_model=StoreListView)
def list_stores(
    page: Optional[int] = Query(None, ge=1, description="Page number"),
    search: Optional[str] = Query(None, description="Search term; empty string clears"),
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Store directory.

    A changed search term resets to page 1; page is ignored then.
    """
    try:
        console.navigator.visit(STORES_PATH)
        directory = console.directory

        if search is not None and search.strip() != directory.search:
            directory.submit_search(search)
        elif page is not None:
            directory.go_to_page(page)

        return directory.load()

    except Exception as e:
        return handle_error(e, console)


@router.post("", status_code=201)
def create_store(
    data: CreateStoreForm,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Create a store.

    Returns the issued DXTIN, username and temporary password.
    """
    try:
        console.navigator.visit(f"{STORES_PATH}/create")
        response = console.stores.create_store(data)
        return response.model_dump(by_alias=True)

    except Exception as e:
        return handle_error(e, console)


# ===================
# SELECTOR
# ===================

@router.get("/selector")
async def get_selector(
    search: Optional[str] = Query(None, description="Debounced search term"),
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Store selector.

    First call loads page 1. A search response superseded by a newer
    search is discarded; the view always reflects the latest search.
    """
    try:
        selector = console.selector
        if search is not None and search.strip() != selector.search:
            await selector.search_for(search)
        elif not selector.opened:
            await selector.open()
        return selector.view()

    except Exception as e:
        return handle_error(e, console)


@router.post("/selector/load-more")
async def selector_load_more(
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """Append the next page of the current search."""
    try:
        await console.selector.load_more()
        return console.selector.view()

    except Exception as e:
        return handle_error(e, console)


@router.put("/selector/selection")
def select_store(
    data: StoreSelectionRequest,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Select a loaded store.

    Raises:
        404: Store is not among the loaded items
    """
    try:
        console.selector.select(data.store_id)
        return console.selector.view()

    except Exception as e:
        return handle_error(e, console)


@router.delete("/selector/selection")
def clear_selection(
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    console.selector.clear()
    return console.selector.view()


# ===================
# DETAIL
# ===================

@router.get("/{store_id}")
async def get_store(
    store_id: str,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Store detail: profile and analytics, each with its own status.
    """
    try:
        console.navigator.visit(f"{STORES_PATH}/{store_id}")
        return await console.detail.load(store_id)

    except Exception as e:
        return handle_error(e, console)


@router.put("/{store_id}")
def update_store(
    store_id: str,
    data: StoreEditForm,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Submit the edit form.

    Only fields that differ from the values shown when the form opened
    are sent. Nothing changed means no backend call.
    """
    try:
        response = console.editor.submit(store_id, data)
        if response is None:
            return {"success": True, "changed": False, "message": None}
        return {"success": True, "changed": True, "message": response.message}

    except Exception as e:
        return handle_error(e, console)


# ===================
# STATUS
# ===================

@router.post("/{store_id}/suspend")
def request_suspend(
    store_id: str,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """Ask for suspension; it is only sent once confirmed."""
    console.verification.request_suspend(store_id)
    return {"store_id": store_id, "confirmation_required": True}


@router.post("/{store_id}/suspend/confirm")
def confirm_suspend(
    store_id: str,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Suspend the store.

    Raises:
        409: Suspension was not requested first
    """
    try:
        response = console.verification.confirm_suspend(store_id)
        return response.model_dump(by_alias=True)

    except Exception as e:
        return handle_error(e, console)


@router.post("/{store_id}/suspend/cancel")
def cancel_suspend(
    store_id: str,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    console.verification.cancel_suspend(store_id)
    return {"store_id": store_id, "confirmation_required": False}


@router.post("/{store_id}/activate")
def activate_store(
    store_id: str,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """Re-activate a suspended store. No confirmation step."""
    try:
        response = console.verification.activate(store_id)
        return response.model_dump(by_alias=True)

    except Exception as e:
        return handle_error(e, console)


# ===================
# VERIFICATION
# ===================

@router.patch("/{store_id}/gst")
def set_gst_verified(
    store_id: str,
    data: GstVerificationRequest,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    try:
        response = console.verification.set_gst_verified(store_id, data.verified)
        return response.model_dump(by_alias=True)

    except Exception as e:
        return handle_error(e, console)


@router.patch("/{store_id}/route-product")
def set_route_product_status(
    store_id: str,
    data: RouteProductStatusRequest,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Move the store to another route product status.

    Raises:
        422: Status equals the current one, or is not requestable
    """
    try:
        response = console.verification.set_route_status(store_id, data.status)
        return response.model_dump(by_alias=True)

    except Exception as e:
        return handle_error(e, console)
