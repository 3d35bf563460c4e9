"""
Manual product entry routes.
"""

from fastapi import APIRouter, Depends
import structlog

from models.admin import Admin
from models.product import MAIN_CATEGORIES, SUB_CATEGORIES, BulkProductForm
from routes.dependencies import current_admin, get_console, handle_error
from services.console_service import AdminConsole

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/categories")
def list_categories(admin: Admin = Depends(current_admin)):
    """Main categories and their sub-categories for the product form."""
    return {
        "main_categories": list(MAIN_CATEGORIES),
        "sub_categories": {main: list(subs) for main, subs in SUB_CATEGORIES.items()},
    }


@router.post("/bulk-create", status_code=201)
def bulk_create_product(
    data: BulkProductForm,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Create one product with its variants.

    Raises:
        422: Form invalid (no store, no image URL, bad variant)
        400: Backend refused the product
    """
    try:
        console.navigator.visit("/dashboard/products/import")
        response = console.products.submit(data)
        return response.model_dump(by_alias=True, mode="json")

    except Exception as e:
        return handle_error(e, console)
