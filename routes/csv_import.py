"""
CSV product import routes.

Each route moves the import screen one step and returns its view.
"""

from fastapi import APIRouter, Body, Depends, File, UploadFile
import structlog

from exceptions import CsvFileRequiredError, StoreNotFoundError
from models.admin import Admin
from models.csv_import import CsvCategoryRequest, CsvImportView
from models.store import StoreListItem, StoreSelectionRequest
from routes.dependencies import current_admin, get_console, handle_error
from services.console_service import AdminConsole

logger = structlog.get_logger(__name__)

router = APIRouter()

IMPORT_SCREEN = "/dashboard/products/import-csv"


@router.get("", response_model=CsvImportView)
def get_import_state(
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    console.navigator.visit(IMPORT_SCREEN)
    return console.csv_import.view()


@router.put("/store", response_model=CsvImportView)
def select_store(
    data: StoreSelectionRequest,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """Target store; looked up among the selector items, else fetched."""
    try:
        try:
            store = console.selector.select(data.store_id)
        except StoreNotFoundError:
            detail = console.stores.get_store(data.store_id)
            store = StoreListItem(
                id=detail.id,
                store_name=detail.store_name,
                store_username=detail.store_username,
                dxtin=detail.dxtin
            )
        console.csv_import.select_store(store)
        return console.csv_import.view()

    except Exception as e:
        return handle_error(e, console)


@router.put("/category", response_model=CsvImportView)
def select_category(
    data: CsvCategoryRequest,
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    try:
        console.csv_import.select_category(data.category)
        return console.csv_import.view()

    except Exception as e:
        return handle_error(e, console)


@router.post("/file", response_model=CsvImportView)
async def upload_file(
    file: UploadFile = File(...),
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Choose the CSV file.

    Raises:
        422: Not a CSV file
    """
    try:
        content = await file.read()
        if not file.filename:
            raise CsvFileRequiredError()
        console.csv_import.select_file(file.filename, content, file.content_type)
        return console.csv_import.view()

    except Exception as e:
        return handle_error(e, console)


@router.post("/preview", response_model=CsvImportView)
def preview_import(
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Dry run on the backend. Nothing is created.

    Raises:
        422: Store or file missing
        409: Not on the upload screen
    """
    try:
        console.csv_import.run_preview()
        return console.csv_import.view()

    except Exception as e:
        return handle_error(e, console)


@router.put("/mapping", response_model=CsvImportView)
def update_mapping(
    changes: dict[str, str] = Body(..., examples=[{"sku": "Product Code"}]),
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """Repoint logical fields to other CSV columns before import."""
    try:
        console.csv_import.update_mapping(changes)
        return console.csv_import.view()

    except Exception as e:
        return handle_error(e, console)


@router.post("/cancel-preview", response_model=CsvImportView)
def cancel_preview(
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    try:
        console.csv_import.cancel_preview()
        return console.csv_import.view()

    except Exception as e:
        return handle_error(e, console)


@router.post("/commit", response_model=CsvImportView)
def commit_import(
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Import the file with the current mapping.

    Can take several minutes while images are downloaded.
    """
    try:
        console.csv_import.commit()
        return console.csv_import.view()

    except Exception as e:
        return handle_error(e, console)


@router.post("/reset", response_model=CsvImportView)
def reset_import(
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """Start over with another file; store and category are kept."""
    try:
        console.csv_import.reset()
        return console.csv_import.view()

    except Exception as e:
        return handle_error(e, console)
