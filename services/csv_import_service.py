"""
CSV product import.

Two independent backend calls:
    preview  POST /admin/products/csv/preview  (read-only dry run)
    commit   POST /admin/products/csv/import   (creates products)

The commit resends the full file; nothing links it to the preview.
CsvImportWorkflow drives the screen:

    idle -> previewing -> preview_shown -> importing -> result_shown

A failed preview falls back to idle and a failed commit to
preview_shown, keeping the error message.
"""

import json
import threading
from typing import Optional

import structlog
from pydantic.alias_generators import to_camel

from exceptions import (
    AppError,
    BackendApiError,
    CsvFileRequiredError,
    CsvPreviewRejectedError,
    InvalidImportStateError,
    StoreNotSelectedError,
    ValidationError,
)
from models.csv_import import (
    COLUMN_MAPPING_FIELDS,
    ColumnMapping,
    CsvFileHints,
    CsvImportView,
    CsvPreviewResponse,
    ImportResult,
    ImportState,
)
from models.store import StoreCategory, StoreListItem
from parsers.csv_file_parser import inspect_csv, missing_headers

logger = structlog.get_logger(__name__)

PREVIEW_PATH = "/admin/products/csv/preview"
IMPORT_PATH = "/admin/products/csv/import"

PREVIEW_FALLBACK = "Failed to preview CSV"
IMPORT_FALLBACK = "Failed to import products"


class CsvImportService:
    """
    Backend calls of the CSV import.

    Args:
        api: ApiClient
        commit_timeout: Timeout for the commit call, which downloads images
            and can run for minutes
    """

    def __init__(self, api, commit_timeout: float = 600):
        self.api = api
        self.commit_timeout = commit_timeout

    def preview(
        self,
        store_id: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None
    ) -> CsvPreviewResponse:
        """
        Dry-run parse of the file by the backend. Creates nothing.

        Raises:
            CsvPreviewRejectedError: Backend answered success=false
            BackendApiError: Transport failure
        """
        logger.info("csv_preview_started", store_id=store_id, filename=filename, size_bytes=len(content))

        payload = self.api.request(
            "POST",
            PREVIEW_PATH,
            data={"sellerId": store_id},
            files={"file": (filename, content, content_type or "text/csv")}
        )
        response = self.api.parse(CsvPreviewResponse, payload, PREVIEW_PATH)

        if not response.success:
            raise CsvPreviewRejectedError(response.message or PREVIEW_FALLBACK, store_id)

        logger.info(
            "csv_preview_received",
            store_id=store_id,
            total_rows=response.total_rows,
            valid_rows=response.valid_rows,
            invalid_rows=response.invalid_rows,
            groups=len(response.preview_products)
        )
        return response

    def commit(
        self,
        store_id: str,
        filename: str,
        content: bytes,
        mapping: ColumnMapping,
        category: Optional[str] = None,
        content_type: Optional[str] = None
    ) -> ImportResult:
        """
        Import the file.

        A result with failed rows (or success=false) is returned, not raised.

        Raises:
            BackendApiError: Transport failure
        """
        data = {
            "sellerId": store_id,
            "columnMapping": json.dumps(mapping.to_payload()),
            "downloadImages": "true",
        }
        if category:
            data["category"] = category

        logger.info("csv_import_started", store_id=store_id, filename=filename, category=category)

        payload = self.api.request(
            "POST",
            IMPORT_PATH,
            data=data,
            files={"file": (filename, content, content_type or "text/csv")},
            timeout=self.commit_timeout
        )
        result = self.api.parse(ImportResult, payload, IMPORT_PATH)

        logger.info(
            "csv_import_finished",
            store_id=store_id,
            success=result.success,
            products_created=result.products_created,
            variants_created=result.variants_created,
            images_processed=result.images_processed,
            failed=result.failed,
            duration_ms=result.duration
        )
        return result


class CsvImportWorkflow:
    """
    CSV import screen.

    Holds the chosen store, category and file bytes between preview and
    commit so the same file can be resent.
    """

    def __init__(self, service: CsvImportService, notifier=None):
        self.service = service
        self.notifier = notifier
        self._lock = threading.Lock()
        self.state = ImportState.IDLE
        self.store: Optional[StoreListItem] = None
        self.category = StoreCategory.FASHION
        self.filename: Optional[str] = None
        self.content: Optional[bytes] = None
        self.content_type: Optional[str] = None
        self.hints: Optional[CsvFileHints] = None
        self.preview: Optional[CsvPreviewResponse] = None
        self.mapping: Optional[ColumnMapping] = None
        self.result: Optional[ImportResult] = None
        self.error: Optional[str] = None

    # ===================
    # SELECTION (idle screen)
    # ===================

    def select_store(self, store: Optional[StoreListItem]) -> None:
        self._require(ImportState.IDLE, "change store")
        self.store = store
        self.error = None

    def select_category(self, category: StoreCategory) -> None:
        self._require((ImportState.IDLE, ImportState.PREVIEW_SHOWN), "change category")
        self.category = category

    def select_file(self, filename: str, content: bytes, content_type: Optional[str] = None) -> CsvFileHints:
        """
        Choose the file to import.

        Raises:
            InvalidCsvFileError: Not a CSV file (previous choice is kept)
        """
        self._require(ImportState.IDLE, "change file")
        try:
            hints = inspect_csv(filename, content, content_type)
        except AppError as e:
            self.error = e.message
            raise

        self.filename = filename
        self.content = content
        self.content_type = content_type
        self.hints = hints
        self.error = None
        return hints

    @property
    def can_preview(self) -> bool:
        return self.state == ImportState.IDLE and self.store is not None and self.content is not None

    # ===================
    # PHASE 1: PREVIEW
    # ===================

    def run_preview(self) -> CsvPreviewResponse:
        """
        Send the file for a dry run.

        Raises:
            CsvFileRequiredError: No file chosen
            StoreNotSelectedError: No store chosen
            AppError: Preview failed; screen is back on idle with the error
        """
        if self.content is None:
            self.error = CsvFileRequiredError().message
            raise CsvFileRequiredError()
        if self.store is None:
            self.error = StoreNotSelectedError().message
            raise StoreNotSelectedError()

        self._transition(ImportState.IDLE, ImportState.PREVIEWING, "preview")
        self.error = None

        try:
            response = self.service.preview(self.store.id, self.filename, self.content, self.content_type)
        except AppError as e:
            self.preview = None
            self.mapping = None
            self.error = _display(e, PREVIEW_FALLBACK)
            self.state = ImportState.IDLE
            logger.warning("csv_preview_failed", store_id=self.store.id, error=self.error)
            raise

        self.preview = response
        self.mapping = response.detected_columns.model_copy()
        self.state = ImportState.PREVIEW_SHOWN
        return response

    def update_mapping(self, changes: dict[str, str]) -> ColumnMapping:
        """
        Repoint logical fields to other source columns.

        Keys may be camelCase (productName) or snake_case (product_name).

        Raises:
            ValidationError: Unknown logical field
        """
        self._require(ImportState.PREVIEW_SHOWN, "edit column mapping")

        updates = {}
        unknown = []
        for key, column in changes.items():
            field = _mapping_field(key)
            if field is None:
                unknown.append(key)
            else:
                updates[field] = (column or "").strip()

        if unknown:
            raise ValidationError(
                "Unknown column mapping field",
                code="UNKNOWN_MAPPING_FIELD",
                details={"fields": unknown, "allowed": list(COLUMN_MAPPING_FIELDS)}
            )

        self.mapping = ColumnMapping(**{**self.mapping.model_dump(), **updates})
        logger.info("csv_mapping_updated", fields=sorted(updates))
        return self.mapping

    @property
    def mapping_warnings(self) -> list[str]:
        if self.mapping is None or self.hints is None or not self.hints.headers:
            return []
        return [
            f'Column "{column}" not found in file'
            for column in missing_headers(self.mapping.to_payload(), self.hints.headers)
        ]

    def cancel_preview(self) -> None:
        """Back to the upload screen; store and file stay selected."""
        self._transition(ImportState.PREVIEW_SHOWN, ImportState.IDLE, "cancel preview")
        self.preview = None
        self.mapping = None
        self.error = None

    # ===================
    # PHASE 2: COMMIT
    # ===================

    def commit(self) -> ImportResult:
        """
        Import with the current mapping and category.

        Raises:
            AppError: Commit failed; screen is back on the preview with the error
        """
        if self.store is None:
            raise StoreNotSelectedError("Store not selected. Please go back and select a store.")
        if self.content is None:
            raise CsvFileRequiredError("CSV file not found. Please select the file again.")

        self._transition(ImportState.PREVIEW_SHOWN, ImportState.IMPORTING, "import")
        self.error = None

        try:
            result = self.service.commit(
                self.store.id,
                self.filename,
                self.content,
                self.mapping,
                category=self.category.value,
                content_type=self.content_type
            )
        except AppError as e:
            self.error = _display(e, IMPORT_FALLBACK)
            self.state = ImportState.PREVIEW_SHOWN
            logger.warning("csv_import_failed", store_id=self.store.id, error=self.error)
            raise

        self.result = result
        self.preview = None
        self.state = ImportState.RESULT_SHOWN

        if self.notifier is not None:
            if result.success:
                self.notifier.success(result.message or "Import completed")
            else:
                self.notifier.error(result.message or IMPORT_FALLBACK)

        return result

    def reset(self) -> None:
        """Start over with another file; store and category are kept."""
        self._require((ImportState.IDLE, ImportState.PREVIEW_SHOWN, ImportState.RESULT_SHOWN), "reset")
        self.state = ImportState.IDLE
        self.filename = None
        self.content = None
        self.content_type = None
        self.hints = None
        self.preview = None
        self.mapping = None
        self.result = None
        self.error = None

    # ===================
    # VIEW
    # ===================

    def view(self) -> CsvImportView:
        result = self.result if self.state == ImportState.RESULT_SHOWN else None
        return CsvImportView(
            state=self.state,
            store=self.store.model_dump(by_alias=True) if self.store else None,
            category=self.category.value,
            file=self.hints,
            can_preview=self.can_preview,
            preview=self.preview.model_dump(by_alias=True, mode="json") if self.preview else None,
            column_mapping=self.mapping.to_payload() if self.mapping else None,
            mapping_warnings=self.mapping_warnings,
            result=result.model_dump(by_alias=True, mode="json") if result else None,
            result_title=(
                ("Import Completed!" if result.success else "Import Failed") if result else None
            ),
            duration_seconds=result.duration_seconds if result else None,
            error=self.error
        )

    # ===================
    # HELPERS
    # ===================

    def _require(self, allowed, action: str) -> None:
        allowed = allowed if isinstance(allowed, tuple) else (allowed,)
        if self.state not in allowed:
            raise InvalidImportStateError(action, self.state.value)

    def _transition(self, expected: ImportState, target: ImportState, action: str) -> None:
        with self._lock:
            self._require(expected, action)
            self.state = target


def _mapping_field(key: str) -> Optional[str]:
    for field in COLUMN_MAPPING_FIELDS:
        if key in (field, to_camel(field)):
            return field
    return None


def _display(error: AppError, fallback: str) -> str:
    if isinstance(error, BackendApiError):
        return error.display_message(fallback)
    return error.message
