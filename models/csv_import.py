"""
CSV product import schemas.

Grouping, validation and price-range summaries are computed by the
backend preview endpoint; these models only carry them.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field

from models.base import ApiSchema, BaseSchema
from models.store import StoreCategory


class ImportState(str, Enum):
    """Screens of the CSV import workflow."""
    IDLE = "idle"
    PREVIEWING = "previewing"
    PREVIEW_SHOWN = "preview_shown"
    IMPORTING = "importing"
    RESULT_SHOWN = "result_shown"


# Logical import fields, snake_case; sent camelCase.
COLUMN_MAPPING_FIELDS = (
    "product_name",
    "variant",
    "sku",
    "price",
    "compare_at_price",
    "in_stock",
    "product_url",
    "description",
    "images",
)


class ColumnMapping(ApiSchema):
    """Logical import field -> source CSV column header."""
    product_name: str = ""
    variant: str = ""
    sku: str = ""
    price: str = ""
    compare_at_price: str = ""
    in_stock: str = ""
    product_url: str = ""
    description: str = ""
    images: str = ""

    def to_payload(self) -> dict:
        """All nine keys, always; blank columns included."""
        return self.model_dump(by_alias=True, include=set(COLUMN_MAPPING_FIELDS))


class CsvProductRow(ApiSchema):
    """One CSV row as the backend understood it."""
    row_number: int
    product_name: str
    variant: Optional[str] = None
    sku: str = ""
    price: float = 0
    compare_at_price: Optional[float] = None
    in_stock: bool = True
    product_url: Optional[str] = None
    description: Optional[str] = None
    image_urls: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class CsvProductGroup(ApiSchema):
    """Rows sharing a detected base product name."""
    base_product_name: str
    variants: list[CsvProductRow] = Field(default_factory=list)
    total_images: int = 0
    price_range: str = ""


class CsvPreviewResponse(ApiSchema):
    """Answer of POST /admin/products/csv/preview."""
    success: bool = True
    message: Optional[str] = None
    detected_columns: ColumnMapping
    total_rows: int
    valid_rows: int
    invalid_rows: int
    preview_products: list[CsvProductGroup] = Field(default_factory=list)
    invalid_row_details: Optional[list[dict[str, Any]]] = None
    warnings: list[str] = Field(default_factory=list)


class ImportRowError(ApiSchema):
    """A row the commit could not import."""
    row_number: int
    product_name: Optional[str] = None
    error: str


class ImportResult(ApiSchema):
    """
    Answer of POST /admin/products/csv/import.

    Partial success is normal: counts and errors are reported together.
    Duration is in milliseconds.
    """
    success: bool
    message: str = ""
    products_created: int = 0
    variants_created: int = 0
    images_processed: int = 0
    failed: int = 0
    errors: list[ImportRowError] = Field(default_factory=list)
    duration: float = 0

    @property
    def duration_seconds(self) -> float:
        return round(self.duration / 1000, 2)


class CsvFileHints(BaseSchema):
    """What the console could tell about the file locally, before upload."""
    filename: str
    size_bytes: int
    encoding: Optional[str] = None
    delimiter: Optional[str] = None
    headers: list[str] = Field(default_factory=list)
    data_rows: Optional[int] = None


class CsvImportView(BaseSchema):
    """CSV import screen."""
    state: ImportState
    store: Optional[dict] = None
    category: Optional[str] = None
    file: Optional[CsvFileHints] = None
    can_preview: bool = False
    preview: Optional[dict] = None
    column_mapping: Optional[dict] = None
    mapping_warnings: list[str] = Field(default_factory=list)
    result: Optional[dict] = None
    result_title: Optional[str] = None
    duration_seconds: Optional[float] = None
    error: Optional[str] = None


class CsvCategoryRequest(ApiSchema):
    category: StoreCategory

