"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    ApiSchema,
    ActionResponse,
    PayloadOk,
    PayloadInvalid,
    parse_payload,
)
from models.admin import (
    AuthStatus,
    Admin,
    LoginRequest,
    LoginResponse,
    SessionView,
)
from models.store import (
    RouteProductStatus,
    REQUESTABLE_ROUTE_STATUSES,
    StoreCategory,
    SellerRegistrationType,
    StoreListItem,
    StoreListResponse,
    StoreDetail,
    StoreAnalytics,
    EDITABLE_STORE_FIELDS,
    StoreEditForm,
    UpdateStoreRequest,
    StoreActionResponse,
    CreateStoreForm,
    CreateStoreRequest,
    CreateStoreResponse,
    StoreListView,
    GstVerificationRequest,
    RouteProductStatusRequest,
    StoreSelectionRequest,
)
from models.analytics import (
    AnalyticsOverview,
    DashboardView,
)
from models.product import (
    ImageSharingStrategy,
    MAIN_CATEGORIES,
    SUB_CATEGORIES,
    VariantInput,
    BulkProductForm,
    VariantPayload,
    BulkCreateProductRequest,
    BulkCreateProductResponse,
)
from models.csv_import import (
    ImportState,
    COLUMN_MAPPING_FIELDS,
    ColumnMapping,
    CsvProductRow,
    CsvProductGroup,
    CsvPreviewResponse,
    ImportRowError,
    ImportResult,
    CsvFileHints,
    CsvImportView,
    CsvCategoryRequest,
)

__all__ = [
    # Base
    "BaseSchema",
    "ApiSchema",
    "ActionResponse",
    "PayloadOk",
    "PayloadInvalid",
    "parse_payload",

    # Admin
    "AuthStatus",
    "Admin",
    "LoginRequest",
    "LoginResponse",
    "SessionView",

    # Store
    "RouteProductStatus",
    "REQUESTABLE_ROUTE_STATUSES",
    "StoreCategory",
    "SellerRegistrationType",
    "StoreListItem",
    "StoreListResponse",
    "StoreDetail",
    "StoreAnalytics",
    "EDITABLE_STORE_FIELDS",
    "StoreEditForm",
    "UpdateStoreRequest",
    "StoreActionResponse",
    "CreateStoreForm",
    "CreateStoreRequest",
    "CreateStoreResponse",
    "StoreListView",
    "GstVerificationRequest",
    "RouteProductStatusRequest",
    "StoreSelectionRequest",

    # Analytics
    "AnalyticsOverview",
    "DashboardView",

    # Product
    "ImageSharingStrategy",
    "MAIN_CATEGORIES",
    "SUB_CATEGORIES",
    "VariantInput",
    "BulkProductForm",
    "VariantPayload",
    "BulkCreateProductRequest",
    "BulkCreateProductResponse",

    # CSV import
    "ImportState",
    "COLUMN_MAPPING_FIELDS",
    "ColumnMapping",
    "CsvProductRow",
    "CsvProductGroup",
    "CsvPreviewResponse",
    "ImportRowError",
    "ImportResult",
    "CsvFileHints",
    "CsvImportView",
    "CsvCategoryRequest",
]
