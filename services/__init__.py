"""
Business logic services.

Each service handles one area of the console; AdminConsole wires them.
"""

from services.api_client import ApiClient
from services.auth_service import AdminAuthContext
from services.navigation_service import Navigator
from services.notification_service import Notifier, Notification, NotificationKind
from services.query_cache_service import QueryCache
from services.store_service import StoreService
from services.store_directory_service import (
    StoreDirectory,
    StoreDetailWorkflow,
    StoreEditor,
    StoreVerificationPanel,
)
from services.store_selector_service import StoreSelector
from services.csv_import_service import CsvImportService, CsvImportWorkflow
from services.product_service import ProductService
from services.analytics_service import AnalyticsService
from services.console_service import AdminConsole, build_console

__all__ = [
    "ApiClient",
    "AdminAuthContext",
    "Navigator",
    "Notifier",
    "Notification",
    "NotificationKind",
    "QueryCache",
    "StoreService",
    "StoreDirectory",
    "StoreDetailWorkflow",
    "StoreEditor",
    "StoreVerificationPanel",
    "StoreSelector",
    "CsvImportService",
    "CsvImportWorkflow",
    "ProductService",
    "AnalyticsService",
    "AdminConsole",
    "build_console",
]
