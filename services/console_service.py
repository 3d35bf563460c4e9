"""
Admin console container.

One AdminConsole holds every collaborator of a signed-in console
session: gateway client, identity provider, session storage, auth
context, query cache, services and screen workflows. The app creates
one at startup; tests build isolated ones with fake collaborators.
"""

from typing import Callable, Optional

import requests
import structlog

from config import Settings, get_settings, reset_http_session
from integrations.identity_provider import FirebaseIdentityProvider
from services.analytics_service import AnalyticsService
from services.api_client import ApiClient
from services.auth_service import AdminAuthContext
from services.csv_import_service import CsvImportService, CsvImportWorkflow
from services.navigation_service import LOGIN_PATH, Navigator
from services.notification_service import Notifier
from services.product_service import ProductService
from services.query_cache_service import QueryCache
from services.store_directory_service import (
    StoreDetailWorkflow,
    StoreDirectory,
    StoreEditor,
    StoreVerificationPanel,
)
from services.store_selector_service import StoreSelector
from services.store_service import StoreService
from utils.session_storage import FileSessionStorage

logger = structlog.get_logger(__name__)

DASHBOARD_PATH = "/dashboard"


class AdminConsole:
    """
    Wiring and lifecycle of one console.

    Args:
        settings: Application settings
        http_session: Outbound session for backend calls (shared one if None)
        identity_provider: Identity provider (Firebase REST if None)
        storage: Session storage (JSON file at settings.session_storage_path if None)
        sleep: Sleep used between cache retries (time.sleep if None)
    """

    def __init__(
        self,
        settings: Settings,
        http_session: Optional[requests.Session] = None,
        identity_provider=None,
        storage=None,
        sleep: Optional[Callable[[float], None]] = None
    ):
        self.settings = settings
        self._owns_http_session = http_session is None

        self.storage = storage if storage is not None else FileSessionStorage(settings.session_storage_path)
        self.navigator = Navigator()
        self.notifier = Notifier()
        self.identity_provider = identity_provider or FirebaseIdentityProvider(
            api_key=settings.firebase_api_key,
            storage=self.storage,
            identity_toolkit_url=settings.identity_toolkit_url,
            secure_token_url=settings.secure_token_url
        )

        self.api = ApiClient(
            base_url=settings.api_base_url,
            identity_provider=self.identity_provider,
            navigator=self.navigator,
            timeout=settings.request_timeout_seconds,
            session=http_session
        )
        cache_overrides = {"sleep": sleep} if sleep is not None else {}
        self.cache = QueryCache.from_settings(settings, **cache_overrides)
        self.auth = AdminAuthContext(self.api, self.identity_provider, self.storage)

        # Stores
        self.stores = StoreService(self.api, self.cache, self.notifier)
        self.directory = StoreDirectory(self.stores, settings.store_list_page_size)
        self.editor = StoreEditor(self.stores)
        self.verification = StoreVerificationPanel(self.stores)
        self.detail = StoreDetailWorkflow(self.stores, self.editor, self.verification)
        self.selector = StoreSelector(
            self.stores,
            page_size=settings.store_selector_page_size,
            debounce_seconds=settings.search_debounce_ms / 1000
        )

        # Products
        self.csv_import = CsvImportWorkflow(
            CsvImportService(self.api, commit_timeout=settings.long_request_timeout_seconds),
            self.notifier
        )
        self.products = ProductService(self.api, self.notifier)
        self.analytics = AnalyticsService(self.api, self.cache)

    # ===================
    # LIFECYCLE
    # ===================

    def init(self) -> None:
        logger.info(
            "console_starting",
            backend_url=self.settings.api_base_url,
            identity_configured=self.settings.identity_configured
        )
        self.auth.init()
        logger.info("console_ready", auth_status=self.auth.status.value)

    def teardown(self) -> None:
        self.auth.teardown()
        if self._owns_http_session:
            reset_http_session()
        logger.info("console_stopped")

    # ===================
    # SESSION
    # ===================

    def login(self, email: str, password: str):
        self.navigator.visit(LOGIN_PATH)
        admin = self.auth.login(email, password)
        self.navigator.visit(DASHBOARD_PATH)
        return admin

    def logout(self) -> None:
        self.auth.logout()
        self.cache.clear()
        self.navigator.visit(LOGIN_PATH)


def build_console(settings: Optional[Settings] = None, **kwargs) -> AdminConsole:
    """Console from application settings."""
    return AdminConsole(settings or get_settings(), **kwargs)
