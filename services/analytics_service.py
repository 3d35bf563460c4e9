"""
Platform analytics for the dashboard.
"""

import structlog

from models.analytics import AnalyticsOverview, DashboardView
from utils.async_result import capture

logger = structlog.get_logger(__name__)

OVERVIEW_KEY = ("analytics", "overview")
OVERVIEW_PATH = "/admin/analytics/overview"


class AnalyticsService:
    """Cached platform counters."""

    def __init__(self, api, cache):
        self.api = api
        self.cache = cache

    def get_overview(self) -> AnalyticsOverview:
        def fetch() -> AnalyticsOverview:
            return self.api.parse(AnalyticsOverview, self.api.get(OVERVIEW_PATH), OVERVIEW_PATH)

        return self.cache.fetch(OVERVIEW_KEY, fetch)

    def dashboard(self, admin) -> DashboardView:
        """
        Dashboard screen for the signed-in admin.

        A failed analytics read leaves analytics empty with an error
        message; the rest of the screen still renders.
        """
        overview = capture(self.get_overview, "Failed to load analytics")

        return DashboardView(
            admin_email=admin.email if admin else None,
            admin_role=admin.role if admin else None,
            permissions=list(admin.permissions) if admin else [],
            analytics=overview.data.model_dump(by_alias=True) if overview.ok else None,
            analytics_error=overview.error
        )
