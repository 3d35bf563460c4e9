"""
Platform analytics schemas.
"""

from typing import Optional

from models.base import ApiSchema, BaseSchema


class AnalyticsOverview(ApiSchema):
    """Platform-wide counters from GET /admin/analytics/overview."""
    total_stores: int = 0
    total_products: int = 0
    total_orders: int = 0
    images_processed: int = 0


class DashboardView(BaseSchema):
    """Dashboard screen: who is signed in plus the overview counters."""
    admin_email: Optional[str] = None
    admin_role: Optional[str] = None
    permissions: list[str] = []
    analytics: Optional[dict] = None
    analytics_error: Optional[str] = None
