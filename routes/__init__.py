"""
API route modules.

Each module defines routes for one screen of the console.
"""

from routes.auth import router as auth_router
from routes.dashboard import router as dashboard_router
from routes.stores import router as stores_router
from routes.store_proxy import router as store_proxy_router
from routes.products import router as products_router
from routes.csv_import import router as csv_import_router
from routes.notifications import router as notifications_router

__all__ = [
    "auth_router",
    "dashboard_router",
    "stores_router",
    "store_proxy_router",
    "products_router",
    "csv_import_router",
    "notifications_router",
]
