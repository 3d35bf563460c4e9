"""
Backend connection management.

Provides the shared outbound HTTP session used to reach the commerce
backend, plus a reachability probe for the health endpoint.
"""

from functools import lru_cache
import requests
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


@lru_cache()
def get_http_session() -> requests.Session:
    """
    Get cached requests.Session instance.

    Uses lru_cache to ensure connection pooling is shared.
    Call reset_http_session() to drop it.

    Returns:
        Session: requests session with JSON accept header
    """
    logger.info(
        "creating_backend_session",
        url=settings.api_base_url
    )
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    return session


class BackendSession:
    """
    Context manager for outbound backend calls with logging.

    Usage:
        with BackendSession("list_stores") as http:
            http.get(url)
    """

    def __init__(self, operation_name: str):
        self.operation_name = operation_name

    def __enter__(self) -> requests.Session:
        logger.debug(
            "backend_operation_start",
            operation=self.operation_name
        )
        return get_http_session()

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "backend_operation_failed",
                operation=self.operation_name,
                error=str(exc_val),
                error_type=exc_type.__name__
            )
        else:
            logger.debug(
                "backend_operation_complete",
                operation=self.operation_name
            )
        return False  # Don't suppress exceptions


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection(timeout: float = 5.0) -> dict:
    """
    Check backend reachability.

    Any HTTP answer below 500 counts as reachable; the root path may
    well answer 404 or 401.

    Returns:
        dict: Connection status with details
    """
    try:
        with BackendSession("health_probe") as http:
            response = http.get(settings.api_base_url, timeout=timeout)

        return {
            "status": "healthy" if response.status_code < 500 else "degraded",
            "backend_url": settings.api_base_url,
            "status_code": response.status_code
        }

    except requests.RequestException as e:
        return {
            "status": "unhealthy",
            "backend_url": settings.api_base_url,
            "error": str(e)
        }


def reset_http_session():
    """
    Close and forget the cached HTTP session.

    Call this on shutdown or after config changes.
    """
    if get_http_session.cache_info().currsize:
        get_http_session().close()
    get_http_session.cache_clear()
    logger.info("backend_session_reset")
