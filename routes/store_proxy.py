"""
Same-origin proxy for the backend store list.

Forwards page, limit, search and the caller's Authorization header to
GET /admin/stores unchanged. It adds no logic of its own.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import JSONResponse
import requests
import structlog

from routes.dependencies import get_console
from services.console_service import AdminConsole

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/stores")
def proxy_stores(
    page: str = Query("1"),
    limit: str = Query("50"),
    search: Optional[str] = Query(None),
    authorization: Optional[str] = Header(None),
    console: AdminConsole = Depends(get_console)
):
    """
    Relay GET /admin/stores.

    Backend errors come back as {"error": ...} with the backend status;
    anything unexpected is a 500.
    """
    params = {"page": page, "limit": limit}
    if search:
        params["search"] = search

    headers = {"Content-Type": "application/json"}
    if authorization:
        headers["Authorization"] = authorization

    url = f"{console.api.base_url}/admin/stores"
    logger.info("proxy_stores_request", page=page, limit=limit, search=search)

    try:
        response = console.api.session.get(
            url,
            params=params,
            headers=headers,
            timeout=console.api.timeout
        )

        if not response.ok:
            error_data = response.json() if response.text else {}
            logger.error("proxy_backend_error", status=response.status_code, body=response.text[:500])
            error = error_data.get("error") if isinstance(error_data, dict) else None
            return JSONResponse(
                status_code=response.status_code,
                content={"error": error or "Failed to fetch stores from backend"}
            )

        return JSONResponse(content=response.json())

    except (requests.RequestException, ValueError) as e:
        logger.error("proxy_stores_failed", error=str(e), type=type(e).__name__)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"}
        )
