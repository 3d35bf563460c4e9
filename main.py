"""
Store Admin Console: Main Application

FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from config import settings, check_connection
from exceptions import AppError
from services.console_service import AdminConsole, build_console

logging.basicConfig(level=settings.log_level, format="%(message)s")

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


def create_app(console: Optional[AdminConsole] = None) -> FastAPI:
    """
    Build the application.

    Args:
        console: Console to serve; one is built from settings at startup if None
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup: Build the console, restore any saved session, probe the backend
        Shutdown: Tear the console down
        """
        logger.info(
            "application_starting",
            environment=settings.environment,
            debug=settings.debug
        )

        app.state.console = console or build_console(settings)
        app.state.console.init()

        if console is None:
            backend_status = await run_in_threadpool(check_connection)
            if backend_status["status"] == "healthy":
                logger.info("backend_reachable", url=backend_status["backend_url"])
            else:
                logger.error(
                    "backend_unreachable",
                    url=backend_status["backend_url"],
                    error=backend_status.get("error")
                )

        yield

        # Shutdown
        logger.info("application_shutting_down")
        app.state.console.teardown()

    app = FastAPI(
        title="Store Admin Console",
        description="Administration of stores and product catalog imports",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ===================
    # ROUTES
    # ===================

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint.

        Returns:
            Console status and backend reachability
        """
        backend_status = await run_in_threadpool(check_connection)

        return {
            "status": "healthy" if backend_status["status"] == "healthy" else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "backend": backend_status
        }

    @app.get("/")
    async def root():
        """
        Root endpoint.

        Returns:
            API information
        """
        return {
            "name": "Store Admin Console",
            "version": "0.1.0",
            "docs": "/docs" if settings.debug else None,
            "health": "/health",
            "endpoints": {
                "auth": "/api/auth",
                "dashboard": "/api/dashboard",
                "stores": "/api/stores",
                "products": "/api/products",
                "csv_import": "/api/products/csv",
                "notifications": "/api/notifications",
            }
        }

    # ===================
    # EXCEPTION HANDLERS
    # ===================

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Errors raised outside route bodies, e.g. by the session guard."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Global exception handler.

        Catches unhandled exceptions and returns standard error format.
        """
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__
        )

        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "details": str(exc) if settings.debug else None,
                    "timestamp": datetime.now(timezone.utc).isoformat()
                }
            }
        )

    # ===================
    # INCLUDE ROUTERS
    # ===================
    from routes import (
        auth_router,
        dashboard_router,
        stores_router,
        store_proxy_router,
        products_router,
        csv_import_router,
        notifications_router,
    )

    app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
    app.include_router(dashboard_router, prefix="/api/dashboard", tags=["Dashboard"])
    app.include_router(stores_router, prefix="/api/stores", tags=["Stores"])
    app.include_router(store_proxy_router, prefix="/api/admin", tags=["Proxy"])
    app.include_router(csv_import_router, prefix="/api/products/csv", tags=["CSV Import"])
    app.include_router(products_router, prefix="/api/products", tags=["Products"])
    app.include_router(notifications_router, prefix="/api/notifications", tags=["Notifications"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
