"""
FastAPI application for the AgenticVoice access-control service.

Routes:
- GET  /health                       : liveness check
- *    /api/v1/admin/rbac/...        : role and permission administration
"""

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config.settings import Settings, get_validated_settings
from services.logging_config import configure_logging, request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use; loaded from the environment and validated
            for production when omitted.
    """
    if settings is None:
        settings = get_validated_settings()

    configure_logging(level=settings.log_level, json_output=settings.log_json)

    app = FastAPI(title=settings.name, version=settings.version, debug=settings.debug)
    app.state.settings = settings

    # =========================================================================
    # MIDDLEWARE (last added = first executed)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
    )

    @app.middleware("http")
    async def correlation_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    # =========================================================================
    # ROUTERS
    # =========================================================================

    from admin_panel.api import rbac_router
    app.include_router(rbac_router, prefix="/api/v1")
    logger.info("RBAC admin API enabled")

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    return app
