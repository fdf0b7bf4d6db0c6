"""
FastAPI application entry point for the site API.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from siteapi.config import get_settings
from siteapi.errors import install_error_handlers
from siteapi.middleware import CorsMiddleware, RequestLoggerMiddleware
from siteapi.routes import router


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s:%(lineno)d - %(message)s",
    )
    app = FastAPI(title="Site API", version=settings.service_version)
    install_error_handlers(app)
    app.add_middleware(RequestLoggerMiddleware)
    # Added last so it wraps the logger and short-circuits OPTIONS first.
    app.add_middleware(CorsMiddleware, allowed_origins=settings.allowed_origin_list)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
