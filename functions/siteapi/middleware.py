"""
ASGI middleware: permissive CORS with blanket OPTIONS handling, request logging.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from siteapi.errors import error_body

logger = logging.getLogger(__name__)

ALLOW_METHODS = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"


class CorsMiddleware:
    """
    Adds CORS headers to every HTTP response.

    Any OPTIONS request is answered here with 204 and an empty body, whether or
    not it carries preflight headers or matches a route. Exceptions that escape
    the app are rendered here as the 500 envelope so they keep the headers.
    """

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str] = ("*",)):
        self.app = app
        self.allowed_origins = [o for o in allowed_origins if o] or ["*"]

    def cors_headers(self, origin: str | None) -> dict[str, str]:
        headers = {
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
        }
        if "*" in self.allowed_origins:
            headers["Access-Control-Allow-Origin"] = "*"
        elif origin and origin in self.allowed_origins:
            headers["Access-Control-Allow-Origin"] = origin
            headers["Vary"] = "Origin"
        return headers

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        origin = Headers(scope=scope).get("origin")
        headers = self.cors_headers(origin)

        if scope["method"] == "OPTIONS":
            response = Response(status_code=204, headers=headers)
            await response(scope, receive, send)
            return

        response_started = False

        async def send_with_cors(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
                mutable = MutableHeaders(scope=message)
                for key, value in headers.items():
                    mutable[key] = value
            await send(message)

        try:
            await self.app(scope, receive, send_with_cors)
        except Exception as exc:
            if response_started:
                raise
            logger.exception(
                "Unhandled error on %s %s", scope["method"], scope["path"]
            )
            response = JSONResponse(
                status_code=500,
                content=error_body("Internal server error", str(exc)),
                headers=headers,
            )
            await response(scope, receive, send)


class RequestLoggerMiddleware:
    """Logs method, path, status and duration of every HTTP request."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status = {"code": 500}

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                status["code"] = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            dur_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s -> %d in %.1fms",
                scope["method"],
                scope["path"],
                status["code"],
                dur_ms,
            )
