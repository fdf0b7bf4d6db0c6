"""
Error types and FastAPI exception handlers producing the JSON envelope.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

REQUEST_PARTS = ("body", "query", "path")


class ApiError(Exception):
    """An error rendered as ``{success: false, error, message}``."""

    def __init__(
        self, status_code: int, error: str, message: Optional[str] = None
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.message = message


def error_body(error: str, message: Optional[str] = None) -> dict:
    body = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    return body


@contextmanager
def server_error(error: str) -> Iterator[None]:
    """Re-raise unexpected failures inside the block as a 500 ApiError."""
    try:
        yield
    except ApiError:
        raise
    except Exception as exc:
        logger.exception(error)
        raise ApiError(500, error, message=str(exc)) from exc


def _describe_validation(exc: RequestValidationError) -> str:
    missing, invalid = [], []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in REQUEST_PARTS]
        name = ".".join(loc) or "body"
        (missing if err.get("type") == "missing" else invalid).append(name)
    parts = []
    if missing:
        verb = "is" if len(missing) == 1 else "are"
        parts.append(f"{', '.join(missing)} {verb} required")
    if invalid:
        parts.append(f"invalid value for {', '.join(invalid)}")
    return "; ".join(parts) or "Invalid request"


def _route_validation_message(request: Request) -> Optional[str]:
    # Body models may carry a fixed ``validation_message`` ClassVar.
    route = request.scope.get("route")
    body_params = getattr(getattr(route, "dependant", None), "body_params", None)
    for param in body_params or []:
        annotation = getattr(param.field_info, "annotation", None)
        message = getattr(annotation, "validation_message", None)
        if message:
            return message
    return None


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError):
        return JSONResponse(
            status_code=exc.status_code, content=error_body(exc.error, exc.message)
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        message = _route_validation_message(request) or _describe_validation(exc)
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return JSONResponse(
            status_code=400, content=error_body("Validation error", message)
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        message = None
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Route {request.method} {request.url.path} not found"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), message),
            headers=getattr(exc, "headers", None),
        )
