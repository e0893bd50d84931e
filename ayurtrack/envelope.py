# -*- coding: utf-8 -*-
"""Uniform response envelope and the exception handlers that produce it."""

from __future__ import annotations

import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .errors import AyurTrackError

logger = logging.getLogger(__name__)


def ok(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def fail(error: str, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": error}
    if message:
        body["message"] = message
    return body


def _validation_message(exc: RequestValidationError) -> str:
    missing = [str(e["loc"][-1]) for e in exc.errors() if e.get("type") == "missing"]
    if missing:
        return "Missing required fields: " + ", ".join(missing)
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Invalid request: " + "; ".join(parts)


def install_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(
                status_code=404,
                content=fail("Route not found", f"Cannot {request.method} {request.url.path}"),
            )
        return JSONResponse(status_code=exc.status_code, content=fail(str(exc.detail)), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content=fail(_validation_message(exc)))

    @app.exception_handler(AyurTrackError)
    async def _domain_error(request: Request, exc: AyurTrackError) -> JSONResponse:
        if exc.status >= 500:
            logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status, content=_error_body(exc, exc.status, settings))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Global error handler: %s %s", request.method, request.url.path)
        status = getattr(exc, "status", None)
        if not isinstance(status, int):
            status = 500
        return JSONResponse(status_code=status, content=_error_body(exc, status, settings))


def _error_body(exc: Exception, status: int, settings: Settings) -> Dict[str, Any]:
    body = fail(str(exc) or "Internal server error")
    if status >= 500 and settings.env == "development":
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body

