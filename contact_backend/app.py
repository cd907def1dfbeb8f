"""
FastAPI application entry point for the contact backend.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from contact_backend import admin
from contact_backend.config import get_settings
from contact_backend.dependencies import get_submission_store
from contact_backend.middleware import (
    BodySizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from contact_backend.retention import cleanup_loop, run_cleanup
from contact_backend.routes import router

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "message": message}
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    store = get_submission_store()
    run_cleanup(store)
    task = app.state.cleanup_task = asyncio.create_task(
        cleanup_loop(store, settings.cleanup_interval_hours * 3600)
    )
    logger.info(
        "Contact backend started (environment: %s, retention: %d days)",
        settings.environment,
        settings.retention_days,
    )
    try:
        yield
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Contact Backend", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    app.add_middleware(SecurityHeadersMiddleware, headers=settings.security_headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return _error(404, "Endpoint not found.")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        problems = []
        for err in exc.errors():
            field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
            problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
        return _error(400, ". ".join(problems) or "Invalid request body")

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "A server error occurred. Please try again later.")

    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(admin.router, prefix=f"{settings.api_prefix}/admin")
    return app


app = create_app()
