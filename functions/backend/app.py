"""
FastAPI application entry point for the portfolio backend.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.config import Settings, get_settings
from backend.routes import router
from backend.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(message=message).model_dump()
    )


def _install_error_handlers(app: FastAPI, settings: Settings) -> None:
    index_file = Path(settings.static_dir) / "index.html" if settings.static_dir else None

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code != 404:
            return _error(exc.status_code, str(exc.detail))
        if request.url.path.startswith(f"{settings.api_prefix}/"):
            return _error(404, "API endpoint not found")
        # Single-page routing: unknown site paths render the main page.
        if request.method == "GET" and index_file is not None and index_file.is_file():
            return FileResponse(index_file)
        return _error(404, "Route not found")

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        logger.info("Malformed request to %s: %s", request.url.path, exc.errors())
        return _error(400, "Invalid request body")

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        logger.exception("Server error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app() -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "%s v%s started; endpoints: GET %s/health, POST %s/contact, "
            "POST %s/analytics/view",
            settings.service_name,
            settings.service_version,
            settings.api_prefix,
            settings.api_prefix,
            settings.api_prefix,
        )
        yield

    app = FastAPI(
        title="Portfolio Backend",
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(
            "%s - %s %s",
            time.strftime("%H:%M:%S", time.localtime()),
            request.method,
            request.url.path,
        )
        return await call_next(request)

    _install_error_handlers(app, settings)
    app.include_router(router, prefix=settings.api_prefix)
    if settings.static_dir:
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="site")
    return app


app = create_app()
