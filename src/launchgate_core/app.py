from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from launchgate_core import __version__
from launchgate_core.api.models import fail
from launchgate_core.api.v1.router import router as v1_router
from launchgate_core.auth import require_install_token
from launchgate_core.config import ensure_install_token, load_core_config, resolve_configured_paths
from launchgate_core.db import resolve_db_path
from launchgate_core.home import ensure_launchgate_layout, resolve_launchgate_home
from launchgate_core.logs import attach_file_logging
from launchgate_core.services import build_services

logger = logging.getLogger(__name__)


def _status_to_code(status_code: int) -> str:
    if status_code == 401:
        return "unauthorized"
    if status_code == 403:
        return "forbidden"
    if status_code == 404:
        return "not_found"
    if status_code == 422:
        return "validation_error"
    if 400 <= status_code < 500:
        return "client_error"
    if status_code == 500:
        return "internal_error"
    return "server_error"


def create_app(*, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """Build the local API.

    `transport` replaces the network for outbound registration and
    reachability calls (tests pass an `httpx.MockTransport`).
    """

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        home = resolve_launchgate_home()
        paths = ensure_launchgate_layout(home)
        config = load_core_config(paths)
        paths = resolve_configured_paths(paths, config)
        config = ensure_install_token(paths, config)

        attach_file_logging(paths, config)

        logger.info("LaunchGate Core starting up")
        logger.info(f"Logs directory: {paths.logs_dir}")
        logger.info(f"Registration endpoint: {config.registration.registration_endpoint}")

        services = build_services(
            db_path=resolve_db_path(paths),
            config=config,
            transport=transport,
        )

        app.state.launchgate_home = home
        app.state.launchgate_paths = paths
        app.state.launchgate_config = config
        app.state.services = services

        try:
            yield
        finally:
            await services.aclose()

    app = FastAPI(title="LaunchGate Core", version=__version__, lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=fail(
                code="validation_error",
                message="Request validation failed",
                details=exc.errors(),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(
                code=_status_to_code(exc.status_code),
                message=str(exc.detail),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(
                code=_status_to_code(exc.status_code),
                message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=fail(code="internal_error", message="Internal server error").model_dump(
                mode="json"
            ),
        )

    app.include_router(v1_router, dependencies=[Depends(require_install_token)])

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
