from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lfsgate_core import __version__
from lfsgate_core.api.models import fail
from lfsgate_core.auth import build_admin_gate
from lfsgate_core.config import apply_env_overrides, load_core_config, resolve_configured_paths
from lfsgate_core.db import resolve_db_path
from lfsgate_core.db.migrate import apply_migrations
from lfsgate_core.home import ensure_lfsgate_layout, resolve_lfsgate_home
from lfsgate_core.metastore import MetaStore
from lfsgate_core.mgmt.router import assets_router as mgmt_assets_router
from lfsgate_core.mgmt.router import router as mgmt_router
from lfsgate_core.storage.manager import build_content_store

logger = logging.getLogger(__name__)


def _status_to_code(status_code: int) -> str:
    if status_code == 401:
        return "unauthorized"
    if status_code == 403:
        return "forbidden"
    if status_code == 404:
        return "not_found"
    if status_code == 409:
        return "conflict"
    if status_code == 422:
        return "validation_error"
    if 400 <= status_code < 500:
        return "client_error"
    return "server_error"


def create_app() -> FastAPI:
    # Config is resolved up front: the admin gate is built from it, not looked up per request.
    home = resolve_lfsgate_home()
    paths = ensure_lfsgate_layout(home)
    config = apply_env_overrides(load_core_config(paths))
    paths = resolve_configured_paths(paths, config)

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        # Configure Logging
        log_path = paths.logs_dir / "core.log"
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=config.logging.max_size_mb * 1024 * 1024,
            backupCount=config.logging.backup_count,
            encoding="utf-8",
        )
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        file_handler.setFormatter(formatter)

        root = logging.getLogger()
        root.setLevel(logging.INFO)
        # Avoid adding duplicate handlers if reloaded
        if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
            root.addHandler(file_handler)
        else:
            file_handler.close()

        logger.info("LFSGate Core starting up")
        logger.info(f"Logs directory: {paths.logs_dir}")
        if not config.admin.enabled:
            logger.info("Admin credentials not configured; /mgmt is disabled")

        db_path = resolve_db_path(paths)
        apply_migrations(db_path)

        app.state.lfsgate_home = home
        app.state.lfsgate_paths = paths
        app.state.lfsgate_config = config
        app.state.db_path = db_path

        app.state.meta_store = MetaStore(db_path)
        app.state.content_store = build_content_store(paths=paths, config=config)

        yield

    app = FastAPI(title="LFSGate Core", version=__version__, lifespan=_lifespan)

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
            headers=exc.headers,
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
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error: %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=fail(code="internal_error", message="Internal server error").model_dump(
                mode="json"
            ),
        )

    app.include_router(mgmt_router, dependencies=[Depends(build_admin_gate(config.admin))])
    app.include_router(mgmt_assets_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
