from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.staticfiles import StaticFiles

from firescan import __version__
from firescan.config import load_config, resolve_config_path
from firescan.context import ViewerContext
from firescan.gateway import FirestoreGateway, create_client
from firescan.ui.rendering import STATIC_DIR, load_templates, resolve_templates_dir
from firescan.ui.router import router as ui_router

logger = logging.getLogger(__name__)


def build_context(
    config_path: Path | None = None, templates_dir: Path | None = None
) -> ViewerContext:
    """Load config, compile templates and connect to Firestore.

    Raises ConfigError, TemplateError or ClientInitError; each is fatal at startup.
    """

    config = load_config(config_path or resolve_config_path())
    templates = load_templates(templates_dir or resolve_templates_dir())
    gateway = FirestoreGateway(create_client(config))
    return ViewerContext(config=config, gateway=gateway, templates=templates)


def create_app(context: ViewerContext | None = None) -> FastAPI:
    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        ctx = context if context is not None else build_context()
        app.state.viewer = ctx

        logger.info(
            "FireScan starting (project: %s, %d collections, batch size %d)",
            ctx.config.project_id,
            len(ctx.config.collections),
            ctx.config.batch_size,
        )

        try:
            yield
        finally:
            close = getattr(ctx.gateway, "close", None)
            if callable(close):
                close()
            logger.info("FireScan shut down")

    app = FastAPI(
        title="FireScan",
        version=__version__,
        lifespan=_lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> PlainTextResponse:
        if exc.status_code == 404:
            message = "404 page not found"
        else:
            message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return PlainTextResponse(message, status_code=exc.status_code, headers=exc.headers)

    if STATIC_DIR.is_dir():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    else:
        logger.warning("Static directory is missing (%s); /static will not be served", STATIC_DIR)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(ui_router)

    return app
