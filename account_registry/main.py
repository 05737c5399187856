"""FastAPI application wiring for the account registry."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from . import db
from .api.errors import register_error_handlers
from .api.routes import router as accounts_router
from .config import Settings, get_settings
from .domain.service import RegistrationService
from .i18n import MessageCatalog
from .repository import AccountRepository

logger = logging.getLogger(__name__)

PUBLIC_DIR = Path(__file__).resolve().parent / "public"

CallNext = Callable[[Request], Awaitable[Response]]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to MongoDB and build the registration workflow for the app lifecycle."""
    settings: Settings = app.state.settings
    client = db.connect(settings)
    try:
        repository = AccountRepository(db.get_database(client, settings))
        if client is not None:
            repository.ensure_indexes()
        else:
            logger.info("MONGO_URI not configured, serving without a document store")
        app.state.mongo_client = client
        app.state.registration_service = RegistrationService(repository, app.state.messages)
        logger.info("%s %s ready", settings.app_name, settings.version)
        yield
    finally:
        db.close(client)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application with its middleware, error handlers and routes."""
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.messages = MessageCatalog.from_directory(settings.locales, settings.default_locale)

    @app.middleware("http")
    async def request_context(request: Request, call_next: CallNext) -> Response:
        """Negotiate the locale and attach per-request config."""
        messages: MessageCatalog = request.app.state.messages
        locale = messages.negotiate(
            query=request.query_params.get("lang"),
            cookie=request.cookies.get("lang"),
            accept_language=request.headers.get("accept-language"),
        )
        request.state.locale = locale
        # configured values take precedence over the ones derived from the request
        root = settings.app_root or f"{request.url.scheme}://{request.url.hostname}"
        request.state.config = {"root": root}
        response = await call_next(request)
        response.headers.setdefault("Content-Language", locale)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next: CallNext) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            if status_code >= 500:
                level = logging.ERROR
            elif status_code >= 400:
                level = logging.WARNING
            else:
                level = logging.INFO
            logger.log(
                level,
                "API HTTP REQUEST %s - %d - %s - %.0fms - %s - %s",
                request.client.host if request.client else "-",
                status_code,
                request.method,
                elapsed_ms,
                request.url.path + (f"?{request.url.query}" if request.url.query else ""),
                request.headers.get("user-agent", "-"),
            )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS", "PUT", "PATCH", "DELETE"],
        allow_headers=["X-Requested-With", "content-type", "Accept"],
    )

    register_error_handlers(app)

    @app.get("/healthz", tags=["health"])
    def healthz(request: Request) -> dict[str, str]:
        """Return a minimal readiness indicator used by orchestration systems."""
        return {"status": "ok", "root": request.state.config["root"]}

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(accounts_router)
    app.mount("/static", StaticFiles(directory=PUBLIC_DIR), name="static")
    return app


app = create_app()
