from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from messaging_service.api.middleware.correlation_id import CorrelationIdMiddleware
from messaging_service.api.middleware.request_timing import RequestTimingMiddleware
from messaging_service.api.v1.routers import health, messages
from messaging_service.application.exceptions import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from messaging_service.config import Settings, settings
from messaging_service.infrastructure.db.session import (
    build_engine,
    build_session_factory,
    create_schema,
)

logger = logging.getLogger(__name__)


def _make_lifespan(app_settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Startup / shutdown lifecycle."""
        engine = build_engine(app_settings)
        if app_settings.DB_CREATE_SCHEMA:
            await create_schema(engine)
        app.state.engine = engine
        app.state.session_factory = build_session_factory(engine)
        logger.info("Database engine created (%s)", engine.url.render_as_string(hide_password=True))

        yield

        await engine.dispose()
        logger.info("Database engine disposed")

    return lifespan


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings
    docs_enabled = not app_settings.DISABLE_DOCS

    app = FastAPI(
        title="Simple Messaging Service",
        version="0.1.0",
        lifespan=_make_lifespan(app_settings),
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(messages.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(StorageError)
    async def _storage(req: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure on %s %s: %s", req.method, req.url.path, exc.__cause__)
        return JSONResponse(status_code=500, content={"detail": "Storage error"})

    @app.exception_handler(SQLAlchemyError)
    async def _database(req: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database error on %s %s: %s", req.method, req.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Storage error"})
