from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from realty_chat.api.middleware.request_context import RequestContextMiddleware
from realty_chat.api.v1.routers import chat, health, ws
from realty_chat.application.exceptions import (
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from realty_chat.application.uow import UoWFactory
from realty_chat.config import settings
from realty_chat.infrastructure.db import session as db_session
from realty_chat.infrastructure.db.uow import session_uow
from realty_chat.infrastructure.ws.manager import ConnectionManager

logger = logging.getLogger(__name__)


def create_app(
    *,
    manager: ConnectionManager | None = None,
    uow_factory: UoWFactory | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Startup / shutdown lifecycle."""
        app.state.uow_factory = uow_factory or session_uow
        app.state.chat_manager = manager or ConnectionManager()
        logger.info("Chat state initialised")

        yield

        online = len(app.state.chat_manager.presence)
        logger.info("Chat shutting down with %d user(s) online", online)
        if uow_factory is None:
            await db_session.dispose()

    app = FastAPI(
        title="Realty Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationError)
    async def _unauthenticated(_req: Request, exc: AuthenticationError) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": exc.detail},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
