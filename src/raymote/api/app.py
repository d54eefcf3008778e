"""FastAPI application factory and lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from raymote.core.supervisor import SessionSupervisor
from raymote.settings import Settings
from raymote.store import JsonButtonStore, JsonConfigStore
from raymote.transport.base import LinkFactory
from raymote.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    link_factory: LinkFactory | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Runtime settings; read from the environment when omitted.
        link_factory: Serial link factory override, mainly for tests.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("raymote_api_starting", data_dir=str(settings.data_dir))
        config_store = JsonConfigStore(settings.config_path)
        supervisor = SessionSupervisor(
            config_store,
            link_factory=link_factory,
            keepalive_interval=settings.keepalive_interval,
        )
        app.state.settings = settings
        app.state.config_store = config_store
        app.state.button_store = JsonButtonStore(settings.buttons_path)
        app.state.supervisor = supervisor

        await supervisor.start()
        await supervisor.bootstrap()
        yield
        await supervisor.shutdown()
        logger.info("raymote_api_stopped")

    app = FastAPI(
        title="Raymote API",
        description="IR receiver/transmitter bridge",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from raymote.api.routes import buttons, events, sessions, transmit
    app.include_router(sessions.router, prefix="/api")
    app.include_router(transmit.router, prefix="/api")
    app.include_router(buttons.router, prefix="/api")
    app.include_router(events.router, prefix="/api")

    return app
