"""FastAPI application factory and configuration."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from serialmon.config import MonitorSettings
from serialmon.context import DeviceContext, FileDeviceContext
from serialmon.driver.base import SerialDriver
from serialmon.driver.pyserial_driver import PySerialDriver
from serialmon.host.headless import HeadlessHost
from serialmon.session.controller import SessionController
from serialmon.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(
    driver: SerialDriver | None = None,
    settings: MonitorSettings | None = None,
    context: DeviceContext | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    One serial session is created on startup and disposed on shutdown.

    Args:
        driver: Serial driver; defaults to the pyserial driver.
        settings: Monitor settings; defaults to ``MonitorSettings()``.
        context: Device context; defaults to the settings' context file.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or MonitorSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        host = HeadlessHost()
        session = SessionController(
            driver or PySerialDriver(
                encoding=settings.encoding,
                read_timeout=settings.read_timeout,
                write_timeout=settings.write_timeout,
            ),
            host,
            context or FileDeviceContext(settings.context_path),
            settings,
        )
        app.state.host = host
        app.state.session = session
        logger.info("serialmon_api_starting", port=session.identity.current_port)
        async with session:
            yield
        logger.info("serialmon_api_stopped")

    app = FastAPI(
        title="serialmon API",
        description="Serial port monitor session control",
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

    from serialmon.api.routes import session as session_routes
    app.include_router(session_routes.router)

    return app
