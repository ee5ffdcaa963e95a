import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request

from . import __version__
from .config import Settings
from .dependencies import (
    get_command_bus,
    get_event_bus,
    get_preferences_store,
    get_presentation_event_handlers,
    get_query_bus,
    get_scan_controller,
    get_settings,
    get_websocket_manager,
)
from .domains.preferences import api as preferences
from .domains.presentation import api as websockets
from .domains.presentation.registration import register_presentation_domain
from .domains.scanning import api as scanning
from .domains.scanning.commands import StartScanCommand
from .domains.scanning.registration import register_scanning_handlers
from .logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    settings = get_settings()
    setup_logging(settings)
    logging.info(f"Encoding Checker {__version__} starting up...")

    command_bus = get_command_bus()
    query_bus = get_query_bus()
    event_bus = get_event_bus()
    scan_controller = get_scan_controller()

    if not command_bus.is_registered(StartScanCommand):
        register_scanning_handlers(command_bus, query_bus, scan_controller)
        await register_presentation_domain(event_bus, get_presentation_event_handlers())

    websocket_manager = get_websocket_manager()
    websocket_manager.start_sender_task()

    preferences_store = get_preferences_store()
    await preferences_store.load()

    yield

    # Shutdown
    logging.info("Encoding Checker shutting down...")

    await scan_controller.shutdown(timeout=settings.shutdown_timeout_seconds)

    try:
        await preferences_store.save(preferences_store.current)
    except OSError as e:
        logging.warning(f"Could not save preferences on shutdown: {e}")

    await websocket_manager.stop_sender_task()
    logging.info("All background tasks stopped")


app = FastAPI(
    title="Encoding Checker",
    description="Scans directory trees and reports or validates the character encoding of text files",
    version=__version__,
    lifespan=lifespan,
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logging.info(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "operation": "http_request",
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        },
    )

    response = await call_next(request)

    logging.info(
        f"Response: {response.status_code}",
        extra={
            "operation": "http_response",
            "status_code": response.status_code,
            "path": request.url.path,
        },
    )

    return response


# Include routers
app.include_router(scanning.scan_router)
app.include_router(websockets.websocket_router)
app.include_router(preferences.preferences_router)


@app.get("/api/settings", tags=["settings"])
async def read_settings(settings: Settings = Depends(get_settings)) -> dict:
    """Active configuration (read-only)."""
    return settings.model_dump()


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Encoding Checker is running"}


@app.get("/health")
async def health():
    """Detailed health check."""
    controller = get_scan_controller()
    return {
        "status": "healthy",
        "service": "encoding-checker",
        "scan_running": controller.is_running(),
    }


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "encoding_checker.main:app",
        host=_settings.host,
        port=_settings.port,
        reload=False,
        log_level="info",
    )
