"""
BeaconOS HTTP application
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from beacon_os.config import Settings, configure_logging, settings as default_settings
from beacon_os.errors import BeaconError, IntegrationError, NotFoundError, ValidationError
from beacon_os.api.routers import concierge, events, health, pricing
from beacon_os.orchestrator import BeaconOS

logger = logging.getLogger(__name__)


def _error_status(error: BeaconError) -> int:
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, IntegrationError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_app(beacon: Optional[BeaconOS] = None, config: Optional[Settings] = None) -> FastAPI:
    """
    Build the app around a BeaconOS instance.

    Args:
        beacon: Orchestrator to serve; a default one is built from config
        config: Settings (defaults to the global settings)
    """
    config = config or (beacon.config if beacon is not None else default_settings)
    beacon = beacon or BeaconOS(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(config)
        await beacon.initialize()
        logger.info(f"{config.APP_NAME} {config.VERSION} started ({config.ENVIRONMENT})")
        yield
        await beacon.shutdown()

    app = FastAPI(
        title=config.APP_NAME,
        description="Event-driven operations core for vacation rentals",
        version=config.VERSION,
        lifespan=lifespan,
    )
    app.state.beacon = beacon

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(BeaconError)
    async def beacon_error_handler(request: Request, exc: BeaconError):
        code = _error_status(exc)
        if code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=code, content={"detail": str(exc)})

    app.include_router(pricing.router)
    app.include_router(concierge.router)
    app.include_router(events.router)
    app.include_router(health.router)

    @app.get("/")
    def root():
        return {"name": config.APP_NAME, "version": config.VERSION}

    return app
