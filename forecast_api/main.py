import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from forecast_api.api.error_handlers import register_error_handlers
from forecast_api.api.v1.routes.health import router as health_router
from forecast_api.api.v1.routes.locations import router as locations_router
from forecast_api.api.v1.routes.weather import router as weather_router
from forecast_api.config import Settings, get_settings
from forecast_api.constants import SOURCE_IP_API, SOURCE_OPEN_METEO
from forecast_api.infrastructure.external_apis.http_client import create_http_client
from forecast_api.infrastructure.external_apis.ip_api_client import IpApiClient
from forecast_api.infrastructure.external_apis.open_meteo_client import OpenMeteoClient
from forecast_api.infrastructure.external_apis.resilience import ResilientCaller
from forecast_api.infrastructure.persistence.database_init import initialize_database
from forecast_api.infrastructure.persistence.db import create_db_engine, create_session_factory
from forecast_api.logging_config import configure_logging
from forecast_api.services.health_service import HealthCheckService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    settings: Settings = app.state.settings

    # Startup
    logger.info("Starting up application...")

    engine = create_db_engine(settings)
    session_factory = create_session_factory(engine)
    await initialize_database(engine, session_factory, settings)

    http_client = create_http_client(settings)
    app.state.db_engine = engine
    app.state.db_session_factory = session_factory
    app.state.http_client = http_client
    app.state.weather_provider = OpenMeteoClient(
        client=http_client,
        caller=ResilientCaller.from_settings(SOURCE_OPEN_METEO, settings),
        base_url=settings.OPEN_METEO_BASE_URL,
        forecast_days=settings.FORECAST_DAYS,
    )
    app.state.geolocation_provider = IpApiClient(
        client=http_client,
        caller=ResilientCaller.from_settings(SOURCE_IP_API, settings),
        base_url=settings.IP_API_BASE_URL,
    )
    app.state.health_service = HealthCheckService(session_factory, http_client, settings)

    try:
        yield
    finally:
        # Shutdown
        logger.info("Shutting down application...")
        await http_client.aclose()
        await engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create FastAPI application and include routers."""
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Forecast API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(locations_router, prefix=settings.API_PREFIX)
    app.include_router(weather_router, prefix=settings.API_PREFIX)
    app.include_router(health_router)
    return app


app = create_app()
