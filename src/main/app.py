"""
Main Application - Main Layer

This module serves as the entry point for the FastAPI application.
It initializes the container, creates the FastAPI app, and includes
the API routers.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.main.config import AppSettings, get_settings
from src.main.container import app_lifespan, init_container
from src.presentation.controllers import (
    circle_proxy_router,
    devices_router,
    home_assistant_proxy_router,
    system_router,
)
from src.shared import configure_logging, get_logger, update_logging_from_settings

# Configure logging with basic settings first - before configuration is loaded
# This ensures we have logging during the configuration loading process
configure_logging()

# Load settings
settings = get_settings()

# Update logging with complete settings
update_logging_from_settings(settings)

# Get structured logger
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan management.

    This context manager is called when the application starts up,
    and when it shuts down. It uses the container's app_lifespan
    to properly manage application resources.
    """
    # Set application startup time
    app.state.started_at = datetime.now(timezone.utc)
    logger.info("Application starting up")

    # Use container's lifecycle management
    async with app_lifespan() as container:
        app.state.container = container
        yield

    logger.info("Application shutting down")


def warn_missing_configuration(settings: AppSettings) -> None:
    """Log which optional integrations are disabled by missing settings."""
    if not settings.circle.api_key:
        logger.warning(
            "circle.proxy.api_key_missing",
            message="CIRCLE_API_KEY o VITE_CIRCLE_API_KEY no definida en .env; "
            f"las peticiones a {settings.circle.proxy_prefix} devolverán 401.",
        )
    if not settings.home_assistant.host:
        logger.warning(
            "home_assistant.host_missing",
            message="HOME_ASSISTANT_HOST no definido; el control de dispositivos "
            "queda deshabilitado.",
        )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application
    """
    settings = get_settings()

    # Initialize dependency injection container
    init_container(settings)
    warn_missing_configuration(settings)

    # Create FastAPI app
    app = FastAPI(
        title=settings.app.title,
        description=settings.app.description,
        version=settings.app.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Set up CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(system_router)
    app.include_router(devices_router)
    app.include_router(
        circle_proxy_router, prefix=settings.circle.proxy_prefix.rstrip("/")
    )
    app.include_router(
        home_assistant_proxy_router,
        prefix=settings.home_assistant.proxy_prefix.rstrip("/"),
    )

    return app


app = create_app()
