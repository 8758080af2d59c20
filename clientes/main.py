"""
Clientes Microservice
Customer registration, login and listing over a single clientes table
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import os

from clientes.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from clientes.core_settings import Settings, get_settings
from clientes.api.routes import router as clientes_router
from clientes.infrastructure.db import open_store
from clientes.infrastructure.guard import ConnectionGuard

# Service configuration
SERVICE_NAME = "clientes-service"
SERVICE_DESCRIPTION = "Customer registration and login microservice"

logger = get_logger(__name__)

def create_app(settings: Optional[Settings] = None, guard: Optional[ConnectionGuard] = None) -> FastAPI:
    """
    Build the application.

    A guard passed in is used as is; otherwise the store is opened from
    settings.DATABASE_URL once, at startup.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle management"""
        logger.info(f"Starting {SERVICE_NAME} version {settings.SERVICE_VERSION}")

        # Startup: open the store once; a failure leaves the service running without it
        if app.state.guard is None:
            app.state.guard = ConnectionGuard(open_store(settings.DATABASE_URL))
        if not app.state.guard.available:
            logger.warning(f"{SERVICE_NAME} running without a database: {app.state.guard.reason}")
        logger.info(f"{SERVICE_NAME} started successfully")

        yield

        # Shutdown
        logger.info(f"Shutting down {SERVICE_NAME}")
        app.state.guard.close()

    # Create FastAPI application
    app = FastAPI(
        title=SERVICE_NAME,
        description=SERVICE_DESCRIPTION,
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json"
    )
    app.state.guard = guard

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=settings.CORS_MAX_AGE,
    )
    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Malformed or incomplete bodies answer 400 instead of 422
    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info(f"Rejected request body on {request.url.path}: {len(exc.errors())} error(s)")
        return JSONResponse(status_code=400, content={"success": False, "message": "invalid request body"})

    # Initialize health checks
    health_service = ServiceHealth(SERVICE_NAME, settings.SERVICE_VERSION)
    app.include_router(health_service.create_health_router())

    # Include business logic routes
    app.include_router(clientes_router)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "status": "running",
            "docs": "/api/docs"
        }

    @app.get("/info")
    async def info():
        """Service information endpoint"""
        return {
            "service": SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "description": SERVICE_DESCRIPTION,
            "environment": os.getenv("ENVIRONMENT", "development"),
            "endpoints": {
                "register": "/register",
                "login": "/login",
                "clientes": "/clientes",
                "health": "/health",
                "ready": "/health/ready",
                "live": "/health/live",
                "metrics": "/metrics",
                "docs": "/api/docs"
            }
        }

    return app

# Setup structured logging
setup_logging(service_name=SERVICE_NAME, level=get_settings().LOG_LEVEL)

app = create_app()

def run():
    import uvicorn

    settings = get_settings()
    logger.info(f"Starting HTTP server on {settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
