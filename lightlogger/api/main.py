"""
Light Logger - FastAPI Application

Main entry point for the REST API server.
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
import time

from ..core.config import settings
from ..core.errors import InvalidInput, EncodingError
from ..core.logging_setup import configure_logging
from .dependencies import AppContext, build_context
from .routes import location, records, export, websocket


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        context: Prebuilt application context (built from settings at
            startup if not given)

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.
        Runs startup and shutdown logic.
        """
        # Startup
        configure_logging()
        logger.info("Starting Light Logger API...")
        if getattr(app.state, "context", None) is None:
            app.state.context = build_context()

        yield

        # Shutdown
        logger.info("Shutting down Light Logger API...")
        app.state.context.shutdown()
        logger.info("Location delivery stopped")

    app = FastAPI(
        title="Light Logger API",
        description="""
        Tag ambient-light brightness readings with the current GPS fix and
        export them.

        ## Features

        * **Location** - Permission state and the current fix
        * **Records** - Add, list and clear brightness readings
        * **Export** - Download readings as CSV or GeoJSON
        """,
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.context = context

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request timing middleware
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add X-Process-Time header to all responses"""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    # Exception handlers
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors with detailed messages"""
        errors = []
        for error in exc.errors():
            errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"]
            })
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Validation error",
                "errors": errors
            }
        )

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput):
        """Reject input the store cannot accept"""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Invalid input",
                "message": str(exc)
            }
        )

    @app.exception_handler(EncodingError)
    async def encoding_error_handler(request: Request, exc: EncodingError):
        """Report records that cannot be exported"""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Encoding error",
                "message": str(exc)
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions"""
        logger.error(f"Unexpected error: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "Internal server error",
                "message": str(exc) if settings.debug else "An unexpected error occurred"
            }
        )

    # Include routers
    app.include_router(
        location.router,
        prefix="/api/location",
        tags=["Location"]
    )

    app.include_router(
        records.router,
        prefix="/api/records",
        tags=["Records"]
    )

    app.include_router(
        export.router,
        prefix="/api/export",
        tags=["Export"]
    )

    app.include_router(
        websocket.router,
        prefix="/ws",
        tags=["WebSocket"]
    )

    # Root endpoints
    @app.get("/", tags=["Root"])
    async def root():
        """API root endpoint"""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health"
        }

    @app.get("/health", tags=["Root"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.app_version
        }

    @app.get("/api", tags=["Root"])
    async def api_info():
        """API information endpoint"""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "endpoints": {
                "location": "/api/location",
                "records": "/api/records",
                "export": "/api/export/{csv|geojson}"
            },
            "websocket": {
                "state": "/ws/state"
            }
        }

    return app


# Create FastAPI application
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "lightlogger.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
    )
