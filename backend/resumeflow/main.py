"""ResumeFlow Backend - Main FastAPI Application

Resume upload and analysis service.

This module creates and configures the FastAPI application, including:
- The document pipeline (started and stopped with the application)
- API routers (uploads, documents)
- Middleware (request ID correlation, CORS)
- Exception handlers
- Health and observability endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1.documents.router import router as documents_router
from .config import Settings, get_settings
from .domain.analysis import AnalysisEnginePort
from .domain.documents import DocumentNotFoundError, DocumentStateError
from .domain.documents.ports import ObjectStoragePort
from .infrastructure.analysis import KeywordAnalysisEngine
from .infrastructure.storage import build_storage
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware
from .observability.router import router as observability_router
from .pipeline import DocumentPipeline
from .uploads.router import router as uploads_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[ObjectStoragePort] = None,
    engine: Optional[AnalysisEnginePort] = None,
) -> FastAPI:
    """Application factory.

    Args:
        settings: Settings to use (defaults to get_settings())
        storage: Storage adapter override (defaults to STORAGE_BACKEND)
        engine: Analysis engine override (defaults to the keyword engine)

    Returns:
        FastAPI: Configured application; the pipeline is created on startup
    """
    settings = settings or get_settings()

    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build and start the document pipeline for this event loop."""
        logger.info("ResumeFlow API starting up...")
        logger.info(f"Environment: {settings.ENVIRONMENT}")

        pipeline = DocumentPipeline.from_settings(
            settings,
            storage=storage or build_storage(settings),
            engine=engine or KeywordAnalysisEngine(),
        )
        await pipeline.start()
        app.state.pipeline = pipeline

        yield

        logger.info("ResumeFlow API shutting down...")
        await pipeline.stop()
        app.state.pipeline = None

    docs_enabled = not settings.is_production
    app = FastAPI(
        title="ResumeFlow API",
        description="Resume upload and analysis service",
        version="0.1.0",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.pipeline = None

    # =========================================================================
    # MIDDLEWARE CONFIGURATION
    # =========================================================================

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """Return field-level details for malformed requests."""
        logger.warning(f"Validation error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "validation_error",
                "message": "Request validation failed",
                "details": jsonable_errors(exc),
            },
        )

    @app.exception_handler(DocumentNotFoundError)
    async def not_found_exception_handler(
        request: Request,
        exc: DocumentNotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "not_found", "message": str(exc)},
        )

    @app.exception_handler(DocumentStateError)
    async def state_exception_handler(
        request: Request,
        exc: DocumentStateError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "error": "invalid_state",
                "message": exc.message,
                "status": exc.status.value,
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """Handle uncaught exceptions.

        Full details are logged but not exposed to the client.
        """
        logger.error(
            f"Unhandled exception on {request.method} {request.url.path}",
            exc_info=exc
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "internal_error",
                "message": "An unexpected error occurred. Please try again later.",
            },
        )

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    app.include_router(observability_router)
    app.include_router(uploads_router, prefix="/api/v1")
    app.include_router(documents_router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        """Root endpoint - API information."""
        return {
            "name": "ResumeFlow API",
            "version": "0.1.0",
            "status": "running",
            "docs": "/docs" if docs_enabled else None,
        }

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without non-serializable context objects."""
    return [
        {key: value for key, value in error.items() if key in ("loc", "msg", "type")}
        for error in exc.errors()
    ]


app = create_app()


# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "resumeflow.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
