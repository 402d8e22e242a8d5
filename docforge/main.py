"""FastAPI application entry point.

Builds the docforge API: template and document routers, error mapping for
the pipeline's exceptions, and a health check.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docforge import __version__
from docforge.api.documents import router as documents_router
from docforge.api.schemas import ErrorResponse
from docforge.api.templates import router as templates_router
from docforge.core.config import Settings, get_settings
from docforge.core.logging_config import setup_logging
from docforge.interfaces.backend import BackendError
from docforge.interfaces.publisher import GenerationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    logger.info(
        f"docforge API starting: confluence={settings.confluence_base_url}, "
        f"diagram_engine={settings.diagram_engine}, "
        f"generation_api={settings.generation_api_url}"
    )
    yield
    logger.info("docforge API stopped")


def _error(status_code: int, detail: str, error_code: str, /, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            detail=detail,
            error_code=error_code,
            extra=extra or None,
        ).model_dump(),
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Drop non-serializable context from validation errors."""
    return [
        {key: value for key, value in error.items() if key in ("type", "loc", "msg")}
        for error in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Map pipeline exceptions to HTTP responses.

    Invalid input is a 400, failures of Confluence or the generation
    service are a 502, anything unexpected is a 500.
    """

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": "Validation error", "errors": jsonable_errors(exc)},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        logger.warning(f"Invalid input on {request.url.path}: {exc}")
        return _error(status.HTTP_400_BAD_REQUEST, str(exc), "INVALID_INPUT")

    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError):
        logger.error(f"Confluence request failed on {request.url.path}: {exc}")
        return _error(
            status.HTTP_502_BAD_GATEWAY,
            str(exc),
            "BACKEND_ERROR",
            status_code=exc.status_code,
        )

    @app.exception_handler(GenerationError)
    async def generation_error_handler(request: Request, exc: GenerationError):
        logger.error(f"Generation failed on {request.url.path}: {exc}")
        return _error(status.HTTP_502_BAD_GATEWAY, str(exc), "GENERATION_ERROR")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "INTERNAL_ERROR",
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="docforge",
        description="Storage-format document preparation and diagram publishing",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(templates_router)
    app.include_router(documents_router)
    register_exception_handlers(app)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Report that the service is up."""
        return {
            "status": "healthy",
            "service": "docforge-api",
            "version": __version__,
            "diagram_engine": settings.diagram_engine,
        }

    logger.info("docforge application created")
    return app


def main() -> None:
    import uvicorn

    settings = get_settings()
    logger.info(f"Starting uvicorn on {settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "docforge.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
