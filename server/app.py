"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from server.dependencies import get_config
from server.routes import analysis, chat, health, pipeline, scrape, upload, write
from utils.errors import ContentPipelineError, ProviderError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")
    config = get_config()
    config.validate()

    missing = [
        name
        for name, value in (
            ("TAVILY_API_KEY", config.TAVILY_API_KEY),
            ("FIRECRAWL_API_KEY", config.FIRECRAWL_API_KEY),
        )
        if not value
    ]
    if missing:
        logger.warning(f"Missing optional environment variables: {missing}")

    yield

    logger.info("FastAPI server shutting down")


def _error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "details": details})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.message}")
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err.get("loc", [])[1:]) for err in exc.errors()]
        logger.warning(f"Invalid request on {request.url.path}: {fields}")
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "Missing or invalid fields",
            ", ".join(f for f in fields if f) or None,
        )

    @app.exception_handler(ProviderError)
    async def provider_error_handler(request: Request, exc: ProviderError):
        logger.error(
            f"Provider failure on {request.url.path}: {exc.message}",
            extra={"extra_fields": {"provider": exc.provider, "attempts": exc.attempts}},
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Upstream provider request failed", exc.message
        )

    @app.exception_handler(ContentPipelineError)
    async def pipeline_error_handler(request: Request, exc: ContentPipelineError):
        logger.error(f"Pipeline failure on {request.url.path}: {exc.message}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="Content Pipeline API",
        description="Outline-to-document writing pipeline with research, coherence and refinement",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(write.router)
    app.include_router(pipeline.router)
    app.include_router(chat.router)
    app.include_router(upload.router)
    app.include_router(scrape.router)
    app.include_router(analysis.router)

    return app
