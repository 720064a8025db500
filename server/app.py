"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.config import get_config
from models.errors import ConfigurationError, ExhaustionError
from server.dependencies import get_orchestrator, shutdown_orchestrator
from server.middleware import RequestIDMiddleware
from server.routes import chat, health, logs, search
from server.utils import error_response, validation_error_message
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    problems = get_config().validate()
    if problems:
        logger.warning(f"Configuration problems: {problems}")

    # outbound http clients live for the whole app lifetime
    get_orchestrator()

    yield

    await shutdown_orchestrator()
    logger.info("FastAPI server shutting down")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return error_response("Not found", exc.status_code)
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            return error_response("Method not allowed", exc.status_code)
        return error_response(str(exc.detail), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = validation_error_message(exc.errors())
        logger.info(
            "Request rejected",
            extra={
                "extra_fields": {
                    "request_id": getattr(request.state, "request_id", "unknown"),
                    "path": request.url.path,
                    "error": message,
                }
            },
        )
        return error_response(message, status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(ConfigurationError)
    async def configuration_exception_handler(request: Request, exc: ConfigurationError):
        logger.error(
            "Request failed: server misconfigured",
            extra={"extra_fields": {"path": request.url.path, "error": exc.message}},
        )
        return error_response(exc.message, status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(ExhaustionError)
    async def exhaustion_exception_handler(request: Request, exc: ExhaustionError):
        logger.warning(
            "Request failed: all models exhausted",
            extra={"extra_fields": {"path": request.url.path, "error": exc.message}},
        )
        return error_response(exc.message, status.HTTP_429_TOO_MANY_REQUESTS)


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="Claritool API",
        description="Multi-model chat routing with refinement and web search context",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(search.router)
    app.include_router(logs.router)

    return app
