"""
HTTP API

FastAPI application exposing the flows under /api.

DESIGN DECISION: Route handlers never format errors themselves.
Every failure is an ExpensesHubError (or an unexpected exception)
and is rendered by the handlers registered here as
{"error": <code>, "message": <text>, "issues": [...]}.

Startup runs the initialization gate (connect + seed). If the database
is unreachable the server still starts and answers 503 on data routes.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from expenseshub import __version__
from expenseshub.api.routes import categories, reports, settings, transactions
from expenseshub.config import get_settings, validate_all_settings
from expenseshub.errors import ExpensesHubError, ValidationError
from expenseshub.logger import configure_logging, get_logger
from expenseshub.orchestrator import AppComponents, create_app_components
from expenseshub.validation import issues_from_pydantic


logger = get_logger(__name__)


async def handle_app_error(request: Request, exc: ExpensesHubError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            error=exc.code,
            message=exc.message,
        )
    else:
        logger.warning(
            "request_rejected",
            path=request.url.path,
            error=exc.code,
            message=exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query strings and unparseable JSON bodies."""
    error = ValidationError("Invalid request", issues_from_pydantic(exc))
    return await handle_app_error(request, error)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unexpected_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content=ExpensesHubError("Internal server error").to_dict(),
    )


def create_app(components: Optional[AppComponents] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        components: Pre-built flows (tests pass in-memory components).
                    Defaults to create_app_components().
    """
    app_settings = get_settings().app
    components = components or create_app_components()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        config_status = validate_all_settings()
        if config_status["mongo"] and config_status["app"]:
            logger.info("config_checked", **config_status)
        else:
            logger.warning("config_incomplete", **config_status)
        available = await components.initialize()
        logger.info("api_started", storage_available=available)
        yield
        components.close()
        logger.info("api_stopped")

    docs_enabled = not app_settings.is_production
    app = FastAPI(
        title="ExpensesHub API",
        description="Personal expense and income tracking",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
    )
    app.state.components = components

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ExpensesHubError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)

    app.include_router(categories.router, prefix="/api")
    app.include_router(settings.router, prefix="/api")
    app.include_router(transactions.router, prefix="/api")
    app.include_router(reports.router, prefix="/api")

    @app.get("/health", tags=["Health"])
    async def health(request: Request):
        current: AppComponents = request.app.state.components
        available = await current.initialize()
        return {
            "status": "ok" if available else "degraded",
            "database": "connected" if available else "unavailable",
            "version": __version__,
        }

    return app


def run() -> None:
    """Serve the API with uvicorn (console script entry point)."""
    app_settings = get_settings().app
    uvicorn.run(
        "expenseshub.api.app:create_app",
        factory=True,
        host=app_settings.api_host,
        port=app_settings.api_port,
        reload=app_settings.debug_mode,
        log_level=app_settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
