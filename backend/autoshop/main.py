"""
Main Entry Point - FastAPI Application
Project: Auto Shop Manager

Configures the FastAPI application with middleware, routers and lifecycle.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from autoshop.core.config import settings
from autoshop.core.database import close_db, init_db
from autoshop.core.exceptions import AppException

# ------------------------------------------------------------
# Logging configuration
# ------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Pydantic error types reported as "<field> is required"
REQUIRED_ERROR_TYPES = {"missing", "string_too_short"}


# ------------------------------------------------------------
# Lifespan Handler
# ------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle.

    - Startup: checks the database connection (and creates tables if enabled)
    - Shutdown: disposes the connection pool
    """
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    await init_db()
    logger.info("Application started")

    yield

    logger.info("Shutting down...")
    await close_db()
    logger.info("Application stopped")


# ------------------------------------------------------------
# FastAPI Application
# ------------------------------------------------------------
app = FastAPI(
    title=settings.app_name,
    description="Auto repair shop management - Backend API",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# ------------------------------------------------------------
# Exception Handlers
# ------------------------------------------------------------
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handler for the domain exceptions.

    Renders {"error": detail, **extra} with the status code of the
    exception class (404, 400 or 409).
    """
    logger.info(
        "%s %s -> %s %s: %s",
        request.method, request.url.path, exc.status_code, exc.error_code, exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_body(),
    )


def describe_validation_error(error: Dict[str, Any]) -> str:
    """
    Message for the first request validation error.

    Missing or empty fields become "<field> is required", using the
    camelCase name the client sent; anything else keeps the Pydantic
    message without its "Value error, " prefix.
    """
    loc = [part for part in error.get("loc", ()) if isinstance(part, str)]
    field = loc[-1] if loc else "body"
    error_type = error.get("type", "")

    if error_type in REQUIRED_ERROR_TYPES:
        return f"{field} is required"
    if error.get("input", "") is None and error_type != "value_error":
        return f"{field} is required"

    message = str(error.get("msg", "Invalid request"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return message


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handler for malformed requests.

    Converts FastAPI's 422 into 400 {"error": message} for the first error.
    """
    errors = exc.errors()
    message = describe_validation_error(errors[0]) if errors else "Invalid request"
    logger.info("%s %s -> 400: %s", request.method, request.url.path, message)
    return JSONResponse(
        status_code=400,
        content={"error": message},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler for every uncaught exception.

    Logs the traceback and returns a generic 500 without details.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method, request.url.path, exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


# ------------------------------------------------------------
# Middleware CORS
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------
@app.get(
    "/health",
    name="Health Check",
    summary="Application health",
    tags=["System"],
)
async def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        dict: application status
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
    }


# ------------------------------------------------------------
# Router
# ------------------------------------------------------------
from autoshop.api.v1 import api_v1_router  # noqa: E402

app.include_router(api_v1_router)
