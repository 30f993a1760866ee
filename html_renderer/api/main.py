"""
FastAPI Application
==================

Main FastAPI application for rendering HTML into images.
Owns the browser session lifecycle and maps rendering errors to JSON responses.
"""

from contextlib import asynccontextmanager
import uuid
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from html_renderer.config.settings import get_settings
from html_renderer.config.logging import get_logger, get_logging_config
from html_renderer.api.middleware import BodySizeLimitMiddleware
from html_renderer.api.routes.health import router as health_router
from html_renderer.api.routes.render import router as render_router
from html_renderer.core.exceptions import RenderError
from html_renderer.core.rendering.browser_session import close_browser_session
from html_renderer.core.rendering.image_renderer import reset_image_renderer
from html_renderer.core.rendering.uploader import close_uploader
from html_renderer.models.schemas import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info(
        "HTML-to-Image renderer starting",
        port=settings.port,
        delivery=settings.delivery,
        executable_path=settings.browser_executable_path,
    )

    try:
        yield
    finally:
        logger.info("Shutting down HTML-to-Image renderer")

        try:
            await close_uploader()
        except Exception as e:
            logger.error("Error closing uploader", error=str(e))

        try:
            await close_browser_session()
            logger.info("Browser session closed")
        except Exception as e:
            logger.error("Error closing browser session", error=str(e))

        reset_image_renderer()


# Create FastAPI app
settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    description="Render HTML markup into WebP or PNG images with headless Chromium",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.include_router(health_router)
app.include_router(render_router)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


# Request size limit middleware
app.add_middleware(BodySizeLimitMiddleware)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):  # type: ignore
    """Add request ID to all requests."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors, including the body size limit, as error bodies."""
    logger.info(
        "HTTP exception",
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=getattr(request.state, "request_id", None),
    )
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as client errors."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    message = "; ".join(problems) or "invalid request"
    logger.info(
        "Request validation failed",
        error=message,
        request_id=getattr(request.state, "request_id", None),
    )
    return error_response(400, message)


@app.exception_handler(RenderError)
async def render_exception_handler(request: Request, exc: RenderError) -> JSONResponse:
    """Map rendering errors to their status code with the error message."""
    message = str(exc) or exc.__class__.__name__
    request_id = getattr(request.state, "request_id", None)

    if exc.status_code >= 500:
        logger.error(
            "Render error",
            error_type=exc.__class__.__name__,
            error=message,
            request_id=request_id,
        )
    else:
        logger.info("Render request rejected", error=message, request_id=request_id)

    return error_response(exc.status_code, message)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """General exception handler for unexpected errors."""
    logger.error(
        "Unhandled exception",
        exception=str(exc),
        request_id=getattr(request.state, "request_id", None),
        exc_info=True,
    )
    return error_response(500, str(exc) or "Internal server error")


def run_server() -> None:
    """Run the HTTP server. Uvicorn turns SIGTERM into a graceful lifespan shutdown."""
    uvicorn.run(
        "html_renderer.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=True,
        log_config=get_logging_config(settings),
    )


def create_app() -> FastAPI:
    """
    Application factory function for creating FastAPI app instance.
    Used by tests and external deployment scripts.

    Returns:
        FastAPI application instance
    """
    return app


if __name__ == "__main__":
    run_server()
