"""
Franchise Comms - Core Application

This module builds the FastAPI application: lifespan, middleware, error
envelope handlers and routes.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from http import HTTPStatus
import logging
import time

from .config import get_settings
from .database import init_db, close_db
from .exceptions import BaseAPIException
from schemas.common import ErrorResponse

# Configure logging
logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, message: str) -> JSONResponse:
    """Render the ``{"error", "message"}`` envelope."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump(),
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    field = ".".join(location)
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


class FranchiseCommsApp:
    """Application class wiring settings, middleware and routers together."""

    def __init__(self):
        """Initialize the application."""
        self.settings = get_settings()
        self.app = None
        self._create_app()

    def _create_app(self):
        """Create the FastAPI application instance."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            """Application lifespan manager."""
            # Startup
            logger.info(
                f"Starting {self.settings.PROJECT_NAME} v{self.settings.VERSION} "
                f"({self.settings.ENVIRONMENT})"
            )
            await init_db()
            logger.info("Database initialized")

            yield

            # Shutdown
            await close_db()
            logger.info("Database connections closed")

        self.app = FastAPI(
            title=self.settings.PROJECT_NAME,
            description="Multi-tenant franchise communications API",
            version=self.settings.VERSION,
            openapi_url=f"{self.settings.API_PREFIX}/openapi.json",
            docs_url=f"{self.settings.API_PREFIX}/docs",
            redoc_url=f"{self.settings.API_PREFIX}/redoc",
            lifespan=lifespan,
        )

        self._add_middleware()
        self._add_exception_handlers()
        self._add_routes()

    def _add_middleware(self):
        """Add middleware to the application."""
        # CORS: include FRONTEND_URL so non-localhost deployments work
        cors_origins = list(self.settings.BACKEND_CORS_ORIGINS)
        frontend = self.settings.FRONTEND_URL.rstrip("/")
        if frontend and frontend not in cors_origins:
            cors_origins.append(frontend)

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Sets the caller's user id for the RLS session variables
        from middleware.request_context import RequestContextMiddleware
        self.app.add_middleware(RequestContextMiddleware)

        @self.app.middleware("http")
        async def add_process_time_header(request, call_next):
            start_time = time.time()
            response = await call_next(request)
            response.headers["X-Process-Time"] = str(time.time() - start_time)
            return response

    def _add_exception_handlers(self):
        """Render every error in the ``{"error", "message"}`` envelope."""

        @self.app.exception_handler(BaseAPIException)
        async def api_exception_handler(request: Request, exc: BaseAPIException):
            if exc.status_code >= 500:
                logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
                return error_response(exc.status_code, exc.error, "An internal error occurred")
            return error_response(exc.status_code, exc.error, exc.message)

        @self.app.exception_handler(RequestValidationError)
        async def validation_exception_handler(request: Request, exc: RequestValidationError):
            return error_response(400, "Bad Request", _validation_message(exc))

        @self.app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(request: Request, exc: StarletteHTTPException):
            try:
                error = HTTPStatus(exc.status_code).phrase
            except ValueError:
                error = "Error"
            message = exc.detail if isinstance(exc.detail, str) else error
            return error_response(exc.status_code, error, message)

        @self.app.exception_handler(Exception)
        async def unhandled_exception_handler(request: Request, exc: Exception):
            logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
            return error_response(500, "Internal Server Error", "An internal error occurred")

    def _add_routes(self):
        """Add routes to the application."""
        # Root endpoint
        @self.app.get("/")
        async def root():
            return {
                "name": self.settings.PROJECT_NAME,
                "version": self.settings.VERSION,
                "docs": f"{self.settings.API_PREFIX}/docs",
            }

        from api.v1.endpoints import health
        self.app.include_router(health.router, tags=["health"])

        from api.v1.router import api_router
        self.app.include_router(api_router, prefix=self.settings.API_PREFIX)

    def get_app(self) -> FastAPI:
        """Get the FastAPI application instance."""
        return self.app


def create_app() -> FastAPI:
    """Create and return the FastAPI application."""
    app_instance = FranchiseCommsApp()
    return app_instance.get_app()
