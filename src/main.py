"""
ProjectHub API

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.middleware.request_id import RequestIdMiddleware
from src.api.v1 import router as api_v1_router
from src.config import Settings, get_settings
from src.database import build_engine
from src.kernel.errors import AppError, AuthError
from src.kernel.identity.jwt import JWTManager
from src.kernel.store import DocumentStore
from src.logging_config import configure_logging, get_logger
from src.schemas.common import HealthResponse

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    The document store and the token manager are created here, once, and
    shared by every request through app.state.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """Configure logging, create tables, and dispose the engine on shutdown."""
        configure_logging(
            log_level=settings.log_level,
            environment=settings.environment,
            debug=settings.debug,
        )

        logger.info("Starting %s v%s", settings.project_name, settings.version)
        await app.state.store.init()
        logger.info("Document store initialized")

        yield

        logger.info("Shutting down...")
        await app.state.store.close()
        logger.info("Document store connections closed")

    app = FastAPI(
        title=settings.project_name,
        description="""
        ProjectHub API

        Users publish projects and link up with other users.

        ## Consistency

        A project's author always lists the project's id. Creating and deleting
        projects keep both documents in step; a step that cannot be undone is
        reported as a server error instead of being left silently broken.
        """,
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.store = DocumentStore(build_engine(settings))
    app.state.jwt_manager = JWTManager.from_settings(settings)

    cors_origins = list(settings.cors_origins)

    # add_middleware stacks innermost-first, so LAST added = OUTERMOST.
    # CORS must be outermost so it adds headers to every response.
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _headers(request: Request) -> dict:
        """CORS and request-id headers for error responses (500s often bypass CORS middleware)."""
        origin = request.headers.get("origin") or ""
        headers = {
            "Access-Control-Allow-Origin": origin if origin in cors_origins else (cors_origins[0] if cors_origins else "*"),
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Allow-Methods": "*",
            "Access-Control-Allow-Headers": "*",
        }
        req_id = getattr(request.state, "request_id", None)
        if req_id:
            headers["X-Request-ID"] = req_id
        return headers

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Return the public message; the private one only reaches the logs."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "%s: %s",
            type(exc).__name__,
            exc.private_message,
            extra={"path": request.url.path, "status": exc.status_code},
        )

        headers = _headers(request)
        if isinstance(exc, AuthError):
            headers["WWW-Authenticate"] = "Bearer"

        content = {"detail": exc.public_message}
        req_id = getattr(request.state, "request_id", None)
        if req_id and exc.status_code >= 500:
            content["request_id"] = req_id
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        headers = _headers(request)
        if exc.headers:
            headers.update(exc.headers)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        errors = []
        for error in exc.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            errors.append({
                "field": field,
                "message": error["msg"],
                "type": error["type"],
            })
        content = {"detail": "Validation error", "errors": errors}
        req_id = getattr(request.state, "request_id", None)
        if req_id:
            content["request_id"] = req_id
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=content,
            headers=_headers(request),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception("Unhandled exception: %s", exc)
        req_id = getattr(request.state, "request_id", None)
        if settings.debug:
            content = {
                "detail": str(exc),
                "type": type(exc).__name__,
                "request_id": req_id,
            }
        else:
            content = {"detail": "Internal server error", "request_id": req_id}
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
            headers=_headers(request),
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Check application health."""
        return HealthResponse(status="ok", version=settings.version)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.project_name,
            "version": settings.version,
            "docs": "/docs" if settings.debug else "disabled",
            "api": {
                "v1": settings.api_v1_prefix,
            },
        }

    app.include_router(api_v1_router, prefix=settings.api_v1_prefix)

    return app


app = create_app()


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
