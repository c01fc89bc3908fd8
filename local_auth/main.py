"""Main FastAPI application entry point.

This module initializes the FastAPI application with:
- Lifespan context manager for startup/shutdown handling
- Request ID middleware for request tracking
- Auth error → HTTP status mapping
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from local_auth.api.auth_routes import router as auth_router
from local_auth.auth.dependencies import get_auth_service
from local_auth.core.config import validate_settings
from local_auth.core.exceptions import AccessDenied, AuthError, DuplicateAccount, TokenError
from local_auth.core.logger import app_logger
from local_auth.core.middleware import RequestIDMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup: validate settings, build the auth service and prepare its store.
    Shutdown: log only; stores hold no open connections between calls.
    """
    app_logger.info("Auth service starting up")
    validate_settings()

    service = get_auth_service()
    await service.store.init()
    app_logger.info(f"Credential store ready: {type(service.store).__name__}")

    yield

    app_logger.info("Auth service shutting down")


app = FastAPI(
    title="Local Auth API",
    description="Email/password authentication with rotating JWT refresh tokens",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(RequestIDMiddleware)

app.include_router(auth_router)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    """Map core auth failures to status codes without leaking which check failed."""
    if isinstance(exc, TokenError):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Could not validate credentials"},
            headers={"WWW-Authenticate": "Bearer"},
        )
    if isinstance(exc, (AccessDenied, DuplicateAccount)):
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": exc.message})

    app_logger.error(f"Unmapped auth error: {type(exc).__name__}")
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": "Access Denied"})


@app.get("/")
async def root():
    """Simple health check endpoint."""
    app_logger.debug("Health check endpoint called")
    return {"status": "ok", "message": "Local Auth API is running!"}
