"""
Main FastAPI Application

Example service wiring tenant scoping end to end:
TenantContextMiddleware builds the TenantContext, the dependencies in
api/deps.py hand it to a ScopedRepository, and the repository's
interceptor chain does the rest.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from tenantscope import __version__
from tenantscope.config import get_settings
from tenantscope.database import engine, init_db
from tenantscope.middleware.tenant import TenantContextMiddleware
from tenantscope.utils.logging import setup_logging, get_logger
from tenantscope.core.exceptions import (
    AuthenticationError,
    TenantIsolationError,
    UnauthorizedWrite,
)
from tenantscope.api.endpoints import projects

settings = get_settings()

setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=(settings.ENVIRONMENT == "production")
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables in development, dispose the engine on shutdown."""
    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")

    if settings.ENVIRONMENT == "development":
        logger.warning("Initializing database tables (dev mode)")
        init_db()

    logger.info(f"Tenant field: {settings.TENANT_FIELD_NAME}")

    yield

    logger.info("Shutting down application")
    engine.dispose()


app = FastAPI(
    title="Tenant Scoping Service",
    description="Single-database multi-tenancy with automatic tenant scoping",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(TenantContextMiddleware)


def _tenant_id(request: Request):
    context = getattr(request.state, "tenant_context", None)
    return context.tenant_id if context else None


@app.exception_handler(TenantIsolationError)
async def tenant_isolation_error_handler(request: Request, exc: TenantIsolationError):
    """
    Handle tenant isolation violations.

    CRITICAL: These should be logged and alerted on immediately.
    """
    logger.error(
        f"TENANT ISOLATION VIOLATION: {exc.detail}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "tenant_id": _tenant_id(request)
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": "tenant_isolation_error"}
    )


@app.exception_handler(UnauthorizedWrite)
async def unauthorized_write_handler(request: Request, exc: UnauthorizedWrite):
    """Handle writes attempted without a tenant."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": "unauthorized_write"},
        headers=exc.headers or {}
    )


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    """Handle authentication errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": "authentication_error"},
        headers=exc.headers or {}
    )


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": __version__
    }


app.include_router(projects.router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tenantscope.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
