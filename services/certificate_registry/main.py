"""
Certificate Registry Service - Main Application
===============================================

FastAPI application for certificate issuance and verification.

Version: 0.1.0
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.certificate_registry import __version__
from services.certificate_registry.dependencies import build_container
from services.certificate_registry.routes import certificates, documents, ledger, proofs
from shared.config import StorageBackend, settings
from shared.database.redis import RedisClient
from shared.logging import get_logger, setup_logging
from shared.models import ErrorResponse, HealthResponse


# Setup logging
setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name="certificate_registry",
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager."""
    logger.info(
        "certificate_registry_starting",
        environment=settings.environment.value,
        port=settings.ports.certificate_registry,
        backend=settings.ledger.backend.value,
    )

    # Startup
    try:
        app.state.registry = build_container(settings)
        if settings.ledger.backend is StorageBackend.REDIS:
            await RedisClient.get_client().ping()
            logger.info("redis_connected")
    except Exception as e:
        logger.error("startup_failed", error=str(e))
        raise

    yield

    # Shutdown
    logger.info("certificate_registry_shutting_down")
    if settings.ledger.backend is StorageBackend.REDIS:
        await RedisClient.close()


# Create FastAPI application
app = FastAPI(
    title="ZK-Vault Certificate Registry",
    description="Certificate ledger with selective-disclosure proof verification",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request) -> HealthResponse:
    """
    Service health check.

    Returns health status of the ledger and its backend.
    """
    components: dict[str, dict[str, Any]] = {}

    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        components["ledger"] = {"status": "unhealthy", "error": "not initialized"}
    else:
        integrity = await registry.ledger.verify_chain_integrity()
        components["ledger"] = {
            "status": "healthy" if integrity.valid else "unhealthy",
            "backend": registry.backend.value,
            "blocks": integrity.blocks_checked,
        }
        if registry.backend is StorageBackend.REDIS:
            components["redis"] = await RedisClient.health_check()

    all_healthy = all(c.get("status") == "healthy" for c in components.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        service="certificate_registry",
        version=__version__,
        components=components,
    )


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "ZK-Vault Certificate Registry",
        "version": __version__,
        "docs": "/docs",
    }


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(
    documents.router,
    prefix="/api/v1/documents",
    tags=["Documents"],
)

app.include_router(
    proofs.router,
    prefix="/api/v1/proofs",
    tags=["Proofs"],
)

app.include_router(
    certificates.router,
    prefix="/api/v1/certificates",
    tags=["Certificates"],
)

app.include_router(
    ledger.router,
    prefix="/api/v1/ledger",
    tags=["Ledger"],
)


# ============================================================================
# Error Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    body = ErrorResponse(
        error=str(exc.detail),
        status_code=exc.status_code,
        error_code=getattr(exc, "error_code", None),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json"),
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error", status_code=500).model_dump(mode="json"),
    )


# ============================================================================
# Run with Uvicorn
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.certificate_registry.main:app",
        host="0.0.0.0",
        port=settings.ports.certificate_registry,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
