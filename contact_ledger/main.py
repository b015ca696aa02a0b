"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from contact_ledger.api.middleware import RequestContextMiddleware
from contact_ledger.api.routes import api_router
from contact_ledger.core.errors import (
    ConflictError,
    InvalidInputError,
    LedgerError,
    NotFoundError,
    StorageFailureError,
)
from contact_ledger.logging_config import setup_logging
from contact_ledger.persistence.database import engine
from contact_ledger.settings import settings

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFoundError: 404,
    ConflictError: 409,
    InvalidInputError: 422,
    StorageFailureError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(f"Starting contact ledger API ({settings.environment})")
    yield
    # Shutdown
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Contact Ledger API",
    description="Contact identity, data-quality scoring and merge audit service",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestContextMiddleware)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Translate domain errors into HTTP responses."""
    status_code = next(
        (code for error_cls, code in ERROR_STATUS.items() if isinstance(exc, error_cls)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    body: dict = {"detail": exc.message}
    if isinstance(exc, ConflictError) and exc.blocking_references is not None:
        body["blocking_references"] = exc.blocking_references
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content=body)


# Include API routes
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
