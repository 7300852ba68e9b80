"""FastAPI application for payee classification."""

import logging
from typing import List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payee_api.exceptions import BatchJobNotFoundError, BatchNotReadyError, InvalidPayeeColumnError
from payee_api.routers import batches, classification, classifications, keywords, sic_codes
from payee_core.classification.exceptions import (
    DuplicateKeywordError,
    ExportAlignmentError,
    InputValidationError,
    KeywordNotFoundError,
)
from payee_core.config import get_config

config = get_config()

# Configure logging
logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Payee Classification API",
    description="Classify payee names as Business or Individual, individually or in batches",
    version="1.0.0",
)

# CORS origins can be set via CORS_ORIGINS env var as comma-separated list
cors_origins: List[str] = [
    origin.strip() for origin in config.cors_origins.split(",") if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins if cors_origins else ["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


def _serializable(value):
    """Replace exception objects (e.g. in validator ctx) with their messages."""
    if isinstance(value, Exception):
        return str(value)
    if isinstance(value, dict):
        return {key: _serializable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serializable(item) for item in value]
    return value


# Exception handlers
@app.exception_handler(BatchJobNotFoundError)
async def batch_not_found_handler(request: Request, exc: BatchJobNotFoundError):
    """Handle unknown batch ids."""
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(KeywordNotFoundError)
async def keyword_not_found_handler(request: Request, exc: KeywordNotFoundError):
    """Handle unknown keyword ids."""
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


@app.exception_handler(DuplicateKeywordError)
async def duplicate_keyword_handler(request: Request, exc: DuplicateKeywordError):
    """Handle duplicate custom keywords."""
    return _error_response(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(BatchNotReadyError)
async def batch_not_ready_handler(request: Request, exc: BatchNotReadyError):
    """Handle result requests for running or failed batches."""
    return _error_response(status.HTTP_409_CONFLICT, exc)


@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    """Handle row-alignment and keyword-list errors."""
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(InvalidPayeeColumnError)
async def invalid_column_handler(request: Request, exc: InvalidPayeeColumnError):
    """Handle a payee column missing from the uploaded rows."""
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


@app.exception_handler(ExportAlignmentError)
async def export_alignment_handler(request: Request, exc: ExportAlignmentError):
    """Handle batches whose results cannot be aligned with their rows."""
    logger.error(f"Export alignment failure: {exc}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    serializable_errors = [_serializable(error) for error in exc.errors()]

    logger.warning(f"Validation error: {serializable_errors}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": serializable_errors, "error_type": "ValidationError"},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


# Include routers
app.include_router(classification.router)
app.include_router(batches.router)
app.include_router(keywords.router)
app.include_router(classifications.router)
app.include_router(sic_codes.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Payee Classification API",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}
