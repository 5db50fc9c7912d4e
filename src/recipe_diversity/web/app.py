"""
Recipe Diversity - FastAPI application.

Engine errors are mapped to status codes here so routes only deal with
the happy path and the two structured non-success outcomes.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from recipe_diversity import __version__
from recipe_diversity.config import get_settings
from recipe_diversity.errors import GenerationError, RequestValidationError, StoreError
from recipe_diversity.logging_config import configure_logging
from recipe_diversity.web.routes import recipes_router, users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(get_settings().log_level)
    logger.info(f"Recipe diversity service {__version__} starting")
    yield


app = FastAPI(title="Recipe Diversity", version=__version__, lifespan=lifespan)


@app.get("/health")
async def health_check():
    """Liveness check."""
    return {"status": "healthy", "version": __version__}


# =============================================================================
# Error Mapping
# =============================================================================


def _error(status_code: int, kind: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"kind": kind, "message": message, **extra}},
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return _error(400, "validation", str(exc), field=exc.field)


@app.exception_handler(GenerationError)
async def handle_generation_error(request: Request, exc: GenerationError):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return _error(502, "generation", "The recipe generator failed. Please try again.")


@app.exception_handler(StoreError)
async def handle_store_error(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return _error(503, "store", "Recipe storage is unavailable. Please try again.", operation=exc.operation)


app.include_router(recipes_router)
app.include_router(users_router)
