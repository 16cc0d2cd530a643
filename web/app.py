"""
Widget Host Application

Builds a FastAPI application that renders widgets with a shared fragment
cache and exposes cache administration endpoints.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from caching.backend import CacheBackend
from caching.fragment_cache import FragmentCache, create_cache_backend
from config.settings import Settings, get_settings
from forms.loader import configured_proxy_class
from observability.logging import (
    CorrelationIdMiddleware,
    LogConfig,
    LogFormat,
    LogLevel,
    correlation_id_var,
    setup_logging,
)
from utils.error_handling import ErrorCategory, ErrorHandler, WidgetError

from .models import CacheClearResponse, CacheEntryModel, CacheStatsResponse, ErrorResponse

logger = logging.getLogger(__name__)

cache_router = APIRouter(prefix="/cache", tags=["cache"])

_STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION_ERROR: 422,
    ErrorCategory.CONFIGURATION_ERROR: 500,
}


def _fragment_cache(request: Request) -> FragmentCache:
    cache = getattr(request.app.state, "fragment_cache", None)
    if not isinstance(cache, FragmentCache):
        raise HTTPException(status_code=404, detail="Fragment caching is disabled")
    return cache


@cache_router.get("/stats", response_model=CacheStatsResponse)
async def get_cache_stats(request: Request):
    """Get fragment cache statistics."""
    return CacheStatsResponse(**_fragment_cache(request).get_stats())


@cache_router.get("/entries", response_model=List[CacheEntryModel])
async def get_cache_entries(request: Request, limit: int = Query(100, ge=1, le=1000)):
    """List stored fragments, most recently used first."""
    return [CacheEntryModel(**entry) for entry in _fragment_cache(request).get_entries(limit)]


@cache_router.delete("", response_model=CacheClearResponse)
async def clear_cache(request: Request):
    """Remove every stored fragment."""
    removed = _fragment_cache(request).clear()
    logger.info(f"Fragment cache cleared via API ({removed} entries)")
    return CacheClearResponse(removed=removed)


@cache_router.delete("/entries", response_model=CacheClearResponse)
async def invalidate_cache_entries(request: Request, pattern: str = Query(..., min_length=1)):
    """Remove fragments whose key contains ``pattern``."""
    removed = _fragment_cache(request).invalidate(pattern)
    return CacheClearResponse(removed=removed, pattern=pattern)


async def widget_error_handler(request: Request, exc: WidgetError) -> JSONResponse:
    error_context = request.app.state.error_handler.handle_error(
        exc, context={"path": request.url.path}, request_id=correlation_id_var.get()
    )
    payload = ErrorResponse(
        error_id=error_context.error_id,
        category=error_context.category.value,
        severity=error_context.severity.value,
        message=error_context.message,
        details={key: str(value) for key, value in error_context.details.items()},
        recovery_suggestions=error_context.recovery_suggestions,
    )
    return JSONResponse(status_code=_STATUS_BY_CATEGORY.get(exc.category, 500), content=payload.model_dump())


def create_app(settings: Settings = None, cache_backend: Optional[CacheBackend] = None) -> FastAPI:
    """Create the host application.

    ``cache_backend`` overrides the backend described by ``settings.cache``.
    """
    settings = settings or get_settings()
    setup_logging(
        LogConfig(
            level=LogLevel(settings.logging.level.upper()),
            format=LogFormat(settings.logging.format.lower()),
            output_file=settings.logging.file,
        )
    )

    app = FastAPI(title="Widgetry", version="0.1.0")
    app.state.settings = settings
    app.state.fragment_cache = cache_backend if cache_backend is not None else create_cache_backend(settings.cache)
    app.state.form_builder = configured_proxy_class(settings.forms)
    app.state.error_handler = ErrorHandler()

    app.middleware("http")(CorrelationIdMiddleware())
    app.add_exception_handler(WidgetError, widget_error_handler)
    app.include_router(cache_router)

    logger.info(
        f"Widget host created (cache={'on' if app.state.fragment_cache is not None else 'off'}, "
        f"form_builder={app.state.form_builder.parent_builder_class.__name__})"
    )
    return app
