"""
Web Package

Provides the FastAPI integration for rendering widgets and managing the fragment cache.
"""

from .app import cache_router, create_app, widget_error_handler
from .models import CacheClearResponse, CacheEntryModel, CacheStatsResponse, ErrorResponse
from .rendering import render_widget, request_context, widget_response

__all__ = [
    'create_app',
    'cache_router',
    'widget_error_handler',
    'render_widget',
    'request_context',
    'widget_response',
    'CacheStatsResponse',
    'CacheEntryModel',
    'CacheClearResponse',
    'ErrorResponse',
]
