"""
Rendering widgets for FastAPI requests.
"""

from typing import Optional

from fastapi import Request
from fastapi.responses import HTMLResponse

from widgets.context import RenderContext
from widgets.widget import BaseWidget


def render_widget(widget: BaseWidget, context: Optional[RenderContext] = None) -> str:
    """Render a widget to HTML."""
    return widget.render(context or RenderContext())


def request_context(request: Request) -> RenderContext:
    """Build a render context from the application's fragment cache and form builder."""
    state = request.app.state
    return RenderContext(
        cache_backend=getattr(state, "fragment_cache", None),
        form_builder=getattr(state, "form_builder", None),
    )


def widget_response(widget: BaseWidget, request: Request, status_code: int = 200) -> HTMLResponse:
    """Render a widget as the body of an HTML response."""
    return HTMLResponse(render_widget(widget, request_context(request)), status_code=status_code)
