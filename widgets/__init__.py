"""
Widgets Package

Provides HTML widgets, the render context they write into, and form helpers.
"""

from .context import Output, RenderContext
from .widget import BaseWidget, InlineWidget, Widget, inline

__all__ = [
    'BaseWidget',
    'Widget',
    'InlineWidget',
    'inline',
    'Output',
    'RenderContext',
]
