"""
Forms Package

Provides the delegating form builder proxy and the default HTML builder it wraps.
"""

from .builder import FormBuilderProxy
from .dispatch import BuilderDispatcher, DispatchResult, Emitted, Value, classify_result
from .html_builder import HTMLFormBuilder
from .loader import configured_proxy_class, load_builder_class

__all__ = [
    'FormBuilderProxy',
    'HTMLFormBuilder',
    'BuilderDispatcher',
    'DispatchResult',
    'Emitted',
    'Value',
    'classify_result',
    'configured_proxy_class',
    'load_builder_class',
]
