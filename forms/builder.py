"""
Delegating Form Builder

Wraps a concrete form builder so widgets can call its field helpers directly.
Markup returned by the wrapped builder is written to the render context
instead of being returned, because widgets build output by writing to the
context and would otherwise drop it.
"""

import logging
from typing import Any, Dict, Optional, Type

from utils.error_handling import UnsupportedOperation

from .dispatch import BuilderDispatcher, Emitted
from .html_builder import HTMLFormBuilder

logger = logging.getLogger(__name__)


class FormBuilderProxy:
    """Forwards unknown calls to a parent form builder and emits its markup."""

    # Calls renamed before they reach the parent builder
    PROXY_MISSING_METHODS: Dict[str, str] = {
        "simple_fields_for": "fields_for",
    }

    parent_builder_class: Type = HTMLFormBuilder

    @classmethod
    def wrapping(cls, parent_builder_class: Optional[Type] = None) -> Type['FormBuilderProxy']:
        """Return a proxy class whose instances wrap ``parent_builder_class``.

        ``None`` keeps the current default and returns ``cls`` itself.
        """
        if parent_builder_class is None:
            return cls

        logger.debug(f"Deriving {cls.__name__} around {parent_builder_class.__name__}")
        return type(
            f"{cls.__name__}For{parent_builder_class.__name__}",
            (cls,),
            {"parent_builder_class": parent_builder_class, "__module__": cls.__module__},
        )

    def __init__(self, object_name: Any, obj: Any = None, template: Any = None, options: Dict[str, Any] = None):
        self._template = template
        self._parent = self.parent_builder_class(object_name, obj, template, dict(options or {}))
        self._dispatcher = BuilderDispatcher(self._parent)

    @property
    def parent(self) -> Any:
        return self._parent

    @property
    def template(self) -> Any:
        return self._template

    @classmethod
    def resolve_name(cls, name: str) -> str:
        return cls.PROXY_MISSING_METHODS.get(name, name)

    def supports(self, name: str) -> bool:
        return self._dispatcher.supports(self.resolve_name(name))

    def call(self, name: str, *args, **kwargs) -> Any:
        """Forward ``name`` to the parent builder.

        String results are appended to the template and None is returned;
        anything else is returned unchanged.
        """
        resolved_name = self.resolve_name(name)

        if not self._dispatcher.supports(resolved_name):
            raise UnsupportedOperation(name, resolved_name, builder=type(self._parent).__name__)

        result = self._dispatcher.call(resolved_name, *args, **kwargs)

        if isinstance(result, Emitted):
            self._template.concat(result.text)
            return None
        return result.result

    def __getattr__(self, name: str):
        # Only reached for names not defined on the proxy itself
        dispatcher = self.__dict__.get("_dispatcher")
        if dispatcher is None or name.startswith("_"):
            raise UnsupportedOperation(name, builder=type(self).__name__)

        resolved_name = self.resolve_name(name)
        if not dispatcher.supports(resolved_name):
            raise UnsupportedOperation(name, resolved_name, builder=type(self._parent).__name__)

        def forward(*args, **kwargs):
            return self.call(name, *args, **kwargs)

        forward.__name__ = name
        return forward

    def __repr__(self):
        return f"<{type(self).__name__} parent={type(self._parent).__name__}>"
