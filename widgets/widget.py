"""
Widgets

A widget is a class whose ``content`` method writes HTML into a render
context. Its inputs are declared with ``needs``: a sequence of required
names, or a mapping of names to defaults. Inputs become instance attributes.

    class Greeting(Widget):
        needs = ("name",)

        def content(self):
            self.text(f"Hello, {self.name}")

    Greeting(name="Ada").render()
"""

import html
import time
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union

from caching.cacheable import Cacheable
from forms.builder import FormBuilderProxy
from forms.html_builder import open_tag
from observability.logging import get_logger
from utils.error_handling import ErrorCategory, ExcessNeedsError, MissingNeedsError, WidgetError

from .context import RenderContext


class BaseWidget:
    """Widget core without caching."""

    _context: Optional[RenderContext] = None
    _served_from_cache = False

    @classmethod
    def _declared_needs(cls):
        for klass in reversed(cls.__mro__):
            declared = klass.__dict__.get("needs")
            if declared is not None:
                yield declared

    @classmethod
    def declares_needs(cls) -> bool:
        return any(True for _ in cls._declared_needs())

    @classmethod
    def needed_variables(cls) -> Tuple[str, ...]:
        """Names of every needed variable, base classes first, in declaration order."""
        names = []
        for declared in cls._declared_needs():
            for name in declared:
                if name not in names:
                    names.append(name)
        return tuple(names)

    @classmethod
    def needed_defaults(cls) -> Dict[str, Any]:
        defaults = {}
        for declared in cls._declared_needs():
            if isinstance(declared, Mapping):
                defaults.update(declared)
            else:
                # Redeclaring a name without a default makes it required again
                for name in declared:
                    defaults.pop(name, None)
        return defaults

    def __init__(self, **assigns):
        if self.declares_needs():
            needed = self.needed_variables()
            excess = [name for name in assigns if name not in needed]
            if excess:
                raise ExcessNeedsError(type(self).__name__, excess)

            values = {**self.needed_defaults(), **assigns}
            missing = [name for name in needed if name not in values]
            if missing:
                raise MissingNeedsError(type(self).__name__, missing)
        else:
            values = assigns

        for name, value in values.items():
            setattr(self, name, value)

    @property
    def context(self) -> RenderContext:
        if self._context is None:
            raise WidgetError(
                f"{type(self).__name__} is not rendering", category=ErrorCategory.RENDER_ERROR, widget=type(self).__name__
            )
        return self._context

    def content(self):
        """Write this widget's HTML. Subclasses override."""

    def _emit(self, context: RenderContext):
        previous = self._context
        self._context = context
        try:
            self.content()
        finally:
            self._context = previous

    def render(self, context: RenderContext = None) -> str:
        """Render into ``context`` (a fresh one by default) and return the HTML produced."""
        context = context or RenderContext()
        start_time = time.time()
        self._served_from_cache = False

        rendered = context.capture(self._emit, context)
        context.concat(rendered)

        get_logger(__name__).log_render(
            type(self).__name__, (time.time() - start_time) * 1000, cached=self._served_from_cache
        )
        return rendered

    def text(self, value: Any):
        """Write escaped text. None writes nothing."""
        if value is not None:
            self.context.concat(html.escape(str(value)))

    def rawtext(self, value: Any):
        if value is not None:
            self.context.concat(value)

    def widget(self, child: Union['BaseWidget', Type['BaseWidget']], **assigns):
        """Render another widget into the same context."""
        if isinstance(child, type):
            child = child(**assigns)
        child._emit(self.context)

    @contextmanager
    def form_for(
        self,
        object_name: Any,
        obj: Any = None,
        url: Optional[str] = None,
        method: str = "post",
        builder: Optional[Type] = None,
        html_options: Optional[Dict[str, Any]] = None,
        **options,
    ):
        """Open a form and yield a proxy around ``builder`` (or the context's default builder)."""
        proxy_class: Type[FormBuilderProxy] = self.context.form_builder.wrapping(builder)

        attributes = {"accept-charset": "UTF-8", "action": url, "method": method}
        attributes.update(html_options or {})

        self.rawtext(open_tag("form", attributes))
        yield proxy_class(object_name, obj, self.context, {**options, "builder": proxy_class})
        self.rawtext("</form>")


class Widget(Cacheable, BaseWidget):
    """Widget whose render can be served from the context's fragment cache."""


class InlineWidget(Widget):
    """Widget whose content is a callable receiving the widget."""

    def __init__(self, block: Callable[['InlineWidget'], Any], **assigns):
        super().__init__(**assigns)
        self.block = block

    def content(self):
        self.block(self)


def inline(block: Callable[[InlineWidget], Any], **assigns) -> InlineWidget:
    return InlineWidget(block, **assigns)
