"""
Render context: the output sink widgets and form builders write into.
"""

from typing import Any, Callable, List, Optional, Type

from caching.backend import CacheBackend
from forms.builder import FormBuilderProxy


class Output:
    """Append-only text buffer."""

    def __init__(self):
        self._parts: List[str] = []
        self._length = 0

    def append(self, text: Any):
        if text is None:
            return
        text = str(text)
        self._parts.append(text)
        self._length += len(text)

    concat = append

    def to_s(self) -> str:
        return "".join(self._parts)

    def __str__(self):
        return self.to_s()

    def __len__(self):
        return self._length

    def __repr__(self):
        return f"Output({self.to_s()!r})"


class RenderContext:
    """Per-render state shared by a widget tree.

    ``cache_backend`` is optional; cacheable widgets render uncached without it.
    ``form_builder`` is the proxy class ``Widget.form_for`` builds forms with.
    """

    def __init__(
        self,
        output: Optional[Output] = None,
        cache_backend: Optional[CacheBackend] = None,
        form_builder: Optional[Type[FormBuilderProxy]] = None,
    ):
        self.output = output if output is not None else Output()
        self.cache_backend = cache_backend
        self.form_builder = form_builder or FormBuilderProxy

    @property
    def cache_enabled(self) -> bool:
        return self.cache_backend is not None

    def concat(self, text: Any):
        self.output.append(text)

    def capture(self, fn: Callable, *args, **kwargs) -> str:
        """Run ``fn`` against a fresh buffer and return what it wrote.

        When nothing was written and ``fn`` returned a string, that string is
        the captured text.
        """
        previous = self.output
        self.output = Output()
        try:
            result = fn(*args, **kwargs)
            captured = self.output.to_s()
        finally:
            self.output = previous

        if not captured and isinstance(result, str):
            return result
        return captured
