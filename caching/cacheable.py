"""
Cacheable Widgets

A mixin that lets a widget class declare which of its inputs identify its
rendered output, derive a cache key from them, and serve its render from a
fragment cache carried by the render context.

Usage:
    @cacheable("current_user", needs_keys=["post"])
    class Sidebar(Widget):
        needs = ("post", "comments")

        def current_user(self):
            return self.session_user.id

The declaration belongs to the class it was made on. Subclasses do not
inherit it and render uncached until they declare their own.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from observability.logging import get_logger
from utils.error_handling import NotCacheableError

_DECLARATION_ATTR = "_cacheable_declaration"


@dataclass(frozen=True)
class CacheableDeclaration:
    """Immutable record of what identifies a cacheable widget class."""

    static_keys: Tuple[Any, ...] = ()
    dynamic_keys: Tuple[str, ...] = ()
    skip_digest: bool = False

    @property
    def options(self) -> Dict[str, Any]:
        return {"skip_digest": self.skip_digest}


class Cacheable:
    """Mixin placed ahead of a widget base class that implements ``_emit(context)``."""

    @classmethod
    def declare_cacheable(
        cls, *static_keys: Any, needs_keys: Optional[Iterable[str]] = None, skip_digest: bool = False
    ) -> CacheableDeclaration:
        """Declare the class cacheable, replacing any earlier declaration.

        ``static_keys`` are literals or names of zero-argument accessors on the
        widget. Dynamic keys default to every needed variable of the class;
        ``needs_keys`` narrows them, keeping the declaration order of the needs.
        """
        needed = tuple(cls.needed_variables()) if hasattr(cls, "needed_variables") else ()

        if needs_keys is None:
            dynamic_keys = needed
        else:
            allowed = set(needs_keys)
            dynamic_keys = tuple(name for name in needed if name in allowed)

        declaration = CacheableDeclaration(
            static_keys=tuple(static_keys),
            dynamic_keys=dynamic_keys,
            skip_digest=bool(skip_digest),
        )
        setattr(cls, _DECLARATION_ATTR, declaration)
        return declaration

    @classmethod
    def cacheable_declaration(cls) -> Optional[CacheableDeclaration]:
        # Read from the class itself, never from a base class
        return cls.__dict__.get(_DECLARATION_ATTR)

    def is_cacheable(self) -> bool:
        return self.cacheable_declaration() is not None

    def _require_declaration(self) -> CacheableDeclaration:
        declaration = self.cacheable_declaration()
        if declaration is None:
            raise NotCacheableError(type(self).__name__)
        return declaration

    def cache_name(self) -> List[Any]:
        """Build the cache key: static keys, then dynamic keys, with None dropped."""
        declaration = self._require_declaration()

        key = [self._resolve_static_key(static_key) for static_key in declaration.static_keys]

        state = vars(self)
        key.extend(state.get(name) for name in declaration.dynamic_keys)

        return [part for part in key if part is not None]

    def _resolve_static_key(self, static_key: Any) -> Any:
        if not isinstance(static_key, str) or not hasattr(type(self), static_key):
            return static_key

        value = getattr(self, static_key)
        if not callable(value):
            return value

        # Only zero-argument accessors are keys; other methods leave the name as a literal
        try:
            inspect.signature(value).bind()
        except (TypeError, ValueError):
            return static_key
        return value()

    def cache_options(self) -> Dict[str, Any]:
        return self._require_declaration().options

    def _emit(self, context):
        emit = super()._emit
        backend = context.cache_backend

        if backend is None or not self.is_cacheable():
            return emit(context)

        key = self.cache_name()
        computed = []

        def compute():
            computed.append(True)
            return context.capture(emit, context)

        content = backend.fetch_or_store(key, self.cache_options(), compute)
        context.concat(content)
        self._served_from_cache = not computed

        get_logger(__name__).log_cache_event(
            "miss" if computed else "hit", repr(key), widget=type(self).__name__
        )


def cacheable(*static_keys: Any, needs_keys: Optional[Iterable[str]] = None, skip_digest: bool = False):
    """Class decorator form of ``Cacheable.declare_cacheable``."""

    def decorator(cls):
        cls.declare_cacheable(*static_keys, needs_keys=needs_keys, skip_digest=skip_digest)
        return cls

    return decorator
