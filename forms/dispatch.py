"""
Builder Dispatch

Calls named operations on an arbitrary form builder and tags what comes back,
so the caller can tell markup to emit apart from values to hand back.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Emitted:
    """The builder returned markup."""

    text: str


@dataclass(frozen=True)
class Value:
    """The builder returned something other than markup, such as a nested builder."""

    result: Any


DispatchResult = Union[Emitted, Value]


def classify_result(value: Any) -> DispatchResult:
    if isinstance(value, str):
        return Emitted(value)
    return Value(value)


class BuilderDispatcher:
    """Dispatch capability over any object exposing public callables."""

    def __init__(self, builder: Any):
        self.builder = builder

    def supports(self, name: str) -> bool:
        if not name or name.startswith("_"):
            return False
        return callable(getattr(self.builder, name, None))

    def call(self, name: str, *args, **kwargs) -> DispatchResult:
        """Invoke ``name`` on the builder. Callers check ``supports`` first."""
        return classify_result(getattr(self.builder, name)(*args, **kwargs))

    def __repr__(self):
        return f"{type(self).__name__}({type(self.builder).__name__})"
