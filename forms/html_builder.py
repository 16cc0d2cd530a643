"""
HTML Form Builder

The default parent builder: returns plain HTML strings for form fields bound
to an object name and, optionally, an object supplying current values.
"""

import html
import re
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional


def sanitize_id(name: str) -> str:
    """Turn ``user[address][city]`` style names into ``user_address_city``."""
    return re.sub(r"_$", "", re.sub(r"\]\[|[^-a-zA-Z0-9:.]", "_", name))


def humanize(name: str) -> str:
    return str(name).replace("_", " ").strip().capitalize()


def _attributes(attributes: Dict[str, Any]) -> str:
    rendered = []
    for key in sorted(attributes):
        value = attributes[key]
        if value is None or value is False:
            continue
        if value is True:
            value = key
        rendered.append(f' {key}="{html.escape(str(value), quote=True)}"')
    return "".join(rendered)


def open_tag(name: str, attributes: Dict[str, Any]) -> str:
    return f"<{name}{_attributes(attributes)}>"


def tag(name: str, attributes: Dict[str, Any], content: Optional[str] = None) -> str:
    """Render a tag with sorted attributes. ``content=None`` renders a void tag."""
    if content is None:
        return f"<{name}{_attributes(attributes)} />"
    return f"{open_tag(name, attributes)}{content}</{name}>"


class HTMLFormBuilder:
    """Builds field markup for one object name."""

    def __init__(self, object_name: Any, obj: Any = None, template: Any = None, options: Dict[str, Any] = None):
        self.object_name = str(object_name)
        self.object = obj
        self.template = template
        self.options = dict(options or {})

    def field_id(self, method: str) -> str:
        return f"{sanitize_id(self.object_name)}_{sanitize_id(str(method))}"

    def field_name(self, method: str) -> str:
        return f"{self.object_name}[{method}]"

    def value(self, method: str) -> Any:
        if self.object is None:
            return None
        if isinstance(self.object, Mapping):
            return self.object.get(method)
        return getattr(self.object, method, None)

    def _input(self, input_type: str, method: str, attributes: Dict[str, Any], include_value: bool = True) -> str:
        base = {"id": self.field_id(method), "name": self.field_name(method), "type": input_type}
        if include_value:
            base["value"] = self.value(method)
        base.update(attributes)
        return tag("input", base)

    def label(self, method: str, text: Optional[str] = None, **attributes) -> str:
        content = html.escape(text if text is not None else humanize(method))
        return tag("label", {"for": self.field_id(method), **attributes}, content)

    def text_field(self, method: str, **attributes) -> str:
        return self._input("text", method, attributes)

    def password_field(self, method: str, **attributes) -> str:
        return self._input("password", method, attributes, include_value=False)

    def hidden_field(self, method: str, **attributes) -> str:
        return self._input("hidden", method, attributes)

    def text_area(self, method: str, **attributes) -> str:
        value = self.value(method)
        content = html.escape(str(value)) if value is not None else ""
        return tag("textarea", {"id": self.field_id(method), "name": self.field_name(method), **attributes}, content)

    def check_box(self, method: str, checked_value: str = "1", unchecked_value: str = "0", **attributes) -> str:
        current = self.value(method)
        checked = current is True or (current is not None and str(current) == str(checked_value))
        hidden = tag("input", {"name": self.field_name(method), "type": "hidden", "value": unchecked_value})
        box = self._input("checkbox", method, {"value": checked_value, "checked": checked, **attributes})
        return hidden + box

    def submit(self, value: Optional[str] = None, **attributes) -> str:
        value = value if value is not None else f"Save {humanize(self.object_name)}"
        return tag("input", {"name": "commit", "type": "submit", "value": value, **attributes})

    def fields_for(
        self, record_name: str, record_object: Any = None, block: Optional[Callable[[Any], Any]] = None, **options
    ):
        """Build a nested builder scoped to ``object_name[record_name]``.

        The nested builder uses ``options["builder"]``, inherited from this
        builder's options, so proxies stay proxies when nesting. With a
        ``block`` the nested builder is passed to it while the template
        captures output, and the captured markup is returned.
        """
        if record_object is None:
            record_object = self.value(record_name)

        fields_options = dict(options)
        fields_options.setdefault("builder", self.options.get("builder"))
        builder_class = fields_options["builder"] or type(self)

        builder = builder_class(f"{self.object_name}[{record_name}]", record_object, self.template, fields_options)

        if block is None:
            return builder
        return self.template.capture(block, builder)
