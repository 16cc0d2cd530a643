"""
Builder loading from configuration.
"""

import importlib
import logging
from typing import Optional, Type

from config.settings import FormSettings, get_settings
from utils.error_handling import FormBuilderError

from .builder import FormBuilderProxy

logger = logging.getLogger(__name__)


def load_builder_class(path: Optional[str]) -> Optional[Type]:
    """Import a builder class from ``package.module.ClassName``. Empty paths give None."""
    if not path:
        return None

    module_path, _, class_name = path.rpartition(".")
    if not module_path:
        raise FormBuilderError(f"Form builder path must be 'module.ClassName', got '{path}'", builder=path)

    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise FormBuilderError(f"Cannot import form builder module '{module_path}'", builder=path) from e

    builder_class = getattr(module, class_name, None)
    if not isinstance(builder_class, type):
        raise FormBuilderError(f"'{class_name}' is not a class in '{module_path}'", builder=path)

    return builder_class


def configured_proxy_class(settings: FormSettings = None) -> Type[FormBuilderProxy]:
    """Proxy class wrapping the configured default builder."""
    settings = settings or get_settings().forms
    builder_class = load_builder_class(settings.default_builder)

    if builder_class is None or builder_class is FormBuilderProxy.parent_builder_class:
        return FormBuilderProxy

    logger.info(f"Using form builder {settings.default_builder}")
    return FormBuilderProxy.wrapping(builder_class)
