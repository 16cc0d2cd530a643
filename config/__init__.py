"""
Configuration Management Package

Provides configuration loading from JSON, YAML, .env files and environment
variables, plus typed settings for caching, forms and logging.
"""

from .manager import (
    ConfigFormat,
    ConfigManager,
    ConfigSchema,
    ConfigValidationError,
    Environment,
    EnvironmentConfig,
    get_config,
    initialize_config_manager,
)
from .settings import (
    CacheSettings,
    FormSettings,
    LoggingSettings,
    Settings,
    get_settings,
    initialize_settings,
    reload_settings,
)

__all__ = [
    'ConfigManager',
    'ConfigSchema',
    'ConfigFormat',
    'ConfigValidationError',
    'Environment',
    'EnvironmentConfig',
    'get_config',
    'initialize_config_manager',
    'CacheSettings',
    'FormSettings',
    'LoggingSettings',
    'Settings',
    'get_settings',
    'initialize_settings',
    'reload_settings',
]
