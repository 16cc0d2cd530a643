"""
Application Settings

Defines structured settings classes for fragment caching, form building
and logging.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .manager import ConfigManager, ConfigSchema, Environment

CACHE_BACKENDS = ("memory", "none")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("json", "text", "colored")


@dataclass
class CacheSettings:
    """Fragment cache settings."""

    enabled: bool = True
    backend: str = "memory"  # memory, none
    default_ttl: Optional[int] = None  # seconds, None never expires
    max_size: int = 1000
    key_prefix: str = "views/"

    @classmethod
    def get_schemas(cls) -> List[ConfigSchema]:
        """Get configuration schemas for cache settings."""
        return [
            ConfigSchema("cache_enabled", data_type=bool, default_value=True, env_var="WIDGETRY_CACHE_ENABLED"),
            ConfigSchema(
                "cache_backend",
                default_value="memory",
                validator=lambda value: value in CACHE_BACKENDS,
                env_var="WIDGETRY_CACHE_BACKEND",
            ),
            ConfigSchema(
                "cache_default_ttl",
                required=False,
                data_type=int,
                validator=lambda value: value > 0,
                env_var="WIDGETRY_CACHE_TTL",
            ),
            ConfigSchema(
                "cache_max_size",
                data_type=int,
                default_value=1000,
                validator=lambda value: value > 0,
                env_var="WIDGETRY_CACHE_MAX_SIZE",
            ),
            ConfigSchema("cache_key_prefix", default_value="views/", env_var="WIDGETRY_CACHE_KEY_PREFIX"),
        ]


@dataclass
class FormSettings:
    """Form builder settings."""

    # Dotted path of the parent builder wrapped by FormBuilderProxy
    default_builder: str = "forms.html_builder.HTMLFormBuilder"

    @classmethod
    def get_schemas(cls) -> List[ConfigSchema]:
        """Get configuration schemas for form settings."""
        return [
            ConfigSchema(
                "forms_default_builder",
                default_value="forms.html_builder.HTMLFormBuilder",
                description="Import path of the default parent form builder",
                env_var="WIDGETRY_FORM_BUILDER",
            ),
        ]


@dataclass
class LoggingSettings:
    """Logging settings."""

    level: str = "INFO"
    format: str = "json"
    file: Optional[str] = None

    @classmethod
    def get_schemas(cls) -> List[ConfigSchema]:
        """Get configuration schemas for logging settings."""
        return [
            ConfigSchema(
                "logging_level",
                default_value="INFO",
                validator=lambda value: value.upper() in LOG_LEVELS,
                env_var="LOG_LEVEL",
            ),
            ConfigSchema(
                "logging_format",
                default_value="json",
                validator=lambda value: value.lower() in LOG_FORMATS,
                env_var="LOG_FORMAT",
            ),
            ConfigSchema("logging_file", required=False, env_var="LOG_FILE"),
        ]


@dataclass
class Settings:
    """Main application settings container."""

    environment: Environment = Environment.DEVELOPMENT
    cache: CacheSettings = field(default_factory=CacheSettings)
    forms: FormSettings = field(default_factory=FormSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_config_manager(cls, config_manager: ConfigManager) -> 'Settings':
        """Create settings from configuration manager."""
        config = config_manager.get_all()

        return cls(
            environment=config_manager.environment,
            cache=CacheSettings(
                enabled=config.get("cache_enabled", True),
                backend=config.get("cache_backend", "memory"),
                default_ttl=config.get("cache_default_ttl"),
                max_size=config.get("cache_max_size", 1000),
                key_prefix=config.get("cache_key_prefix", "views/"),
            ),
            forms=FormSettings(
                default_builder=config.get("forms_default_builder", "forms.html_builder.HTMLFormBuilder"),
            ),
            logging=LoggingSettings(
                level=config.get("logging_level", "INFO").upper(),
                format=config.get("logging_format", "json").lower(),
                file=config.get("logging_file"),
            ),
        )

    @classmethod
    def get_all_schemas(cls) -> List[ConfigSchema]:
        """Get all configuration schemas."""
        schemas = []
        schemas.extend(CacheSettings.get_schemas())
        schemas.extend(FormSettings.get_schemas())
        schemas.extend(LoggingSettings.get_schemas())
        return schemas


# Global settings instance
_settings: Optional[Settings] = None


def initialize_settings(config_manager: ConfigManager) -> Settings:
    """Initialize global settings from configuration manager."""
    global _settings

    config_manager.register_schemas(Settings.get_all_schemas())
    config_manager.load_config()

    _settings = Settings.from_config_manager(config_manager)

    return _settings


def get_settings() -> Settings:
    """Get global settings instance, falling back to defaults."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(config_manager: ConfigManager) -> Settings:
    """Reload settings from configuration manager."""
    return initialize_settings(config_manager)
