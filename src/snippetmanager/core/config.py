"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from typing import Any
from functools import lru_cache

from .exceptions import ConfigurationError


class MarkerConfig(BaseModel):
    """
    Marker syntax for one editing surface.

    Threaded explicitly into the token splitter and the instantiation
    engine; nothing reads markers from ambient state.
    """

    line_terminator_marker: str = "\n"
    indent_marker: str = "$>"
    exit_marker: str = "$."
    field_marker: str = "$$"
    default_begin: str = "{"
    default_end: str = "}"

    model_config = {"frozen": True}

    @field_validator("line_terminator_marker", "indent_marker", "exit_marker", "field_marker")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("markers must be non-empty strings")
        return value

    @field_validator("default_begin", "default_end")
    @classmethod
    def _single_char(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("default delimiters must be single characters")
        return value

    @model_validator(mode="after")
    def _distinct(self) -> "MarkerConfig":
        markers = self.markers()
        if len(set(markers.values())) != len(markers):
            raise ValueError(f"markers must be distinct: {markers}")
        if self.default_begin == self.default_end:
            raise ValueError("default begin and end characters must differ")
        return self

    def markers(self) -> dict:
        """Return the four delimiter markers keyed by role."""
        return {
            "line_terminator": self.line_terminator_marker,
            "indent": self.indent_marker,
            "exit": self.exit_marker,
            "field": self.field_marker,
        }


def build_marker_config(**overrides: Any) -> MarkerConfig:
    """Build a MarkerConfig, reporting bad values as ConfigurationError."""
    try:
        return MarkerConfig(**overrides)
    except ValidationError as e:
        keys = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise ConfigurationError(
            "Invalid marker configuration",
            config_key=", ".join(k for k in keys if k) or None,
            details={"errors": [err["msg"] for err in e.errors()]},
            cause=e,
        ) from e


class MarkerSettings(BaseSettings):
    """Default marker syntax, overridable from the environment."""

    line_terminator_marker: str = Field("\n", alias="SM_LINE_TERMINATOR_MARKER")
    indent_marker: str = Field("$>", alias="SM_INDENT_MARKER")
    exit_marker: str = Field("$.", alias="SM_EXIT_MARKER")
    field_marker: str = Field("$$", alias="SM_FIELD_MARKER")
    default_begin: str = Field("{", alias="SM_DEFAULT_BEGIN")
    default_end: str = Field("}", alias="SM_DEFAULT_END")

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}

    def to_marker_config(self) -> MarkerConfig:
        """Validate and freeze these settings into a MarkerConfig."""
        return build_marker_config(
            line_terminator_marker=self.line_terminator_marker,
            indent_marker=self.indent_marker,
            exit_marker=self.exit_marker,
            field_marker=self.field_marker,
            default_begin=self.default_begin,
            default_end=self.default_end,
        )


class DispatchSettings(BaseSettings):
    """Conditional dispatch configuration."""

    default_table: str = Field("global", alias="SM_DEFAULT_TABLE")
    propagate_condition_errors: bool = Field(False, alias="SM_PROPAGATE_CONDITION_ERRORS")
    propagate_template_errors: bool = Field(False, alias="SM_PROPAGATE_TEMPLATE_ERRORS")

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


class NavigationSettings(BaseSettings):
    """Field navigation and live-editing configuration."""

    mirror_linked_fields: bool = Field(True, alias="SM_MIRROR_LINKED_FIELDS")
    overwrite_defaults: bool = Field(True, alias="SM_OVERWRITE_DEFAULTS")
    cancel_on_outside_edit: bool = Field(True, alias="SM_CANCEL_ON_OUTSIDE_EDIT")

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", alias="SM_LOG_LEVEL")
    format: str = Field("rich", alias="SM_LOG_FORMAT")

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


class Settings(BaseSettings):
    """Root configuration aggregating all settings."""

    markers: MarkerSettings = Field(default_factory=MarkerSettings)
    dispatch: DispatchSettings = Field(default_factory=DispatchSettings)
    navigation: NavigationSettings = Field(default_factory=NavigationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {
        "env_file": ".env",
        "env_nested_delimiter": "__",
        "extra": "ignore"
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
