"""Core module - foundational types, configuration, errors and registries."""

from .types import (
    Token,
    TokenKind,
    FieldSpec,
    FieldLayout,
    FieldDescriptor,
    SnippetInstance,
    ContextFacts,
    ExpansionOutcome,
    ExpansionResult,
)
from .config import (
    MarkerConfig,
    Settings,
    build_marker_config,
    get_settings,
    reload_settings,
)
from .exceptions import (
    SnippetManagerError,
    TemplateError,
    DispatchError,
    ConditionError,
    NavigationError,
    SpanError,
    ConfigurationError,
)
from .registry import Registry, ConditionRegistry, condition_registry
from .logging_config import setup_logging

__all__ = [
    # Types
    "Token",
    "TokenKind",
    "FieldSpec",
    "FieldLayout",
    "FieldDescriptor",
    "SnippetInstance",
    "ContextFacts",
    "ExpansionOutcome",
    "ExpansionResult",
    # Configuration
    "MarkerConfig",
    "Settings",
    "build_marker_config",
    "get_settings",
    "reload_settings",
    "setup_logging",
    # Exceptions
    "SnippetManagerError",
    "TemplateError",
    "DispatchError",
    "ConditionError",
    "NavigationError",
    "SpanError",
    "ConfigurationError",
    # Registry
    "Registry",
    "ConditionRegistry",
    "condition_registry",
]
