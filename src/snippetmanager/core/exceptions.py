"""Custom exceptions for the snippet management system."""

from typing import Optional, Dict, Any


class SnippetManagerError(Exception):
    """Base exception for all snippet manager errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class TemplateError(SnippetManagerError):
    """Error while instantiating a template into a buffer."""

    def __init__(
        self,
        message: str,
        template: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, details, cause)
        self.template = template
        if template is not None:
            self.details["template"] = template


class DispatchError(SnippetManagerError):
    """Error in dispatch table registration or lookup."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        trigger: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, details, cause)
        self.table = table
        self.trigger = trigger
        if table:
            self.details["table"] = table
        if trigger:
            self.details["trigger"] = trigger


class ConditionError(SnippetManagerError):
    """Error while building, serializing or evaluating a dispatch condition."""

    def __init__(
        self,
        message: str,
        condition: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, details, cause)
        self.condition = condition
        if condition:
            self.details["condition"] = condition


class NavigationError(SnippetManagerError):
    """Error while moving between fields of a snippet instance."""

    def __init__(
        self,
        message: str,
        field_index: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, details, cause)
        self.field_index = field_index
        if field_index is not None:
            self.details["field_index"] = field_index


class SpanError(SnippetManagerError):
    """Error when a tracked span handle is unknown or a range is invalid."""

    def __init__(
        self,
        message: str,
        handle: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, details, cause)
        self.handle = handle
        if handle is not None:
            self.details["handle"] = handle


class ConfigurationError(SnippetManagerError):
    """Error in configuration."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, details, cause)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key
