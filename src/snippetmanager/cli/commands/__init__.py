"""CLI commands."""

from .templates import tokens, render
from .dispatch import expand, list_conditions

__all__ = [
    "tokens",
    "render",
    "expand",
    "list_conditions",
]
