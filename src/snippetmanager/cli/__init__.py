"""Command-line interface for SnippetManager."""

from .main import cli, main

__all__ = ["cli", "main"]
