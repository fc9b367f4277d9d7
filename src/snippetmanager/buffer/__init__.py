"""Editing surface interface, span tracking and the in-memory buffer."""

from .base import EditingSurface, BufferChange, ChangeKind, ChangeListener
from .spans import SpanArena, SpanRecord
from .text_buffer import TextBuffer

__all__ = [
    "EditingSurface",
    "BufferChange",
    "ChangeKind",
    "ChangeListener",
    "SpanArena",
    "SpanRecord",
    "TextBuffer",
]
