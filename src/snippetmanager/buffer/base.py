"""Abstract editing surface consumed by the snippet engines."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class ChangeKind(Enum):
    """Kind of buffer modification."""
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True)
class BufferChange:
    """
    A completed buffer modification.

    For inserts ``start``/``end`` delimit the new text; for deletes both
    are the collapsed offset and ``length`` is the removed width.
    """
    kind: ChangeKind
    start: int
    end: int
    length: int
    text: str = ""


ChangeListener = Callable[[BufferChange], None]


class EditingSurface(ABC):
    """
    Host editing surface.

    Implementations own the text, the point and an arena of tracked spans,
    and must keep span offsets correct across every insertion and deletion.
    """

    @property
    @abstractmethod
    def mode(self) -> Optional[str]:
        """Identifier of the surface's active major mode, if any."""
        pass

    # Text and point
    @abstractmethod
    def insert_text(self, text: str) -> None:
        """Insert ``text`` at point and leave point after it."""
        pass

    @abstractmethod
    def delete_text(self, start: int, end: int) -> None:
        """Delete the range ``[start, end)``."""
        pass

    @abstractmethod
    def current_position(self) -> int:
        pass

    @abstractmethod
    def set_position(self, offset: int) -> None:
        pass

    @abstractmethod
    def text_between(self, start: int, end: int) -> str:
        pass

    @abstractmethod
    def length(self) -> int:
        pass

    # Tracked spans
    @abstractmethod
    def create_tracked_span(
        self,
        start: int,
        end: int,
        front_sticky: bool = False,
        rear_sticky: bool = False
    ) -> int:
        """Start tracking ``[start, end)`` and return a stable handle."""
        pass

    @abstractmethod
    def span_start(self, handle: int) -> int:
        pass

    @abstractmethod
    def span_end(self, handle: int) -> int:
        pass

    @abstractmethod
    def move_span(self, handle: int, start: int, end: int) -> None:
        pass

    @abstractmethod
    def release_span(self, handle: int) -> None:
        pass

    @abstractmethod
    def focus_span(self, handle: Optional[int]) -> None:
        """Make insertions on the edges of ``handle`` land inside it."""
        pass

    # Oracles
    @abstractmethod
    def reindent_current_line(self) -> None:
        pass

    @abstractmethod
    def is_inside_comment(self, position: int) -> bool:
        pass

    @abstractmethod
    def is_at_line_start(self, position: int) -> bool:
        """True when only whitespace precedes ``position`` on its line."""
        pass

    # Change notification
    @abstractmethod
    def add_change_listener(self, listener: ChangeListener) -> None:
        pass

    @abstractmethod
    def remove_change_listener(self, listener: ChangeListener) -> None:
        pass

    def replace_text(self, start: int, end: int, text: str) -> None:
        """Replace ``[start, end)`` with ``text``; point ends after the new text."""
        self.delete_text(start, end)
        self.set_position(start)
        self.insert_text(text)
