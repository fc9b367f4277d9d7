"""In-memory editing surface with simple comment and indentation oracles."""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .base import BufferChange, ChangeKind, ChangeListener, EditingSurface
from .spans import SpanArena
from ..core.exceptions import SpanError

logger = logging.getLogger(__name__)

IndentFunction = Callable[["TextBuffer", int], int]

DEFAULT_OPENERS = ("{", "(", "[", ":", " do", " then")
DEFAULT_CLOSERS = ("}", ")", "]", "end")


class TextBuffer(EditingSurface):
    """
    A plain string buffer implementing the EditingSurface interface.

    Comments are recognised from a line-comment prefix and an optional
    block-comment delimiter pair. Indentation follows the previous
    non-blank line, one level deeper after a line ending in a block
    opener and one level shallower for a line starting with a closer.
    A custom ``indent_function(buffer, line_start) -> columns`` replaces
    that rule entirely.
    """

    def __init__(
        self,
        text: str = "",
        position: Optional[int] = None,
        mode: Optional[str] = None,
        line_comment: Optional[str] = "#",
        block_comment: Optional[Tuple[str, str]] = None,
        indent_width: int = 4,
        openers: Sequence[str] = DEFAULT_OPENERS,
        closers: Sequence[str] = DEFAULT_CLOSERS,
        indent_function: Optional[IndentFunction] = None,
    ):
        self._text = text
        self._point = len(text) if position is None else position
        self._mode = mode
        self.line_comment = line_comment
        self.block_comment = block_comment
        self.indent_width = indent_width
        self.openers = tuple(openers)
        self.closers = tuple(closers)
        self.indent_function = indent_function
        self.spans = SpanArena()
        self._listeners: List[ChangeListener] = []
        self._check_offset(self._point)

    @property
    def mode(self) -> Optional[str]:
        return self._mode

    @mode.setter
    def mode(self, value: Optional[str]) -> None:
        self._mode = value

    @property
    def text(self) -> str:
        return self._text

    @property
    def point(self) -> int:
        return self._point

    def __str__(self) -> str:
        return self._text

    def render(self, cursor: str = "|") -> str:
        """Buffer text with ``cursor`` drawn at point."""
        return self._text[:self._point] + cursor + self._text[self._point:]

    # Text and point
    def insert_text(self, text: str) -> None:
        if not text:
            return
        pos = self._point
        self._text = self._text[:pos] + text + self._text[pos:]
        self.spans.adjust_for_insert(pos, len(text))
        self._point = pos + len(text)
        self._notify(BufferChange(ChangeKind.INSERT, pos, pos + len(text), len(text), text))

    def delete_text(self, start: int, end: int) -> None:
        self._check_offset(start)
        self._check_offset(end)
        if end <= start:
            return
        removed = self._text[start:end]
        self._text = self._text[:start] + self._text[end:]
        self.spans.adjust_for_delete(start, end)
        if self._point >= end:
            self._point -= end - start
        elif self._point > start:
            self._point = start
        self._notify(BufferChange(ChangeKind.DELETE, start, start, end - start, removed))

    def current_position(self) -> int:
        return self._point

    def set_position(self, offset: int) -> None:
        self._check_offset(offset)
        self._point = offset

    def text_between(self, start: int, end: int) -> str:
        return self._text[start:end]

    def length(self) -> int:
        return len(self._text)

    # Tracked spans
    def create_tracked_span(
        self,
        start: int,
        end: int,
        front_sticky: bool = False,
        rear_sticky: bool = False
    ) -> int:
        if end > len(self._text):
            raise SpanError(
                f"Span end {end} is past the buffer end {len(self._text)}",
                details={"start": start, "end": end},
            )
        return self.spans.create(start, end, front_sticky, rear_sticky)

    def span_start(self, handle: int) -> int:
        return self.spans.start(handle)

    def span_end(self, handle: int) -> int:
        return self.spans.end(handle)

    def move_span(self, handle: int, start: int, end: int) -> None:
        if end > len(self._text):
            raise SpanError(f"Span end {end} is past the buffer end", handle=handle)
        self.spans.move(handle, start, end)

    def release_span(self, handle: int) -> None:
        self.spans.release(handle)

    def focus_span(self, handle: Optional[int]) -> None:
        self.spans.set_focus(handle)

    # Oracles
    def line_bounds(self, position: int) -> Tuple[int, int]:
        """(start, end) offsets of the line containing ``position``."""
        start = self._text.rfind("\n", 0, position) + 1
        end = self._text.find("\n", position)
        return start, len(self._text) if end == -1 else end

    def is_at_line_start(self, position: int) -> bool:
        line_start, _ = self.line_bounds(position)
        return self._text[line_start:position].strip() == ""

    def is_inside_comment(self, position: int) -> bool:
        text = self._text[:position]
        block_start, block_end = self.block_comment or (None, None)
        state = None
        i = 0
        while i < len(text):
            if state == "line":
                if text[i] == "\n":
                    state = None
                i += 1
            elif state == "block":
                if text.startswith(block_end, i):
                    state = None
                    i += len(block_end)
                else:
                    i += 1
            elif self.line_comment and text.startswith(self.line_comment, i):
                state = "line"
                i += len(self.line_comment)
            elif block_start and text.startswith(block_start, i):
                state = "block"
                i += len(block_start)
            else:
                i += 1
        return state is not None

    def indentation_of(self, line_start: int) -> int:
        """Width of the leading whitespace of the line starting at ``line_start``."""
        _, line_end = self.line_bounds(line_start)
        line = self._text[line_start:line_end]
        return len(line) - len(line.lstrip(" \t"))

    def desired_indentation(self, line_start: int) -> int:
        """Column the line starting at ``line_start`` should be indented to."""
        if self.indent_function is not None:
            return max(0, self.indent_function(self, line_start))

        _, line_end = self.line_bounds(line_start)
        current = self._text[line_start:line_end].strip()

        previous_end = line_start - 1
        while previous_end >= 0:
            previous_start, _ = self.line_bounds(previous_end)
            previous = self._text[previous_start:previous_end]
            if previous.strip():
                break
            previous_end = previous_start - 1
        else:
            return 0

        columns = self.indentation_of(previous_start)
        if previous.rstrip().endswith(self.openers):
            columns += self.indent_width
        if current.startswith(self.closers):
            columns -= self.indent_width
        return max(0, columns)

    def reindent_current_line(self) -> None:
        line_start, _ = self.line_bounds(self._point)
        current = self.indentation_of(line_start)
        desired = self.desired_indentation(line_start)
        column = self._point - line_start - current

        if current != desired:
            focus = self.spans.focus
            self.spans.set_focus(None)
            self.delete_text(line_start, line_start + current)
            self._point = line_start
            self.insert_text(" " * desired)
            self.spans.set_focus(focus)
            logger.debug("Reindented line at %d from %d to %d columns", line_start, current, desired)

        self._point = line_start + desired + max(column, 0)

    # Change notification
    def add_change_listener(self, listener: ChangeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, change: BufferChange) -> None:
        for listener in list(self._listeners):
            listener(change)

    def _check_offset(self, offset: int) -> None:
        if offset < 0 or offset > len(self._text):
            raise SpanError(
                f"Offset {offset} outside buffer of length {len(self._text)}",
                details={"offset": offset},
            )
