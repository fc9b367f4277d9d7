"""Arena of tracked text spans referenced by stable integer handles."""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from ..core.exceptions import SpanError


@dataclass
class SpanRecord:
    """Offsets of one tracked span plus its edge behaviour."""
    start: int
    end: int
    front_sticky: bool = False
    rear_sticky: bool = False

    @property
    def is_point(self) -> bool:
        return self.start == self.end


class SpanArena:
    """
    Tracked spans that follow the text they cover.

    Hosts must call ``adjust_for_insert`` / ``adjust_for_delete`` on every
    edit. Handles are allocated in increasing order and never reused, so
    creation order doubles as template order for spans created by one
    instantiation.

    Insertion at offset ``pos``:
        - spans starting after ``pos`` shift right;
        - spans with ``pos`` strictly inside grow;
        - the focused span grows when ``pos`` is on either of its edges;
        - a sticky edge at ``pos`` grows its span;
        - other spans starting at ``pos`` shift, except zero-width spans
          created before a focused span that also starts at ``pos``.

    With these rules a span ending where its neighbour starts can never
    overlap that neighbour.
    """

    def __init__(self):
        self._records: Dict[int, SpanRecord] = {}
        self._next_handle = 0
        self._focus: Optional[int] = None

    def create(
        self,
        start: int,
        end: int,
        front_sticky: bool = False,
        rear_sticky: bool = False
    ) -> int:
        """Create a span and return its handle."""
        self._check_range(start, end)
        handle = self._next_handle
        self._next_handle += 1
        self._records[handle] = SpanRecord(start, end, front_sticky, rear_sticky)
        return handle

    def get(self, handle: int) -> SpanRecord:
        try:
            return self._records[handle]
        except KeyError:
            raise SpanError(f"Unknown span handle {handle}", handle=handle)

    def start(self, handle: int) -> int:
        return self.get(handle).start

    def end(self, handle: int) -> int:
        return self.get(handle).end

    def bounds(self, handle: int) -> Tuple[int, int]:
        record = self.get(handle)
        return record.start, record.end

    def move(self, handle: int, start: int, end: int) -> None:
        """Move a span to new offsets."""
        self._check_range(start, end)
        record = self.get(handle)
        record.start, record.end = start, end

    def release(self, handle: int) -> None:
        """Stop tracking a span. Releasing an unknown handle is a no-op."""
        self._records.pop(handle, None)
        if self._focus == handle:
            self._focus = None

    @property
    def focus(self) -> Optional[int]:
        return self._focus

    def set_focus(self, handle: Optional[int]) -> None:
        """Make ``handle`` absorb insertions on its edges (None clears focus)."""
        if handle is not None:
            self.get(handle)
        self._focus = handle

    def adjust_for_insert(self, pos: int, length: int) -> None:
        """Update every span for ``length`` characters inserted at ``pos``."""
        if length <= 0:
            return
        focus = self._records.get(self._focus) if self._focus is not None else None
        focus_start = focus.start if focus is not None else None

        for handle, record in self._records.items():
            start, end = record.start, record.end

            if record is focus and start <= pos <= end:
                record.end += length
            elif pos < start:
                record.start += length
                record.end += length
            elif pos == start:
                if record.front_sticky or (record.is_point and record.rear_sticky):
                    record.end += length
                elif (
                    record.is_point
                    and focus_start == pos
                    and self._focus is not None
                    and handle < self._focus
                ):
                    pass
                else:
                    record.start += length
                    record.end += length
            elif pos < end:
                record.end += length
            elif pos == end and record.rear_sticky:
                record.end += length

    def adjust_for_delete(self, start: int, end: int) -> None:
        """Update every span for the deletion of ``[start, end)``."""
        if end <= start:
            return
        width = end - start

        def remap(offset: int) -> int:
            if offset <= start:
                return offset
            if offset < end:
                return start
            return offset - width

        for record in self._records.values():
            record.start = remap(record.start)
            record.end = remap(record.end)

    def handles(self) -> List[int]:
        return list(self._records.keys())

    def __contains__(self, handle: int) -> bool:
        return handle in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Tuple[int, SpanRecord]]:
        return iter(list(self._records.items()))

    @staticmethod
    def _check_range(start: int, end: int) -> None:
        if start < 0 or end < start:
            raise SpanError(
                f"Invalid span range [{start}, {end})",
                details={"start": start, "end": end},
            )
