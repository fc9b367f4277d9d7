"""Cursor navigation among the fields of a live snippet instance."""

import logging
from typing import Callable, Optional

from ..buffer.base import EditingSurface
from ..core.exceptions import NavigationError
from ..core.types import SnippetInstance

logger = logging.getLogger(__name__)

RetireCallback = Callable[[SnippetInstance], None]


class FieldNavigator:
    """
    Moves point among fields in template order.

    Moving past the last field lands on the exit position and retires
    the instance: its spans are released and the inserted text becomes
    ordinary, untracked text.
    """

    def __init__(self, surface: EditingSurface, on_retire: Optional[RetireCallback] = None):
        self.surface = surface
        self.on_retire = on_retire

    def goto_field(self, instance: SnippetInstance, index: int) -> None:
        """Place point at the start of field ``index`` and focus it."""
        self._require_active(instance)
        if not 0 <= index < len(instance.fields):
            raise NavigationError(
                f"Field index {index} out of range for {len(instance.fields)} fields",
                field_index=index,
            )
        instance.current_index = index
        start, _ = instance.field_span(index)
        self.surface.focus_span(instance.fields[index].handle)
        self.surface.set_position(start)

    def next_field(self, instance: SnippetInstance) -> bool:
        """
        Move to the next field.

        Returns:
            True if point is now on a field, False if the snippet was exited
        """
        self._require_active(instance)
        target = self._sync_index(instance) + 1
        if target < len(instance.fields):
            self.goto_field(instance, target)
            return True
        self.exit_snippet(instance)
        return False

    def previous_field(self, instance: SnippetInstance) -> bool:
        """
        Move to the previous field.

        Returns:
            True if point moved, False if already on the first field
        """
        self._require_active(instance)
        index = self._sync_index(instance)
        if index <= 0:
            return False
        self.goto_field(instance, index - 1)
        return True

    def exit_snippet(self, instance: SnippetInstance) -> None:
        """Jump to the exit position and retire the instance."""
        self._require_active(instance)
        position = instance.exit_position
        self.retire(instance, reason="exited")
        self.surface.set_position(position)

    def cancel(self, instance: SnippetInstance) -> None:
        """Stop tracking the instance without moving point or reverting text."""
        if instance.active:
            self.retire(instance, reason="cancelled")

    def retire(self, instance: SnippetInstance, reason: str = "retired") -> None:
        """Release every span of the instance."""
        for handle in instance.handles():
            self.surface.release_span(handle)
        self.surface.focus_span(None)
        instance.active = False
        logger.debug("Snippet instance %s (%d fields)", reason, len(instance.fields))
        if self.on_retire is not None:
            self.on_retire(instance)

    def _sync_index(self, instance: SnippetInstance) -> int:
        """Current field index, following point if it was moved into another field."""
        index = instance.field_at(self.surface.current_position())
        if index is not None and index != instance.current_index:
            instance.current_index = index
        return instance.current_index

    @staticmethod
    def _require_active(instance: SnippetInstance) -> None:
        if not instance.active:
            raise NavigationError("Snippet instance is no longer active")
