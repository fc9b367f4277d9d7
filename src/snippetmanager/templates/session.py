"""Live editing of an instantiated snippet on one editing surface."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Union

from ..buffer.base import BufferChange, ChangeKind, EditingSurface
from ..core.config import MarkerConfig, NavigationSettings
from ..core.types import SnippetInstance
from .engine import TemplateInstantiator
from .fields import CompiledTemplate
from .navigation import FieldNavigator

logger = logging.getLogger(__name__)


class SnippetSession:
    """
    Owns the live snippet of an editing surface and reacts to edits.

    While an instance is live the session:
        - mirrors edits of a named field into the fields sharing its name;
        - lets the first text typed at the start of an untouched field
          replace that field's default;
        - cancels the instance when an edit lands outside its bounding span.
    """

    def __init__(
        self,
        surface: EditingSurface,
        config: Optional[MarkerConfig] = None,
        settings: Optional[NavigationSettings] = None
    ):
        self.surface = surface
        self.settings = settings or NavigationSettings()
        self.navigator = FieldNavigator(surface)
        self.engine = TemplateInstantiator(surface, config, self.navigator)
        self._suspended = False
        surface.add_change_listener(self._on_change)

    @property
    def config(self) -> MarkerConfig:
        return self.engine.config

    @property
    def active(self) -> Optional[SnippetInstance]:
        """The live snippet instance, if any."""
        instance = self.engine.active
        if instance is not None and instance.active:
            return instance
        return None

    def close(self) -> None:
        """Cancel any live instance and stop listening to the surface."""
        self.cancel()
        self.surface.remove_change_listener(self._on_change)

    # Instantiation and navigation
    def insert(self, template: Union[str, CompiledTemplate]) -> SnippetInstance:
        """Instantiate ``template`` at point."""
        with self._suspend():
            return self.engine.instantiate(template)

    def next_field(self) -> bool:
        instance = self.active
        if instance is None:
            return False
        return self.navigator.next_field(instance)

    def previous_field(self) -> bool:
        instance = self.active
        if instance is None:
            return False
        return self.navigator.previous_field(instance)

    def exit_snippet(self) -> None:
        instance = self.active
        if instance is not None:
            self.navigator.exit_snippet(instance)

    def cancel(self) -> None:
        instance = self.active
        if instance is not None:
            self.navigator.cancel(instance)

    def type_text(self, text: str) -> None:
        """
        Insert ``text`` at point as if typed by the user.

        Typing at the start of the current field while it still holds its
        untouched default replaces the default.
        """
        instance = self.active
        if instance is not None and self.settings.overwrite_defaults:
            self._clear_untouched_default(instance)
        self.surface.insert_text(text)

    # Change handling
    @contextmanager
    def _suspend(self) -> Iterator[None]:
        previous = self._suspended
        self._suspended = True
        try:
            yield
        finally:
            self._suspended = previous

    def _on_change(self, change: BufferChange) -> None:
        if self._suspended:
            return
        instance = self.active
        if instance is None:
            return

        if not self._touches_instance(instance, change):
            if self.settings.cancel_on_outside_edit:
                logger.debug("Edit at %d outside the snippet, cancelling", change.start)
                self.navigator.cancel(instance)
            return

        index = self._field_for_change(instance, change)
        if index is None:
            return
        instance.fields[index].touched = True
        if self.settings.mirror_linked_fields:
            self._mirror(instance, index)

    @staticmethod
    def _touches_instance(instance: SnippetInstance, change: BufferChange) -> bool:
        if change.kind == ChangeKind.INSERT:
            return instance.contains(change.start, change.end)
        return instance.contains(change.start, change.start)

    @staticmethod
    def _field_for_change(instance: SnippetInstance, change: BufferChange) -> Optional[int]:
        current = instance.current_index
        candidates = list(range(len(instance.fields)))
        if 0 <= current < len(candidates):
            candidates.remove(current)
            candidates.insert(0, current)
        for index in candidates:
            start, end = instance.field_span(index)
            if start <= change.start and change.end <= end:
                return index
        return None

    def _clear_untouched_default(self, instance: SnippetInstance) -> None:
        field = instance.current_field
        if field is None or field.touched or not field.default:
            return
        start, end = instance.field_span(instance.current_index)
        if self.surface.current_position() != start:
            return
        if self.surface.text_between(start, end) != field.default:
            return
        with self._suspend():
            self.surface.delete_text(start, end)
            self.surface.set_position(start)
        field.touched = True

    def _mirror(self, instance: SnippetInstance, index: int) -> None:
        text = instance.field_text(index)
        linked = instance.linked_fields(index)
        if not linked:
            return

        position = self.surface.current_position()
        with self._suspend():
            for other in linked:
                start, end = instance.field_span(other)
                if self.surface.text_between(start, end) == text:
                    continue
                self.surface.delete_text(start, end)
                self.surface.set_position(start)
                self.surface.focus_span(instance.fields[other].handle)
                self.surface.insert_text(text)
                instance.fields[other].touched = True
                if end <= position:
                    position += len(text) - (end - start)
            current = instance.current_field
            self.surface.focus_span(current.handle if current is not None else None)
            self.surface.set_position(position)
