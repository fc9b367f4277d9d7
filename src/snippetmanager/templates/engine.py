"""Template instantiation: materialize a template into live tracked regions."""

import logging
from typing import List, Optional, Union

from ..buffer.base import EditingSurface
from ..core.config import MarkerConfig
from ..core.exceptions import TemplateError
from ..core.types import FieldDescriptor, SnippetInstance, TokenKind
from .fields import CompiledTemplate, compile_template
from .navigation import FieldNavigator

logger = logging.getLogger(__name__)


class TemplateInstantiator:
    """
    Inserts templates at point and tracks their fields.

    One instantiator serves one editing surface and owns at most one
    live SnippetInstance; starting a new instantiation tears down the
    previous one.
    """

    def __init__(
        self,
        surface: EditingSurface,
        config: Optional[MarkerConfig] = None,
        navigator: Optional[FieldNavigator] = None
    ):
        """
        Initialize the instantiator.

        Args:
            surface: Editing surface the templates are inserted into
            config: Marker syntax (defaults to MarkerConfig())
            navigator: Field navigator; one bound to ``surface`` is created if omitted
        """
        self.surface = surface
        self.config = config or MarkerConfig()
        self.navigator = navigator or FieldNavigator(surface)
        self.active: Optional[SnippetInstance] = None

        previous_callback = self.navigator.on_retire

        def forget(instance: SnippetInstance) -> None:
            if self.active is instance:
                self.active = None
            if previous_callback is not None:
                previous_callback(instance)

        self.navigator.on_retire = forget

    def compile(self, template: Union[str, CompiledTemplate]) -> CompiledTemplate:
        if isinstance(template, CompiledTemplate):
            return template
        return compile_template(template, self.config)

    def teardown(self) -> None:
        """Retire the live instance, if any. Inserted text is kept."""
        if self.active is not None and self.active.active:
            self.navigator.retire(self.active, reason="replaced")
        self.active = None

    def instantiate(self, template: Union[str, CompiledTemplate]) -> SnippetInstance:
        """
        Insert ``template`` at point and start tracking its fields.

        Args:
            template: Raw template text or a CompiledTemplate

        Returns:
            The new SnippetInstance. It is already retired when the
            template has no fields, since point lands on the exit at once.

        Raises:
            TemplateError: if the surface fails mid-insertion. Text inserted
                so far is removed again before raising.
        """
        compiled = self.compile(template)
        self.teardown()

        surface = self.surface
        surface.focus_span(None)
        start = surface.current_position()
        bound = surface.create_tracked_span(start, start, front_sticky=True, rear_sticky=True)

        fields: List[FieldDescriptor] = []
        exit_handle: Optional[int] = None
        specs = iter(compiled.fields)

        try:
            for token in compiled.tokens:
                if token.kind == TokenKind.LITERAL:
                    self._insert(token.text)
                elif token.kind == TokenKind.LINE_BREAK:
                    self._insert("\n")
                elif token.kind == TokenKind.INDENT:
                    surface.reindent_current_line()
                elif token.kind == TokenKind.EXIT:
                    if exit_handle is None:
                        position = surface.current_position()
                        exit_handle = surface.create_tracked_span(position, position)
                    else:
                        logger.debug("Ignoring extra exit marker in template")
                elif token.kind == TokenKind.FIELD:
                    spec = next(specs)
                    position = surface.current_position()
                    handle = surface.create_tracked_span(position, position)
                    surface.focus_span(handle)
                    surface.insert_text(token.default)
                    surface.focus_span(None)
                    fields.append(FieldDescriptor(
                        ordinal=spec.ordinal,
                        name=spec.name,
                        default=spec.default,
                        handle=handle,
                    ))
        except Exception as e:
            inserted = (surface.span_start(bound), surface.span_end(bound))
            for handle in [bound, exit_handle] + [f.handle for f in fields]:
                if handle is not None:
                    surface.release_span(handle)
            surface.focus_span(None)
            if inserted[1] > inserted[0]:
                surface.delete_text(*inserted)
            raise TemplateError(
                f"Failed to instantiate template: {e}",
                template=compiled.source,
                cause=e,
            ) from e

        bound_start = surface.span_start(bound)
        inserted_end = surface.span_end(bound)

        # Extend one unit past the inserted text so trailing fields stay tracked
        if inserted_end > start:
            bound_end = min(inserted_end + 1, surface.length())
            surface.move_span(bound, bound_start, bound_end)
            fallback = bound_end if bound_end == surface.length() else bound_end - 1
        else:
            bound_end = fallback = inserted_end

        if exit_handle is None:
            exit_handle = surface.create_tracked_span(fallback, fallback)

        fields.sort(key=lambda f: f.ordinal)
        instance = SnippetInstance(
            surface=surface,
            template=compiled.source,
            bound_handle=bound,
            exit_handle=exit_handle,
            fields=fields,
        )
        self.active = instance
        logger.debug(
            "Instantiated template with %d fields over [%d, %d)",
            len(fields), bound_start, bound_end,
        )

        if fields and instance.field_span(0)[0] == bound_start:
            self.navigator.goto_field(instance, 0)
        else:
            surface.set_position(bound_start)
            self.navigator.next_field(instance)

        return instance

    def _insert(self, text: str) -> None:
        """Insert at point without dragging zero-width spans already sitting there."""
        if not text:
            return
        position = self.surface.current_position()
        probe = self.surface.create_tracked_span(position, position)
        self.surface.focus_span(probe)
        try:
            self.surface.insert_text(text)
        finally:
            self.surface.release_span(probe)
