"""
SnippetManager - Conditional snippet expansion for text editing surfaces

Trigger words expand into templates with fillable fields, indentation
points and an exit position; the same trigger can pick different
templates depending on context (inside a comment, at start of line).

Basic Usage:
    >>> from snippetmanager import SnippetManager, TextBuffer
    >>> sm = SnippetManager(TextBuffer(mode="ruby-mode"))
    >>>
    >>> # Newest registration is tried first
    >>> sm.register("ruby-mode", "if", "always", "if $${cond}\\n$.\\nend")
    >>> sm.register("ruby-mode", "if", "insideComment", "if")
    >>>
    >>> result = sm.expand("if")
    >>> result.expanded
    True
    >>> sm.next_field()   # walk fields, then land on the exit
    False

For more control, use the individual modules:
    - snippetmanager.templates: Token splitting, field extraction, instantiation, navigation
    - snippetmanager.dispatch: Conditions, dispatch tables and the expander
    - snippetmanager.buffer: The editing surface interface and an in-memory buffer
    - snippetmanager.cli: Command-line interface
"""

from typing import Any, List, Mapping, Optional, Union

from .core.types import (
    Token,
    TokenKind,
    FieldSpec,
    SnippetInstance,
    ContextFacts,
    ExpansionOutcome,
    ExpansionResult,
)
from .core.config import MarkerConfig, Settings, get_settings
from .core.exceptions import (
    SnippetManagerError,
    TemplateError,
    DispatchError,
    ConditionError,
    NavigationError,
    SpanError,
    ConfigurationError,
)
from .core.registry import ConditionRegistry, condition_registry
from .buffer import EditingSurface, TextBuffer
from .templates import CompiledTemplate, SnippetSession, compile_template, split_template
from .dispatch import DispatchEntry, DispatchTable, Expander, TableSet, as_condition


__version__ = "1.0.0"
__all__ = [
    # Main class
    "SnippetManager",
    # Core types
    "Token",
    "TokenKind",
    "FieldSpec",
    "SnippetInstance",
    "ContextFacts",
    "ExpansionOutcome",
    "ExpansionResult",
    "MarkerConfig",
    # Exceptions
    "SnippetManagerError",
    "TemplateError",
    "DispatchError",
    "ConditionError",
    "NavigationError",
    "SpanError",
    "ConfigurationError",
    # Components (for advanced use)
    "EditingSurface",
    "TextBuffer",
    "SnippetSession",
    "CompiledTemplate",
    "compile_template",
    "split_template",
    "DispatchEntry",
    "DispatchTable",
    "TableSet",
    "Expander",
    "ConditionRegistry",
    "as_condition",
]


class SnippetManager:
    """
    Snippet expansion for one editing surface.

    Holds the surface's marker configuration, its dispatch tables and its
    single live snippet instance.

    Example:
        >>> sm = SnippetManager(TextBuffer())
        >>> sm.define("for", "for $${item} in $${items}:\\n$>$.")
        >>> sm.expand("for").expanded
        True
    """

    def __init__(
        self,
        surface: Optional[EditingSurface] = None,
        config: Optional[MarkerConfig] = None,
        settings: Optional[Settings] = None,
        tables: Optional[TableSet] = None,
        registry: Optional[ConditionRegistry] = None,
    ):
        """
        Initialize the SnippetManager.

        Args:
            surface: Editing surface (a new empty TextBuffer if omitted)
            config: Marker syntax (from settings if omitted)
            settings: Settings (the cached global settings if omitted)
            tables: Dispatch tables (a new, empty TableSet if omitted)
            registry: Named conditions (the global registry if omitted)
        """
        self.settings = settings or get_settings()
        self.surface = surface if surface is not None else TextBuffer()
        self.config = config or self.settings.markers.to_marker_config()
        self.tables = tables or TableSet(self.settings.dispatch.default_table)
        self.registry = registry or condition_registry

        self.session = SnippetSession(self.surface, self.config, self.settings.navigation)
        self.expander = Expander(
            self.surface,
            self.tables,
            self.session.insert,
            registry=self.registry,
            settings=self.settings.dispatch,
        )

    @property
    def active(self) -> Optional[SnippetInstance]:
        """The live snippet instance, if any."""
        return self.session.active

    # Registration
    def register(
        self,
        table_name: Optional[str],
        trigger: str,
        condition: Any,
        template: str
    ) -> DispatchEntry:
        """
        Register a conditional template for a trigger word.

        Args:
            table_name: Table (mode) name; the default table if None
            trigger: Trigger word
            condition: Callable, fact name, named condition, dict form or literal
            template: Marker-annotated template

        Returns:
            The new entry, tried before every earlier entry for the trigger
        """
        return self.tables.register(table_name, trigger, condition, template)

    def define(self, trigger: str, template: str, table: Optional[str] = None) -> DispatchEntry:
        """Register an unconditional template."""
        return self.register(table, trigger, "always", template)

    def register_many(
        self,
        table_name: Optional[str],
        templates: Mapping[str, str],
        condition: Any = "always"
    ) -> List[DispatchEntry]:
        """Register several triggers in one table under one condition."""
        return self.tables.table(table_name).register_many(templates, condition)

    def table(self, name: Optional[str] = None) -> DispatchTable:
        return self.tables.table(name)

    # Expansion
    def expand(self, trigger: str, table: Optional[str] = None) -> ExpansionResult:
        """
        Expand a trigger word at point.

        Args:
            trigger: The trigger word (not yet inserted in the buffer)
            table: Table name; inferred from the surface mode if omitted

        Returns:
            ExpansionResult (EXPANDED or NO_MATCH_INSERTED_LITERAL)
        """
        return self.expander.expand(trigger, table)

    def insert_snippet(self, template: Union[str, CompiledTemplate]) -> SnippetInstance:
        """Instantiate a template at point without any dispatch."""
        return self.session.insert(template)

    # Navigation and live editing
    def next_field(self) -> bool:
        return self.session.next_field()

    def previous_field(self) -> bool:
        return self.session.previous_field()

    def exit_snippet(self) -> None:
        self.session.exit_snippet()

    def cancel(self) -> None:
        self.session.cancel()

    def type_text(self, text: str) -> None:
        self.session.type_text(text)

    # Template inspection
    def tokenize(self, template: str) -> List[Token]:
        return split_template(template, self.config)

    def compile(self, template: str) -> CompiledTemplate:
        return compile_template(template, self.config)

    def close(self) -> None:
        """Cancel the live snippet and detach from the surface."""
        self.session.close()
