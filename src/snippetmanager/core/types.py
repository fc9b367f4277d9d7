"""Core type definitions for the snippet management system."""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple, TYPE_CHECKING
from enum import Enum

if TYPE_CHECKING:
    from ..buffer.base import EditingSurface


class TokenKind(Enum):
    """Kind of a template token."""
    LITERAL = "literal"
    LINE_BREAK = "line_break"
    INDENT = "indent"
    EXIT = "exit"
    FIELD = "field"


@dataclass(frozen=True)
class Token:
    """A single typed piece of a template, in template order."""
    kind: TokenKind
    text: str = ""
    name: str = ""
    default: str = ""

    @classmethod
    def literal(cls, text: str) -> "Token":
        return cls(TokenKind.LITERAL, text=text)

    @classmethod
    def line_break(cls) -> "Token":
        return cls(TokenKind.LINE_BREAK)

    @classmethod
    def indent(cls) -> "Token":
        return cls(TokenKind.INDENT)

    @classmethod
    def exit(cls) -> "Token":
        return cls(TokenKind.EXIT)

    @classmethod
    def field_start(cls, name: str, default: str = "") -> "Token":
        return cls(TokenKind.FIELD, name=name, default=default)

    def __repr__(self) -> str:
        if self.kind == TokenKind.LITERAL:
            return f"Literal({self.text!r})"
        if self.kind == TokenKind.FIELD:
            return f"FieldStart({self.name!r}, {self.default!r})"
        return self.kind.name.title().replace("_", "")


@dataclass(frozen=True)
class FieldSpec:
    """A field's position in the flat text a template would insert."""
    ordinal: int
    name: str
    default: str
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass
class FieldLayout:
    """Result of extracting field regions from a token list."""
    text: str
    fields: List[FieldSpec] = field(default_factory=list)
    exit_offset: Optional[int] = None
    indent_points: List[int] = field(default_factory=list)

    @property
    def has_exit(self) -> bool:
        return self.exit_offset is not None

    def linked_groups(self) -> Dict[str, List[int]]:
        """Ordinals of named fields that share a name with another field."""
        groups: Dict[str, List[int]] = {}
        for spec in self.fields:
            if spec.name:
                groups.setdefault(spec.name, []).append(spec.ordinal)
        return {name: ords for name, ords in groups.items() if len(ords) > 1}


@dataclass
class FieldDescriptor:
    """A live field of an instantiated template."""
    ordinal: int
    name: str
    default: str
    handle: int
    touched: bool = False


@dataclass
class SnippetInstance:
    """
    A live template instantiation on one editing surface.

    Spans are referenced by arena handles; their offsets are read back
    from the surface, which keeps them current under editing.
    """
    surface: "EditingSurface"
    template: str
    bound_handle: int
    exit_handle: int
    fields: List[FieldDescriptor] = field(default_factory=list)
    current_index: int = -1
    active: bool = True

    @property
    def bounds(self) -> Tuple[int, int]:
        """Current (start, end) of the bounding span."""
        return (
            self.surface.span_start(self.bound_handle),
            self.surface.span_end(self.bound_handle),
        )

    @property
    def exit_position(self) -> int:
        return self.surface.span_start(self.exit_handle)

    @property
    def current_field(self) -> Optional[FieldDescriptor]:
        if 0 <= self.current_index < len(self.fields):
            return self.fields[self.current_index]
        return None

    def field_span(self, index: int) -> Tuple[int, int]:
        """Current (start, end) of field ``index``."""
        handle = self.fields[index].handle
        return self.surface.span_start(handle), self.surface.span_end(handle)

    def field_text(self, index: int) -> str:
        start, end = self.field_span(index)
        return self.surface.text_between(start, end)

    def field_spans(self) -> List[Tuple[int, int]]:
        return [self.field_span(i) for i in range(len(self.fields))]

    def field_at(self, position: int) -> Optional[int]:
        """Index of the field containing ``position``, preferring the current one."""
        current = self.current_field
        if current is not None:
            start, end = self.field_span(self.current_index)
            if start <= position <= end:
                return self.current_index
        for i in range(len(self.fields)):
            start, end = self.field_span(i)
            if start <= position <= end:
                return i
        return None

    def linked_fields(self, index: int) -> List[int]:
        """Other fields sharing a non-empty name with field ``index``."""
        name = self.fields[index].name
        if not name:
            return []
        return [i for i, f in enumerate(self.fields) if f.name == name and i != index]

    def contains(self, start: int, end: int) -> bool:
        """Whether the range [start, end] lies within the bounding span."""
        bound_start, bound_end = self.bounds
        return bound_start <= start and end <= bound_end

    def handles(self) -> List[int]:
        return [self.bound_handle, self.exit_handle] + [f.handle for f in self.fields]


@dataclass(frozen=True)
class ContextFacts:
    """Read-only contextual facts a dispatch condition is evaluated against."""
    inside_comment: bool
    at_line_start: bool
    trigger_word: str

    FACT_NAMES = ("insideComment", "atLineStart", "triggerWord")

    _ALIASES = {
        "insideComment": "inside_comment",
        "inside_comment": "inside_comment",
        "atLineStart": "at_line_start",
        "at_line_start": "at_line_start",
        "triggerWord": "trigger_word",
        "trigger_word": "trigger_word",
    }

    @classmethod
    def is_fact(cls, name: str) -> bool:
        return name in cls._ALIASES

    def get(self, name: str) -> Any:
        """Look up a fact by its fixed name (camelCase or snake_case)."""
        try:
            return getattr(self, self._ALIASES[name])
        except KeyError:
            raise KeyError(f"Unknown context fact '{name}'. Available: {list(self.FACT_NAMES)}")

    def to_dict(self) -> Dict[str, Any]:
        return {name: self.get(name) for name in self.FACT_NAMES}


class ExpansionOutcome(Enum):
    """Outcome of expanding a trigger word."""
    EXPANDED = "expanded"
    NO_MATCH_INSERTED_LITERAL = "no_match_inserted_literal"


@dataclass
class ExpansionResult:
    """Result of a single expand call."""
    outcome: ExpansionOutcome
    trigger_word: str
    table_name: str
    template: Optional[str] = None
    entry_index: Optional[int] = None
    instance: Optional[SnippetInstance] = None
    facts: Optional[ContextFacts] = None
    error: Optional[str] = None
    processing_time_ms: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def expanded(self) -> bool:
        return self.outcome == ExpansionOutcome.EXPANDED
