"""Field region extraction from template tokens."""

from dataclasses import dataclass
from typing import List, Optional

from ..core.config import MarkerConfig
from ..core.types import FieldLayout, FieldSpec, Token, TokenKind
from .tokenizer import TokenSplitter


def extract_fields(tokens: List[Token]) -> FieldLayout:
    """
    Lay out the flat text a token list inserts and locate its fields.

    Offsets are relative to the insertion point and ignore any
    reindentation the host performs on indent requests.

    Args:
        tokens: Tokens in template order

    Returns:
        FieldLayout with the residual text, field specs in appearance
        order and the first exit marker's offset (if any)
    """
    parts: List[str] = []
    fields: List[FieldSpec] = []
    exit_offset: Optional[int] = None
    indent_points: List[int] = []
    offset = 0

    for token in tokens:
        if token.kind == TokenKind.LITERAL:
            parts.append(token.text)
            offset += len(token.text)
        elif token.kind == TokenKind.LINE_BREAK:
            parts.append("\n")
            offset += 1
        elif token.kind == TokenKind.INDENT:
            indent_points.append(offset)
        elif token.kind == TokenKind.EXIT:
            if exit_offset is None:
                exit_offset = offset
        elif token.kind == TokenKind.FIELD:
            fields.append(FieldSpec(
                ordinal=len(fields),
                name=token.name,
                default=token.default,
                start=offset,
                end=offset + len(token.default),
            ))
            parts.append(token.default)
            offset += len(token.default)

    return FieldLayout(
        text="".join(parts),
        fields=fields,
        exit_offset=exit_offset,
        indent_points=indent_points,
    )


@dataclass
class CompiledTemplate:
    """A template string with its tokens and field layout."""
    source: str
    tokens: List[Token]
    layout: FieldLayout

    @property
    def fields(self) -> List[FieldSpec]:
        return self.layout.fields

    @property
    def exit_count(self) -> int:
        return sum(1 for t in self.tokens if t.kind == TokenKind.EXIT)


def compile_template(source: str, config: Optional[MarkerConfig] = None) -> CompiledTemplate:
    """Tokenize ``source`` and extract its field layout."""
    tokens = TokenSplitter(config).split(source)
    return CompiledTemplate(source=source, tokens=tokens, layout=extract_fields(tokens))
