"""Split marker-annotated template strings into typed tokens."""

import logging
from typing import List, Optional, Tuple

from ..core.config import MarkerConfig
from ..core.types import Token, TokenKind

logger = logging.getLogger(__name__)


class TokenSplitter:
    """
    Splits a template string into an ordered list of Tokens.

    The line-terminator, indent and exit markers are plain delimiters.
    A field marker, optionally followed by a ``{default}`` payload, folds
    into a single FieldStart token; the payload runs to the nearest
    default-end character and is taken verbatim, markers included.
    Malformed marker sequences degrade to literal text.
    """

    def __init__(self, config: Optional[MarkerConfig] = None):
        self.config = config or MarkerConfig()
        roles = [
            (self.config.line_terminator_marker, TokenKind.LINE_BREAK),
            (self.config.indent_marker, TokenKind.INDENT),
            (self.config.exit_marker, TokenKind.EXIT),
            (self.config.field_marker, TokenKind.FIELD),
        ]
        # Longest first so a marker that prefixes another never shadows it
        self._markers: List[Tuple[str, TokenKind]] = sorted(
            roles, key=lambda pair: len(pair[0]), reverse=True
        )

    def split(self, template: str) -> List[Token]:
        """
        Split a template into tokens.

        Args:
            template: Raw template text

        Returns:
            Tokens in template order, adjacent literal text merged
        """
        tokens: List[Token] = []
        literal: List[str] = []

        def flush() -> None:
            if literal:
                tokens.append(Token.literal("".join(literal)))
                literal.clear()

        i = 0
        n = len(template)
        while i < n:
            match = self._match_marker(template, i)
            if match is None:
                literal.append(template[i])
                i += 1
                continue

            marker, kind = match
            after = i + len(marker)

            if kind == TokenKind.FIELD:
                field, next_index = self._read_field(template, after)
                if field is None:
                    logger.debug("Unclosed field default at offset %d, keeping as text", i)
                    literal.append(marker)
                else:
                    flush()
                    tokens.append(field)
                i = next_index
                continue

            flush()
            if kind == TokenKind.LINE_BREAK:
                tokens.append(Token.line_break())
            elif kind == TokenKind.INDENT:
                tokens.append(Token.indent())
            else:
                tokens.append(Token.exit())
            i = after

        flush()
        return tokens

    def _match_marker(self, template: str, index: int) -> Optional[Tuple[str, TokenKind]]:
        for marker, kind in self._markers:
            if template.startswith(marker, index):
                return marker, kind
        return None

    def _read_field(self, template: str, index: int) -> Tuple[Optional[Token], int]:
        """Read an optional default payload starting at ``index``."""
        begin, end = self.config.default_begin, self.config.default_end
        if index >= len(template) or template[index] != begin:
            return Token.field_start("", ""), index

        close = template.find(end, index + 1)
        if close == -1:
            return None, index

        payload = template[index + 1:close]
        return Token.field_start(payload, payload), close + 1


def split_template(template: str, config: Optional[MarkerConfig] = None) -> List[Token]:
    """Split ``template`` with the given (or default) marker configuration."""
    return TokenSplitter(config).split(template)
