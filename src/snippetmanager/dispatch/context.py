"""Translate host editing-surface facts into named context facts."""

from typing import Optional

from ..buffer.base import EditingSurface
from ..core.types import ContextFacts


class ContextOracle:
    """Computes the ContextFacts dispatch conditions are evaluated against."""

    def __init__(self, surface: EditingSurface):
        self.surface = surface

    def facts(self, trigger_word: str, position: Optional[int] = None) -> ContextFacts:
        """
        Snapshot the context at ``position`` (point by default).

        Args:
            trigger_word: The trigger being expanded
            position: Offset to evaluate at

        Returns:
            Read-only ContextFacts
        """
        if position is None:
            position = self.surface.current_position()
        return ContextFacts(
            inside_comment=bool(self.surface.is_inside_comment(position)),
            at_line_start=bool(self.surface.is_at_line_start(position)),
            trigger_word=trigger_word,
        )
