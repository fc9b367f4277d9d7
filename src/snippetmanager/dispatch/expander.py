"""Conditional expansion of trigger words."""

import logging
import time
from typing import Callable, Optional

from ..buffer.base import EditingSurface
from ..core.config import DispatchSettings
from ..core.exceptions import ConditionError, TemplateError
from ..core.registry import ConditionRegistry, condition_registry
from ..core.types import (
    ContextFacts,
    ExpansionOutcome,
    ExpansionResult,
    SnippetInstance,
)
from .context import ContextOracle
from .table import TableSet

logger = logging.getLogger(__name__)

Instantiate = Callable[[str], SnippetInstance]


class Expander:
    """
    Picks and instantiates the template for a trigger word.

    Every ``expand`` call performs exactly one of: instantiating the first
    matching template, or inserting the trigger word as literal text.
    """

    def __init__(
        self,
        surface: EditingSurface,
        tables: TableSet,
        instantiate: Instantiate,
        registry: Optional[ConditionRegistry] = None,
        settings: Optional[DispatchSettings] = None
    ):
        """
        Initialize the expander.

        Args:
            surface: Editing surface the trigger was typed into
            tables: Dispatch tables to resolve triggers in
            instantiate: Callable inserting a template at point
            registry: Named conditions (defaults to the global registry)
            settings: Dispatch settings
        """
        self.surface = surface
        self.tables = tables
        self.instantiate = instantiate
        self.registry = registry or condition_registry
        self.settings = settings or DispatchSettings()
        self.oracle = ContextOracle(surface)

    def expand(self, trigger_word: str, table: Optional[str] = None) -> ExpansionResult:
        """
        Expand ``trigger_word`` at point.

        Args:
            trigger_word: The word the user finished typing (not yet in the buffer)
            table: Table name; the surface's mode table is used if omitted

        Returns:
            ExpansionResult describing what was inserted

        Raises:
            ConditionError: if a condition fails and
                ``propagate_condition_errors`` is enabled (the literal
                trigger has already been inserted)
            TemplateError: if the matching template fails to instantiate and
                ``propagate_template_errors`` is enabled (the partial template
                is removed and the literal trigger inserted first)
        """
        start_time = time.perf_counter()
        table_name = table or self.tables.resolve(self.surface.mode)

        entries = self.tables.lookup(table_name, trigger_word)
        if not entries:
            logger.debug("No dispatch list for '%s' in table '%s'", trigger_word, table_name)
            return self._insert_literal(trigger_word, table_name, start_time)

        facts = self.oracle.facts(trigger_word)

        for index, entry in enumerate(entries):
            try:
                matched = entry.condition.evaluate(facts, self.registry)
            except Exception as e:
                logger.warning(
                    "Condition %s for '%s' failed, inserting literal text: %s",
                    entry.condition.describe(), trigger_word, e,
                )
                result = self._insert_literal(
                    trigger_word, table_name, start_time,
                    facts=facts, entry_index=index, error=str(e),
                )
                if self.settings.propagate_condition_errors:
                    if isinstance(e, ConditionError):
                        raise
                    raise ConditionError(
                        f"Condition failed while expanding '{trigger_word}'",
                        condition=entry.condition.describe(),
                        details={"table": table_name, "entry_index": index},
                        cause=e,
                    ) from e
                return result

            if matched:
                try:
                    instance = self.instantiate(entry.template)
                except TemplateError as e:
                    logger.warning(
                        "Template for '%s' failed to instantiate, inserting literal text: %s",
                        trigger_word, e,
                    )
                    result = self._insert_literal(
                        trigger_word, table_name, start_time,
                        facts=facts, entry_index=index, error=str(e),
                    )
                    if self.settings.propagate_template_errors:
                        raise
                    return result
                logger.debug(
                    "Expanded '%s' with entry %d of table '%s'", trigger_word, index, table_name
                )
                return ExpansionResult(
                    outcome=ExpansionOutcome.EXPANDED,
                    trigger_word=trigger_word,
                    table_name=table_name,
                    template=entry.template,
                    entry_index=index,
                    instance=instance,
                    facts=facts,
                    processing_time_ms=self._measure_time(start_time),
                )

        logger.debug("No condition matched for '%s' in table '%s'", trigger_word, table_name)
        return self._insert_literal(trigger_word, table_name, start_time, facts=facts)

    def _insert_literal(
        self,
        trigger_word: str,
        table_name: str,
        start_time: float,
        facts: Optional[ContextFacts] = None,
        entry_index: Optional[int] = None,
        error: Optional[str] = None
    ) -> ExpansionResult:
        self.surface.insert_text(trigger_word)
        return ExpansionResult(
            outcome=ExpansionOutcome.NO_MATCH_INSERTED_LITERAL,
            trigger_word=trigger_word,
            table_name=table_name,
            entry_index=entry_index,
            facts=facts,
            error=error,
            processing_time_ms=self._measure_time(start_time),
        )

    def _measure_time(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000
