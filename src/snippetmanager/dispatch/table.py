"""Dispatch tables: trigger word -> newest-first (condition, template) entries."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..core.exceptions import DispatchError
from .conditions import Condition, as_condition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchEntry:
    """One (condition, template) pair registered for a trigger word."""
    condition: Condition
    template: str

    def to_dict(self) -> Dict[str, Any]:
        return {"condition": self.condition.to_dict(), "template": self.template}


class DispatchTable:
    """
    Dispatch lists for the trigger words of one table.

    Registering prepends: the newest entry for a trigger is tried first.
    Duplicate registrations are kept, so re-registering a pair adds a
    second copy in front of the first.
    """

    def __init__(self, name: str):
        self.name = name
        self._lists: Dict[str, List[DispatchEntry]] = {}

    def register(self, trigger: str, condition: Any, template: str) -> DispatchEntry:
        """
        Prepend a (condition, template) pair to the trigger's dispatch list.

        Args:
            trigger: Literal trigger word
            condition: Anything ``as_condition`` accepts
            template: Raw template string

        Returns:
            The new DispatchEntry
        """
        if not isinstance(trigger, str) or not trigger:
            raise DispatchError("Trigger word must be a non-empty string", table=self.name)
        if not isinstance(template, str):
            raise DispatchError(
                "Template must be a string",
                table=self.name,
                trigger=trigger,
                details={"type": type(template).__name__},
            )

        entry = DispatchEntry(condition=as_condition(condition), template=template)
        self._lists.setdefault(trigger, []).insert(0, entry)
        logger.debug(
            "Registered '%s' in table '%s' when %s (%d entries)",
            trigger, self.name, entry.condition.describe(), len(self._lists[trigger]),
        )
        return entry

    def register_many(self, templates: Mapping[str, str], condition: Any = "always") -> List[DispatchEntry]:
        """Register several triggers under one shared condition."""
        return [self.register(trigger, condition, template) for trigger, template in templates.items()]

    def lookup(self, trigger: str) -> Optional[List[DispatchEntry]]:
        """The dispatch list for ``trigger`` in try order, or None."""
        entries = self._lists.get(trigger)
        return list(entries) if entries else None

    def entries(self, trigger: str) -> List[DispatchEntry]:
        return list(self._lists.get(trigger, []))

    def unregister(self, trigger: str) -> bool:
        """Drop every entry for ``trigger``."""
        return self._lists.pop(trigger, None) is not None

    def triggers(self) -> List[str]:
        return sorted(self._lists.keys())

    def describe(self) -> List[Dict[str, Any]]:
        """Flat listing of every entry, in try order per trigger."""
        return [
            {
                "trigger": trigger,
                "position": position,
                "condition": entry.condition.describe(),
                "template": entry.template,
            }
            for trigger in self.triggers()
            for position, entry in enumerate(self._lists[trigger])
        ]

    def __contains__(self, trigger: str) -> bool:
        return trigger in self._lists

    def __len__(self) -> int:
        return len(self._lists)


class TableSet:
    """
    Named dispatch tables, one per editing mode.

    A surface with no mode uses the default table.
    """

    def __init__(self, default_table: str = "global"):
        self.default_table = default_table
        self._tables: Dict[str, DispatchTable] = {}

    def table(self, name: Optional[str] = None, create: bool = True) -> Optional[DispatchTable]:
        """Get (and by default create) the table called ``name``."""
        name = name or self.default_table
        if name not in self._tables:
            if not create:
                return None
            self._tables[name] = DispatchTable(name)
        return self._tables[name]

    def register(self, table_name: Optional[str], trigger: str, condition: Any, template: str) -> DispatchEntry:
        return self.table(table_name).register(trigger, condition, template)

    def resolve(self, mode: Optional[str]) -> str:
        """Name of the table used for a surface in ``mode``."""
        return mode or self.default_table

    def lookup(self, table_name: str, trigger: str) -> Optional[List[DispatchEntry]]:
        table = self.table(table_name, create=False)
        if table is None:
            return None
        return table.lookup(trigger)

    def names(self) -> List[str]:
        return list(self._tables.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._tables
