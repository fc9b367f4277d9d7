"""Registry pattern for named, pluggable items."""

from typing import Dict, TypeVar, Generic, Optional, Callable, List, Any
from abc import ABC

from .types import ContextFacts

T = TypeVar('T')

NamedPredicate = Callable[[ContextFacts], Any]


class Registry(Generic[T], ABC):
    """
    Generic registry of named items.

    Supports registration via decorators or explicit registration,
    with optional aliasing for convenience.
    """

    def __init__(self):
        self._items: Dict[str, T] = {}
        self._aliases: Dict[str, str] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}

    def register(
        self,
        name: str,
        aliases: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Callable[[T], T]:
        """
        Decorator to register an item.

        Usage:
            @registry.register("in_docstring", aliases=["docstring"])
            def in_docstring(facts):
                ...
        """
        def decorator(item: T) -> T:
            self.add(name, item, aliases=aliases, metadata=metadata)
            return item
        return decorator

    def add(
        self,
        name: str,
        item: T,
        aliases: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Explicitly register an item (non-decorator form)."""
        self._items[name] = item
        self._metadata[name] = metadata or {}

        for alias in (aliases or []):
            self._aliases[alias] = name

    def resolve(self, name: str) -> str:
        """Resolve an alias to its registered name."""
        return self._aliases.get(name, name)

    def get(self, name: str) -> T:
        """Get a registered item by name or alias."""
        resolved_name = self.resolve(name)

        if resolved_name not in self._items:
            available = list(self._items.keys())
            raise KeyError(
                f"'{name}' not found in registry. Available: {available}"
            )

        return self._items[resolved_name]

    def list_registered(self) -> List[str]:
        """List all registered names."""
        return list(self._items.keys())

    def list_all(self) -> List[str]:
        """List all names including aliases."""
        return list(self._items.keys()) + list(self._aliases.keys())

    def get_metadata(self, name: str) -> Dict[str, Any]:
        """Get metadata for a registered item."""
        return self._metadata.get(self.resolve(name), {})

    def is_registered(self, name: str) -> bool:
        """Check if a name is registered."""
        return self.resolve(name) in self._items

    def unregister(self, name: str) -> None:
        """Unregister an item."""
        self._items.pop(name, None)
        self._metadata.pop(name, None)

        # Remove any aliases pointing to this name
        aliases_to_remove = [
            alias for alias, target in self._aliases.items()
            if target == name
        ]
        for alias in aliases_to_remove:
            del self._aliases[alias]


class ConditionRegistry(Registry[NamedPredicate]):
    """
    Named predicates that symbolic condition references resolve to.

    Each predicate takes the read-only ContextFacts of the expansion.
    """

    def __init__(self, load_builtins: bool = True):
        super().__init__()
        if load_builtins:
            self._load_builtin_conditions()

    def _load_builtin_conditions(self) -> None:
        """Load built-in named conditions."""
        self.add("always", lambda facts: True, aliases=["t", "true"],
                 metadata={"description": "Always matches"})
        self.add("never", lambda facts: False, aliases=["nil", "false"],
                 metadata={"description": "Never matches"})
        self.add("in_comment", lambda facts: facts.inside_comment,
                 aliases=["inside_comment"],
                 metadata={"description": "Point is inside a comment"})
        self.add("not_in_comment", lambda facts: not facts.inside_comment,
                 aliases=["code"],
                 metadata={"description": "Point is outside any comment"})
        self.add("at_line_start", lambda facts: facts.at_line_start,
                 aliases=["bol"],
                 metadata={"description": "Only whitespace precedes point on its line"})
        self.add("not_at_line_start", lambda facts: not facts.at_line_start,
                 aliases=["mid_line"],
                 metadata={"description": "Non-whitespace text precedes point on its line"})

    def evaluate(self, name: str, facts: ContextFacts) -> bool:
        """Evaluate a named predicate against the given facts."""
        return bool(self.get(name)(facts))

    def describe(self) -> List[Dict[str, Any]]:
        """List all named conditions with their metadata."""
        return [
            {"name": name, **self.get_metadata(name)}
            for name in self.list_registered()
        ]


# Global registry of named conditions shared by all dispatch tables
condition_registry = ConditionRegistry()
