"""Dispatch conditions: a closed set of predicate and expression kinds."""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.exceptions import ConditionError
from ..core.registry import ConditionRegistry, condition_registry
from ..core.types import ContextFacts


class ConditionKind(Enum):
    """Kinds of dispatch conditions."""
    PREDICATE = "predicate"
    LITERAL = "literal"
    FACT = "fact"
    EQUALS = "equals"
    NOT = "not"
    ALL = "all"
    ANY = "any"
    NAMED = "ref"


class Condition(ABC):
    """A condition selecting a template for the current context."""

    kind: ConditionKind

    @abstractmethod
    def evaluate(self, facts: ContextFacts, registry: Optional[ConditionRegistry] = None) -> bool:
        """Evaluate against the facts of one expansion."""
        pass

    @abstractmethod
    def to_dict(self) -> Any:
        """Serializable form, accepted back by ``as_condition``."""
        pass

    @abstractmethod
    def describe(self) -> str:
        pass

    def __str__(self) -> str:
        return self.describe()


@dataclass(eq=False)
class PredicateCondition(Condition):
    """
    A callable predicate.

    Zero-argument callables are called as is; callables taking a
    positional argument receive the ContextFacts.
    """
    func: Callable[..., Any]
    kind: ConditionKind = field(default=ConditionKind.PREDICATE, init=False)

    def __post_init__(self):
        if not callable(self.func):
            raise ConditionError("Predicate condition requires a callable")
        self._takes_facts = _accepts_argument(self.func)

    def evaluate(self, facts: ContextFacts, registry: Optional[ConditionRegistry] = None) -> bool:
        if self._takes_facts:
            return bool(self.func(facts))
        return bool(self.func())

    def to_dict(self) -> Any:
        raise ConditionError(
            "Predicate conditions are not serializable",
            condition=self.describe(),
        )

    def describe(self) -> str:
        name = getattr(self.func, "__name__", type(self.func).__name__)
        return f"<predicate {name}>"


@dataclass(frozen=True)
class LiteralCondition(Condition):
    """A constant whose truthiness decides the match."""
    value: Any
    kind: ConditionKind = field(default=ConditionKind.LITERAL, init=False)

    def evaluate(self, facts: ContextFacts, registry: Optional[ConditionRegistry] = None) -> bool:
        return bool(self.value)

    def to_dict(self) -> Any:
        return {"literal": self.value}

    def describe(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class FactCondition(Condition):
    """Truthiness of one named context fact."""
    name: str
    kind: ConditionKind = field(default=ConditionKind.FACT, init=False)

    def __post_init__(self):
        if not ContextFacts.is_fact(self.name):
            raise ConditionError(
                f"Unknown context fact '{self.name}'",
                condition=self.name,
                details={"available": list(ContextFacts.FACT_NAMES)},
            )

    def evaluate(self, facts: ContextFacts, registry: Optional[ConditionRegistry] = None) -> bool:
        return bool(facts.get(self.name))

    def to_dict(self) -> Any:
        return {"fact": self.name}

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True)
class EqualsCondition(Condition):
    """A context fact compared with a constant, e.g. triggerWord == "if"."""
    fact: str
    value: Any
    kind: ConditionKind = field(default=ConditionKind.EQUALS, init=False)

    def __post_init__(self):
        if not ContextFacts.is_fact(self.fact):
            raise ConditionError(f"Unknown context fact '{self.fact}'", condition=self.fact)

    def evaluate(self, facts: ContextFacts, registry: Optional[ConditionRegistry] = None) -> bool:
        return facts.get(self.fact) == self.value

    def to_dict(self) -> Any:
        return {"equals": [self.fact, self.value]}

    def describe(self) -> str:
        return f"{self.fact} == {self.value!r}"


@dataclass(frozen=True)
class NotCondition(Condition):
    operand: Condition
    kind: ConditionKind = field(default=ConditionKind.NOT, init=False)

    def evaluate(self, facts: ContextFacts, registry: Optional[ConditionRegistry] = None) -> bool:
        return not self.operand.evaluate(facts, registry)

    def to_dict(self) -> Any:
        return {"not": self.operand.to_dict()}

    def describe(self) -> str:
        return f"not {self.operand.describe()}"


@dataclass(frozen=True)
class AllCondition(Condition):
    """True when every operand is true (short-circuits left to right)."""
    operands: Tuple[Condition, ...]
    kind: ConditionKind = field(default=ConditionKind.ALL, init=False)

    def evaluate(self, facts: ContextFacts, registry: Optional[ConditionRegistry] = None) -> bool:
        return all(op.evaluate(facts, registry) for op in self.operands)

    def to_dict(self) -> Any:
        return {"all": [op.to_dict() for op in self.operands]}

    def describe(self) -> str:
        return "(" + " and ".join(op.describe() for op in self.operands) + ")"


@dataclass(frozen=True)
class AnyCondition(Condition):
    """True when some operand is true (short-circuits left to right)."""
    operands: Tuple[Condition, ...]
    kind: ConditionKind = field(default=ConditionKind.ANY, init=False)

    def evaluate(self, facts: ContextFacts, registry: Optional[ConditionRegistry] = None) -> bool:
        return any(op.evaluate(facts, registry) for op in self.operands)

    def to_dict(self) -> Any:
        return {"any": [op.to_dict() for op in self.operands]}

    def describe(self) -> str:
        return "(" + " or ".join(op.describe() for op in self.operands) + ")"


@dataclass(frozen=True)
class NamedCondition(Condition):
    """A symbolic reference to a predicate in a ConditionRegistry."""
    name: str
    kind: ConditionKind = field(default=ConditionKind.NAMED, init=False)

    def evaluate(self, facts: ContextFacts, registry: Optional[ConditionRegistry] = None) -> bool:
        registry = registry or condition_registry
        if not registry.is_registered(self.name):
            raise ConditionError(
                f"Unknown named condition '{self.name}'",
                condition=self.name,
                details={"available": registry.list_registered()},
            )
        return registry.evaluate(self.name, facts)

    def to_dict(self) -> Any:
        return {"ref": self.name}

    def describe(self) -> str:
        return f"ref:{self.name}"


ALWAYS = LiteralCondition(True)


def as_condition(spec: Any) -> Condition:
    """
    Coerce a condition specification into a Condition.

    Accepted forms:
        - a Condition instance
        - a callable (zero arguments, or one ContextFacts argument)
        - a fact name ("insideComment", "atLineStart", "triggerWord")
        - any other string: a reference to a named condition
        - a dict: {"fact": n}, {"not": c}, {"all": [...]}, {"any": [...]},
          {"equals": [fact, value]}, {"ref": n}, {"literal": v}
        - any other value: a literal evaluated for truthiness
    """
    if isinstance(spec, Condition):
        return spec
    if isinstance(spec, str):
        if ContextFacts.is_fact(spec):
            return FactCondition(spec)
        return NamedCondition(spec)
    if isinstance(spec, dict):
        return _from_dict(spec)
    if callable(spec):
        return PredicateCondition(spec)
    return LiteralCondition(spec)


def _from_dict(spec: Dict[str, Any]) -> Condition:
    if len(spec) != 1:
        raise ConditionError(
            "Condition dict must have exactly one key",
            details={"keys": list(spec.keys())},
        )
    (key, value), = spec.items()

    if key == "fact":
        return FactCondition(value)
    if key == "ref":
        return NamedCondition(value)
    if key == "literal":
        return LiteralCondition(value)
    if key == "not":
        return NotCondition(as_condition(value))
    if key in ("all", "any"):
        if not isinstance(value, (list, tuple)):
            raise ConditionError(f"'{key}' expects a list of conditions", condition=key)
        operands = tuple(as_condition(v) for v in value)
        return AllCondition(operands) if key == "all" else AnyCondition(operands)
    if key == "equals":
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ConditionError("'equals' expects [fact, value]", condition=key)
        return EqualsCondition(value[0], value[1])

    raise ConditionError(f"Unknown condition form '{key}'", condition=key)


def all_of(*specs: Any) -> AllCondition:
    return AllCondition(tuple(as_condition(s) for s in specs))


def any_of(*specs: Any) -> AnyCondition:
    return AnyCondition(tuple(as_condition(s) for s in specs))


def negate(spec: Any) -> NotCondition:
    return NotCondition(as_condition(spec))


def _accepts_argument(func: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    positional: List[inspect.Parameter] = [
        p for p in signature.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if any(p.default is inspect.Parameter.empty for p in positional):
        return True
    return any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in signature.parameters.values())
