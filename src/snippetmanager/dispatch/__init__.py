"""Conditional dispatch of trigger words to templates."""

from .conditions import (
    Condition,
    ConditionKind,
    PredicateCondition,
    LiteralCondition,
    FactCondition,
    EqualsCondition,
    NotCondition,
    AllCondition,
    AnyCondition,
    NamedCondition,
    ALWAYS,
    as_condition,
    all_of,
    any_of,
    negate,
)
from .context import ContextOracle
from .table import DispatchEntry, DispatchTable, TableSet
from .expander import Expander

__all__ = [
    # Conditions
    "Condition",
    "ConditionKind",
    "PredicateCondition",
    "LiteralCondition",
    "FactCondition",
    "EqualsCondition",
    "NotCondition",
    "AllCondition",
    "AnyCondition",
    "NamedCondition",
    "ALWAYS",
    "as_condition",
    "all_of",
    "any_of",
    "negate",
    # Context
    "ContextOracle",
    # Tables
    "DispatchEntry",
    "DispatchTable",
    "TableSet",
    # Expansion
    "Expander",
]
