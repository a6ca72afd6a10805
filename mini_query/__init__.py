"""Parameterized SQL predicate and statement builders."""

from .core import (
    ALIAS_TOKEN,
    DEFAULT_REGISTRY,
    DEFAULT_SPECIAL_VALUES,
    BindingMode,
    BindingModeLocked,
    CompiledStatement,
    EmptyFieldSet,
    ExecutorPort,
    PredicateBuilder,
    QueryBuildError,
    ShapeMismatch,
    SpecialValueRegistry,
    StatementBuilder,
    UnboundPlaceholderCountMismatch,
    UnknownBindingMode,
    create_binder,
    quote_identifier,
    quote_literal,
)
from .ports import Database

__all__ = [
    "ALIAS_TOKEN",
    "DEFAULT_REGISTRY",
    "DEFAULT_SPECIAL_VALUES",
    "BindingMode",
    "BindingModeLocked",
    "CompiledStatement",
    "Database",
    "EmptyFieldSet",
    "ExecutorPort",
    "PredicateBuilder",
    "QueryBuildError",
    "ShapeMismatch",
    "SpecialValueRegistry",
    "StatementBuilder",
    "UnboundPlaceholderCountMismatch",
    "UnknownBindingMode",
    "create_binder",
    "quote_identifier",
    "quote_literal",
]
