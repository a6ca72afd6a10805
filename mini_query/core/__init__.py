"""Public core API for predicate and statement building."""

from .binders import (
    BindingMode,
    LiteralBinder,
    NamedBinder,
    ParameterBinder,
    PositionalBinder,
    create_binder,
)
from .conditions import Comparison, Group, InList, Like, Raw, SetMembership
from .contracts import ExecutorPort
from .errors import (
    BindingModeLocked,
    EmptyFieldSet,
    QueryBuildError,
    ShapeMismatch,
    UnboundPlaceholderCountMismatch,
    UnknownBindingMode,
)
from .predicate_builder import PredicateBuilder
from .quoting import ALIAS_TOKEN, quote_identifier, quote_literal
from .special_values import DEFAULT_REGISTRY, DEFAULT_SPECIAL_VALUES, SpecialValueRegistry
from .statement_builder import StatementBuilder
from .types import CompiledStatement, FieldValueMap, NamedParams, PositionalParams, QueryParams

__all__ = [
    "ALIAS_TOKEN",
    "BindingMode",
    "BindingModeLocked",
    "CompiledStatement",
    "Comparison",
    "DEFAULT_REGISTRY",
    "DEFAULT_SPECIAL_VALUES",
    "EmptyFieldSet",
    "ExecutorPort",
    "FieldValueMap",
    "Group",
    "InList",
    "Like",
    "LiteralBinder",
    "NamedBinder",
    "NamedParams",
    "ParameterBinder",
    "PositionalBinder",
    "PositionalParams",
    "PredicateBuilder",
    "QueryBuildError",
    "QueryParams",
    "Raw",
    "SetMembership",
    "ShapeMismatch",
    "SpecialValueRegistry",
    "StatementBuilder",
    "UnboundPlaceholderCountMismatch",
    "UnknownBindingMode",
    "create_binder",
    "quote_identifier",
    "quote_literal",
]
