"""Errors raised while building SQL text.

All of them signal caller misuse and are raised before any SQL text leaves
the builders. Execution-time failures belong to the database driver.
"""

from __future__ import annotations


class QueryBuildError(ValueError):
    """Base class for statement and predicate construction errors."""


class ShapeMismatch(QueryBuildError):
    """Raised when rows of a multi-row statement have different field sets."""


class EmptyFieldSet(QueryBuildError):
    """Raised when a mutation statement receives no fields."""


class UnboundPlaceholderCountMismatch(QueryBuildError):
    """Raised when positional placeholders and bound values disagree."""

    def __init__(self, placeholders: int, params: int):
        super().__init__(
            f"Rendered SQL has {placeholders} positional placeholder(s) "
            f"but {params} bound value(s)."
        )
        self.placeholders = placeholders
        self.params = params


class UnknownBindingMode(QueryBuildError):
    """Raised for an invalid or unsupported parameter binding mode."""


class BindingModeLocked(QueryBuildError):
    """Raised when the binding mode changes after values were bound."""
