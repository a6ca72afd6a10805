"""Fluent builder for parameterized `WHERE` fragments.

Example:
    >>> where = PredicateBuilder()
    >>> where.add_and("lang_id", 1).add_and("section_id", 1).build()
    CompiledStatement(sql=' AND `lang_id` = ?  AND `section_id` = ? ', params=[1, 1])

Conditions render in insertion order; combinators are fixed when a
condition is added and are not re-evaluated at build time. `add_in`,
`add_like`, `add_set_membership` and `add_raw` add no combinator by default.
Wrap them with a nesting call to join them to earlier conditions:

    >>> where = PredicateBuilder().add_and("publish", "y")
    >>> where.add_and(where.add_in("rubric_id", [2, 6, 7])).build().sql
    ' AND `publish` = ?  AND ( `rubric_id` IN (?,?,?) ) '
"""

from __future__ import annotations

import logging
from collections.abc import Mapping as MappingABC
from dataclasses import replace
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .binders import (
    BindingMode,
    ModeSetting,
    ParameterBinder,
    ParamNameGenerator,
    check_bound,
    create_binder,
)
from .conditions import (
    Comparison,
    Group,
    InList,
    Like,
    Node,
    Raw,
    RenderContext,
    SetMembership,
)
from .quoting import field_ref
from .special_values import DEFAULT_REGISTRY, SpecialValueRegistry
from .types import CompiledStatement

logger = logging.getLogger(__name__)

AND = "AND"
OR = "OR"


class PredicateBuilder:
    """Accumulates boolean conditions and renders a `WHERE`-ready fragment.

    Instances are not thread-safe; use one builder per statement.
    """

    def __init__(
        self,
        mode: BindingMode | str = BindingMode.POSITIONAL,
        *,
        special_values: Optional[SpecialValueRegistry] = None,
    ) -> None:
        self._mode = ModeSetting(mode)
        self._special = special_values if special_values is not None else DEFAULT_REGISTRY
        self._conditions: List[Node] = []

    @property
    def mode(self) -> BindingMode:
        return self._mode.mode

    @property
    def special_values(self) -> SpecialValueRegistry:
        return self._special

    def set_mode(self, mode: BindingMode | str) -> "PredicateBuilder":
        """Select the binding mode. Not allowed once conditions were added."""

        self._mode.set(mode)
        return self

    def is_special(self, value: Any) -> bool:
        """Return whether `value` is inlined instead of bound."""

        return self._special.is_special(value)

    @property
    def conditions(self) -> Tuple[Node, ...]:
        return tuple(self._conditions)

    def add_and(
        self,
        field: Any,
        value: Any = None,
        comparator: str = "=",
        db_function: Optional[str] = None,
    ) -> "PredicateBuilder":
        """Add an `AND` condition.

        `field` may be a column name, another builder (its most recent
        condition is moved here wrapped as `AND ( ... )`), or a sequence of
        `(field, value)` pairs joined with `AND` into one unwrapped node.
        """

        return self._process(AND, field, value, comparator, db_function)

    def add_or(
        self,
        field: Any,
        value: Any = None,
        comparator: str = "=",
        db_function: Optional[str] = None,
    ) -> "PredicateBuilder":
        """Add an `OR` condition; see `add_and` for accepted `field` forms."""

        return self._process(OR, field, value, comparator, db_function)

    def add_in(
        self, field: str, values: Iterable[Any], combinator: Optional[str] = None
    ) -> "PredicateBuilder":
        """Add `field IN (...)`. An empty set renders `FALSE`."""

        return self._append(
            InList(_combinator(combinator), field_ref(field), field, tuple(values))
        )

    def add_not_in(
        self, field: str, values: Iterable[Any], combinator: Optional[str] = None
    ) -> "PredicateBuilder":
        """Add `field NOT IN (...)`. An empty set renders `TRUE`."""

        return self._append(
            InList(
                _combinator(combinator),
                field_ref(field),
                field,
                tuple(values),
                negated=True,
            )
        )

    def add_like(
        self, field: str, value: Any, combinator: Optional[str] = None
    ) -> "PredicateBuilder":
        return self._append(Like(_combinator(combinator), field_ref(field), field, value))

    def add_set_membership(
        self, tokens: str, field: str, combinator: Optional[str] = None
    ) -> "PredicateBuilder":
        """Test a set-typed column with `FIND_IN_SET` for each token.

        `tokens` is comma separated; a leading `!` negates that token's test.
        An empty token list adds nothing.

            >>> PredicateBuilder().add_set_membership("hidden,!edited", "options").build().sql
            ' FIND_IN_SET(?, `options`) > 0 AND !FIND_IN_SET(?, `options`) > 0 '
        """

        parsed = []
        for raw_token in (tokens or "").split(","):
            token = raw_token.strip()
            negated = token.startswith("!")
            token = token.lstrip("!").strip()
            if token:
                parsed.append((token, negated))
        if not parsed:
            return self
        return self._append(
            SetMembership(_combinator(combinator), field_ref(field), field, tuple(parsed))
        )

    def add_raw(self, sql_fragment: str) -> "PredicateBuilder":
        """Append trusted SQL verbatim, bypassing binding and alias resolution."""

        if not isinstance(sql_fragment, str):
            raise TypeError("Raw SQL fragment must be a string.")
        return self._append(Raw(sql_fragment))

    def add_and_group(self, other: "PredicateBuilder") -> "PredicateBuilder":
        """Append every condition of `other` as one `AND ( ... )` group."""

        return self._add_group(AND, other)

    def add_or_group(self, other: "PredicateBuilder") -> "PredicateBuilder":
        """Append every condition of `other` as one `OR ( ... )` group."""

        return self._add_group(OR, other)

    def build(self, alias: Optional[str] = None) -> CompiledStatement:
        """Render all conditions.

        Args:
            alias: Table alias substituted into unqualified field references.

        Returns:
            The fragment (each condition padded with one space on both sides)
            and its parameters.
        """

        binder = create_binder(self.mode)
        sql = self.render_into(binder, alias=alias, leading=True)
        return self._finish(sql, binder)

    def build_where(self, alias: Optional[str] = None) -> CompiledStatement:
        """Render a complete ` WHERE ...` clause, or `""` with no conditions."""

        binder = create_binder(self.mode)
        body = self.render_into(binder, alias=alias, leading=False)
        sql = f" WHERE{body}" if body.strip() else ""
        return self._finish(sql, binder)

    def render_into(
        self,
        binder: ParameterBinder,
        *,
        alias: Optional[str] = None,
        leading: bool = True,
    ) -> str:
        """Render conditions with a caller-supplied binder.

        With `leading=False` the first condition drops its combinator so the
        text can follow `WHERE` directly.
        """

        ctx = RenderContext(binder, alias, ParamNameGenerator(binder.keys()))
        parts = []
        for index, node in enumerate(self._conditions):
            rendered = node.render(ctx, lead=leading or index > 0)
            if rendered:
                parts.append(f" {rendered} ")
        return "".join(parts)

    def reset(self) -> "PredicateBuilder":
        """Drop every condition and unlock the binding mode."""

        self._conditions.clear()
        self._mode.unlock()
        return self

    def clear(self) -> "PredicateBuilder":
        return self.reset()

    def pop(self) -> Node:
        """Remove and return the most recently added condition."""

        if not self._conditions:
            raise IndexError("PredicateBuilder has no condition to nest.")
        return self._conditions.pop()

    def __len__(self) -> int:
        return len(self._conditions)

    def __bool__(self) -> bool:
        return bool(self._conditions)

    def __repr__(self) -> str:
        return f"PredicateBuilder(mode={self.mode.value!r}, conditions={len(self)})"

    def _process(
        self,
        combinator: str,
        field: Any,
        value: Any,
        comparator: str,
        db_function: Optional[str],
    ) -> "PredicateBuilder":
        if isinstance(field, PredicateBuilder):
            return self._nest(combinator, field)
        if isinstance(field, str):
            return self._add_comparison(combinator, field, value, comparator, db_function)
        if isinstance(field, Sequence) and not isinstance(field, MappingABC):
            return self._add_pairs(combinator, field, comparator, db_function)
        raise TypeError(
            "Condition field must be a column name, a PredicateBuilder, "
            "or a sequence of (field, value) pairs."
        )

    def _add_comparison(
        self,
        combinator: str,
        field: str,
        value: Any,
        comparator: str,
        db_function: Optional[str],
    ) -> "PredicateBuilder":
        condition = self._comparison(combinator, field, value, comparator, db_function)
        if condition.literal:
            return self._append(condition)

        for index, existing in enumerate(self._conditions):
            if (
                isinstance(existing, Comparison)
                and not existing.literal
                and existing.signature == condition.signature
            ):
                self._conditions[index] = replace(existing, value=value)
                return self
        return self._append(condition)

    def _comparison(
        self,
        combinator: Optional[str],
        field: str,
        value: Any,
        comparator: str,
        db_function: Optional[str],
    ) -> Comparison:
        if not isinstance(comparator, str) or not comparator.strip():
            raise ValueError("Comparator must be a non-empty string.")
        return Comparison(
            combinator=combinator,
            ref=field_ref(field, db_function),
            comparator=comparator.strip(),
            key=field,
            value=value,
            literal=self.is_special(value),
        )

    def _add_pairs(
        self,
        combinator: str,
        pairs: Sequence[Any],
        comparator: str,
        db_function: Optional[str],
    ) -> "PredicateBuilder":
        items = []
        for pair in pairs:
            if isinstance(pair, str) or not isinstance(pair, Sequence) or len(pair) != 2:
                raise TypeError("Condition pairs must be (field, value) sequences.")
            field, value = pair
            items.append(self._comparison(combinator, field, value, comparator, db_function))
        if not items:
            raise ValueError("Condition pairs must not be empty.")
        return self._append(Group(None, tuple(items), wrap=False))

    def _nest(self, combinator: str, source: "PredicateBuilder") -> "PredicateBuilder":
        node = source.pop()
        return self._append(Group(combinator, (node,)))

    def _add_group(self, combinator: str, other: "PredicateBuilder") -> "PredicateBuilder":
        if other is self:
            raise ValueError("A builder cannot be grouped into itself.")
        if not other:
            return self
        return self._append(Group(combinator, other.conditions))

    def _append(self, node: Node) -> "PredicateBuilder":
        self._conditions.append(node)
        self._mode.lock()
        return self

    def _finish(self, sql: str, binder: ParameterBinder) -> CompiledStatement:
        check_bound(sql, binder)
        logger.debug(
            "Built predicate with %d condition(s) and %d bound value(s) (%s)",
            len(self._conditions),
            binder.bound_count,
            self.mode.value,
        )
        return CompiledStatement(sql, binder.params)


def _combinator(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip().upper()
    if normalized not in (AND, OR):
        raise ValueError(f"Combinator must be AND or OR, got {value!r}.")
    return normalized
