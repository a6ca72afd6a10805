"""Condition tree nodes rendered by `PredicateBuilder`.

Nodes are immutable. Field references keep their alias token until render
time, and values stay unbound until a binder renders them, so the same tree
renders under any binding mode and alias.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union

from .binders import ParameterBinder, ParamNameGenerator
from .quoting import resolve_alias


@dataclass
class RenderContext:
    """Per-build state shared by every node of one statement."""

    binder: ParameterBinder
    alias: Optional[str] = None
    names: ParamNameGenerator = field(default_factory=ParamNameGenerator)

    def bind(self, key: str, value: Any) -> str:
        return self.binder.bind(self.names.next(key), value)

    def resolve(self, ref: str) -> str:
        return resolve_alias(ref, self.alias)


def _lead(combinator: Optional[str], lead: bool) -> str:
    return f"{combinator} " if combinator and lead else ""


@dataclass(frozen=True)
class Comparison:
    """`<field> <comparator> <value>` with a fixed combinator.

    `literal` comparisons carry a registered special word that is inlined
    as-is instead of being bound.
    """

    combinator: Optional[str]
    ref: str
    comparator: str
    key: str
    value: Any = None
    literal: bool = False

    @property
    def signature(self) -> Tuple[Optional[str], str, str]:
        return (self.combinator, self.ref, self.comparator)

    def render(self, ctx: RenderContext, lead: bool = True) -> str:
        value_sql = self.value if self.literal else ctx.bind(self.key, self.value)
        return f"{_lead(self.combinator, lead)}{ctx.resolve(self.ref)} {self.comparator} {value_sql}"


@dataclass(frozen=True)
class InList:
    """`<field> IN (...)` or `NOT IN (...)`, one placeholder per element."""

    combinator: Optional[str]
    ref: str
    key: str
    values: Tuple[Any, ...]
    negated: bool = False

    def render(self, ctx: RenderContext, lead: bool = True) -> str:
        prefix = _lead(self.combinator, lead)
        if not self.values:
            return f"{prefix}{'TRUE' if self.negated else 'FALSE'}"
        placeholders = ",".join(ctx.bind(self.key, value) for value in self.values)
        op = "NOT IN" if self.negated else "IN"
        return f"{prefix}{ctx.resolve(self.ref)} {op} ({placeholders})"


@dataclass(frozen=True)
class Like:
    combinator: Optional[str]
    ref: str
    key: str
    pattern: Any

    def render(self, ctx: RenderContext, lead: bool = True) -> str:
        placeholder = ctx.bind(self.key, self.pattern)
        return f"{_lead(self.combinator, lead)}{ctx.resolve(self.ref)} LIKE {placeholder}"


@dataclass(frozen=True)
class SetMembership:
    """`FIND_IN_SET` tests over a set-typed column, joined with `AND`.

    Each token is `(name, negated)`.
    """

    combinator: Optional[str]
    ref: str
    key: str
    tokens: Tuple[Tuple[str, bool], ...]

    def render(self, ctx: RenderContext, lead: bool = True) -> str:
        column = ctx.resolve(self.ref)
        tests = []
        for token, negated in self.tokens:
            placeholder = ctx.bind(self.key, token)
            tests.append(f"{'!' if negated else ''}FIND_IN_SET({placeholder}, {column}) > 0")
        return f"{_lead(self.combinator, lead)}{' AND '.join(tests)}"


@dataclass(frozen=True)
class Raw:
    """Trusted SQL text appended verbatim."""

    sql: str

    def render(self, ctx: RenderContext, lead: bool = True) -> str:
        return self.sql


@dataclass(frozen=True)
class Group:
    """A sequence of nodes rendered together.

    The first item drops its own leading combinator; the rest keep theirs.
    `wrap` puts the items in parentheses after the group's combinator.
    """

    combinator: Optional[str]
    items: Tuple["Node", ...]
    wrap: bool = True

    def render(self, ctx: RenderContext, lead: bool = True) -> str:
        rendered = [item.render(ctx, lead=index > 0) for index, item in enumerate(self.items)]
        body = " ".join(part for part in rendered if part)
        if self.wrap:
            body = f"( {body} )"
        return f"{_lead(self.combinator, lead)}{body}"


Node = Union[Comparison, InList, Like, SetMembership, Raw, Group]
