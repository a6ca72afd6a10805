"""Parameter binding strategies.

A binder turns a `(key, value)` pair into placeholder text and records the
parameter the driver will receive:

- positional: `?` placeholders, values in an ordered list;
- named: `:key` placeholders, values in a dict (rebinding a key overwrites);
- literal: the value is inlined as quoted SQL text and nothing is recorded.

Literal binding exists for callers that need non-parameterizable fragments.
It is open to SQL injection and is never the default.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Iterable

from .errors import BindingModeLocked, UnboundPlaceholderCountMismatch, UnknownBindingMode
from .quoting import count_placeholders, quote_literal
from .types import NamedParams, PositionalParams, QueryParams


class BindingMode(str, Enum):
    """Supported parameter binding modes."""

    POSITIONAL = "positional"
    NAMED = "named"
    LITERAL = "literal"

    @classmethod
    def parse(cls, value: "BindingMode | str") -> "BindingMode":
        """Return the mode matching `value`.

        Accepts enum members and case-insensitive names. `unnamed` and
        `without` are accepted as aliases of positional and literal.
        """

        if isinstance(value, BindingMode):
            return value
        if isinstance(value, str):
            name = value.strip().lower()
            name = _MODE_ALIASES.get(name, name)
            for mode in cls:
                if mode.value == name:
                    return mode
        raise UnknownBindingMode(f"Unknown binding mode: {value!r}")


_MODE_ALIASES = {
    "unnamed": "positional",
    "qmark": "positional",
    "without": "literal",
}


class ParameterBinder(ABC):
    """Strategy that renders placeholders and collects bound values."""

    mode: BindingMode

    def __init__(self) -> None:
        self.bound_count = 0

    @abstractmethod
    def bind(self, key: str, value: Any) -> str:
        """Return placeholder text for `value` and record it."""

    @property
    @abstractmethod
    def params(self) -> QueryParams:
        """Return the parameters collected so far."""

    def keys(self) -> Iterable[str]:
        """Return keys already taken by this binder."""

        return ()

    @abstractmethod
    def absorb(self, params: QueryParams) -> None:
        """Merge parameters rendered elsewhere into this binder."""


class PositionalBinder(ParameterBinder):
    mode = BindingMode.POSITIONAL

    def __init__(self) -> None:
        super().__init__()
        self._values: PositionalParams = []

    def bind(self, key: str, value: Any) -> str:
        self._values.append(value)
        self.bound_count += 1
        return "?"

    @property
    def params(self) -> PositionalParams:
        return self._values

    def absorb(self, params: QueryParams) -> None:
        if params is None:
            return
        if isinstance(params, dict):
            raise TypeError("Positional binding cannot absorb named parameters.")
        values = list(params)
        self._values.extend(values)
        self.bound_count += len(values)


class NamedBinder(ParameterBinder):
    mode = BindingMode.NAMED

    def __init__(self) -> None:
        super().__init__()
        self._values: NamedParams = {}

    def bind(self, key: str, value: Any) -> str:
        self._values[key] = value
        self.bound_count += 1
        return f":{key}"

    @property
    def params(self) -> NamedParams:
        return self._values

    def keys(self) -> Iterable[str]:
        return self._values.keys()

    def absorb(self, params: QueryParams) -> None:
        if not params:
            return
        if not isinstance(params, dict):
            raise TypeError("Named binding can only absorb a mapping of parameters.")
        clashes = sorted(set(params).intersection(self._values))
        if clashes:
            raise ValueError(f"Parameter names already bound: {', '.join(clashes)}")
        self._values.update(params)
        self.bound_count += len(params)


class LiteralBinder(ParameterBinder):
    """Inline values as SQL literals. Unsafe with untrusted input."""

    mode = BindingMode.LITERAL

    def bind(self, key: str, value: Any) -> str:
        self.bound_count += 1
        return quote_literal(value)

    @property
    def params(self) -> PositionalParams:
        return []

    def absorb(self, params: QueryParams) -> None:
        if params:
            raise ValueError("Literal binding cannot carry bound parameters.")


def create_binder(mode: BindingMode | str) -> ParameterBinder:
    """Create a fresh binder for `mode`."""

    resolved = BindingMode.parse(mode)
    if resolved is BindingMode.POSITIONAL:
        return PositionalBinder()
    if resolved is BindingMode.NAMED:
        return NamedBinder()
    if resolved is BindingMode.LITERAL:
        return LiteralBinder()
    raise UnknownBindingMode(f"Unsupported binding mode: {resolved!r}")


class ParamNameGenerator:
    """Allocates unique parameter names for named binding.

    The first request for a base name returns it unchanged; later requests
    get `_2`, `_3`, ... suffixes.
    """

    def __init__(self, taken: Iterable[str] = ()) -> None:
        self._taken = set(taken)

    def next(self, base: str) -> str:
        safe = "".join(
            ch if ch.isascii() and (ch.isalnum() or ch == "_") else "_" for ch in base
        ) or "p"
        candidate = safe
        counter = 1
        while candidate in self._taken:
            counter += 1
            candidate = f"{safe}_{counter}"
        self._taken.add(candidate)
        return candidate


class ModeSetting:
    """Binding mode holder that refuses changes once it is locked."""

    def __init__(self, mode: BindingMode | str = BindingMode.POSITIONAL) -> None:
        self._mode = BindingMode.parse(mode)
        self._locked = False

    @property
    def mode(self) -> BindingMode:
        return self._mode

    @property
    def locked(self) -> bool:
        return self._locked

    def set(self, mode: BindingMode | str) -> None:
        resolved = BindingMode.parse(mode)
        if self._locked and resolved is not self._mode:
            raise BindingModeLocked(
                f"Cannot switch binding mode from {self._mode.value} to "
                f"{resolved.value} after values were bound."
            )
        self._mode = resolved

    def lock(self) -> None:
        self._locked = True

    def unlock(self) -> None:
        self._locked = False


def check_bound(sql: str, binder: ParameterBinder) -> None:
    """Verify positional placeholders match the values bound for `sql`."""

    if binder.mode is not BindingMode.POSITIONAL:
        return
    placeholders = count_placeholders(sql)
    bound = len(binder.params)
    if placeholders != bound:
        raise UnboundPlaceholderCountMismatch(placeholders, bound)
