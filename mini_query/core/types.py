"""Shared core type aliases used across builders, contracts, and ports."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Union

NamedParams = Dict[str, Any]
PositionalParams = List[Any]
QueryParams = Union[NamedParams, PositionalParams, None]

FieldValueMap = Mapping[str, Any]
FieldRows = Sequence[FieldValueMap]

RowMapping = Mapping[str, Any]
Rows = List[RowMapping]
MaybeRow = Optional[RowMapping]


class CompiledStatement(NamedTuple):
    """SQL text with the parameters to execute it with."""

    sql: str
    params: QueryParams
