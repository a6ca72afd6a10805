"""Builders for `INSERT`, `UPDATE` and upsert statements.

Every value goes through a binder in the builder's current mode, except
registered special words (`NOW()`, `NULL`, ...) which are inlined.

Example:
    >>> StatementBuilder().upsert("t", {"id": 5, "name": "A"}).sql
    'INSERT INTO `t` (`id`, `name`) VALUES (?, ?) ON DUPLICATE KEY UPDATE `name`=VALUES(`name`), `id`=LAST_INSERT_ID(`id`)'
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping as MappingABC
from collections.abc import Sequence as SequenceABC
from typing import Any, List, Optional, Sequence, Tuple

from .binders import (
    BindingMode,
    ParameterBinder,
    ParamNameGenerator,
    check_bound,
    create_binder,
)
from .errors import EmptyFieldSet, ShapeMismatch, UnknownBindingMode
from .predicate_builder import PredicateBuilder
from .quoting import quote_identifier, table_ref
from .special_values import DEFAULT_REGISTRY, SpecialValueRegistry
from .types import CompiledStatement, FieldRows, FieldValueMap

logger = logging.getLogger(__name__)

# Prefixes left on compiled fragments by `build()` and `build_where()`.
_LEADING_KEYWORDS = re.compile(r"^(?:WHERE\b\s*)?(?:(?:AND|OR)\b\s*)?", re.IGNORECASE)


class StatementBuilder:
    """Builds data-mutation statements from field maps.

    The builder keeps no per-statement state; each call renders with a fresh
    binder, so one instance can be reused for many statements.
    """

    def __init__(
        self,
        mode: BindingMode | str = BindingMode.POSITIONAL,
        *,
        special_values: Optional[SpecialValueRegistry] = None,
    ) -> None:
        self._mode = BindingMode.parse(mode)
        self._special = special_values if special_values is not None else DEFAULT_REGISTRY

    @property
    def mode(self) -> BindingMode:
        return self._mode

    @property
    def special_values(self) -> SpecialValueRegistry:
        return self._special

    def set_mode(self, mode: BindingMode | str) -> "StatementBuilder":
        self._mode = BindingMode.parse(mode)
        return self

    def insert(self, table: str, fields_or_rows: Any) -> CompiledStatement:
        """Build a single-row or multi-row `INSERT`.

        A mapping inserts one row. A sequence of mappings inserts many rows,
        which must all have the same field names.
        """

        if _is_multi(fields_or_rows):
            columns, rows = _shape(fields_or_rows)
            return self._insert(table, columns, rows, "insert", multi=True)

        columns = _columns(fields_or_rows)
        return self._insert(table, columns, [fields_or_rows], "insert")

    def update(
        self,
        table: str,
        fields: FieldValueMap,
        where: Any = "1>0",
    ) -> CompiledStatement:
        """Build `UPDATE ... SET ... WHERE ...`.

        Args:
            table: Target table.
            fields: Columns to set.
            where: Raw SQL text, a `(sql, params)` pair, or a
                `PredicateBuilder` rendered with this builder's binder. A
                pair may be the output of `build()` or `build_where()`; its
                leading `WHERE` and combinator are dropped.
        """

        columns = _columns(fields)
        binder = create_binder(self._mode)
        names = ParamNameGenerator()
        assignments = ", ".join(
            f"{quote_identifier(column)} = {self._value(binder, names, column, fields[column])}"
            for column in columns
        )
        where_sql = self._where(binder, where)
        sql = f"UPDATE {table_ref(table)} SET {assignments} WHERE {where_sql}"
        return self._finish(sql, binder, "update", table, 1)

    def upsert(
        self, table: str, fields: FieldValueMap, unique_field: str = "id"
    ) -> CompiledStatement:
        """Build `INSERT ... ON DUPLICATE KEY UPDATE` for one row.

        Every column except `unique_field` is refreshed with `VALUES(...)`;
        `unique_field` is re-asserted through `LAST_INSERT_ID(...)` so the
        driver reports the existing row id on the update branch too.
        """

        columns = _columns(fields)
        return self._insert(table, columns, [fields], "upsert", unique_field=unique_field)

    def upsert_many(
        self, table: str, rows: FieldRows, unique_field: str = "id"
    ) -> CompiledStatement:
        """Build a multi-row upsert; rows must share one field-name set."""

        columns, checked = _shape(rows)
        return self._insert(
            table, columns, checked, "upsert", multi=True, unique_field=unique_field
        )

    def save(
        self, table: str, fields: FieldValueMap, unique_field: str = "id"
    ) -> CompiledStatement:
        return self.upsert(table, fields, unique_field)

    def multiple_save(
        self, table: str, rows: FieldRows, unique_field: str = "id"
    ) -> CompiledStatement:
        return self.upsert_many(table, rows, unique_field)

    def drop_table(self, table: str) -> CompiledStatement:
        return CompiledStatement(f"DROP TABLE IF EXISTS {table_ref(table)}", self._empty_params())

    def _insert(
        self,
        table: str,
        columns: List[str],
        rows: Sequence[FieldValueMap],
        kind: str,
        *,
        multi: bool = False,
        unique_field: Optional[str] = None,
    ) -> CompiledStatement:
        if multi and self._mode is BindingMode.NAMED:
            raise UnknownBindingMode(
                "Multi-row statements need positional or literal binding, not named."
            )

        binder = create_binder(self._mode)
        names = ParamNameGenerator()
        column_sql = ", ".join(quote_identifier(column) for column in columns)
        groups = []
        for row in rows:
            values = ", ".join(
                self._value(binder, names, column, row[column]) for column in columns
            )
            groups.append(f"({values})")
        sql = f"INSERT INTO {table_ref(table)} ({column_sql}) VALUES {', '.join(groups)}"

        if unique_field is not None:
            sql += f" ON DUPLICATE KEY UPDATE {_duplicate_key_update(columns, unique_field)}"
        return self._finish(sql, binder, kind, table, len(rows))

    def _value(
        self,
        binder: ParameterBinder,
        names: ParamNameGenerator,
        column: str,
        value: Any,
    ) -> str:
        if self._special.is_special(value):
            return value
        return binder.bind(names.next(column), value)

    def _where(self, binder: ParameterBinder, where: Any) -> str:
        if isinstance(where, PredicateBuilder):
            rendered = where.render_into(binder, leading=False).strip()
            return rendered or "1>0"
        if isinstance(where, str):
            return where.strip() or "1>0"
        if isinstance(where, tuple) and len(where) == 2 and isinstance(where[0], str):
            sql, params = where
            binder.absorb(params)
            return _LEADING_KEYWORDS.sub("", sql.strip(), count=1).strip() or "1>0"
        raise TypeError(
            "where must be SQL text, a (sql, params) pair, or a PredicateBuilder."
        )

    def _finish(
        self, sql: str, binder: ParameterBinder, kind: str, table: str, row_count: int
    ) -> CompiledStatement:
        check_bound(sql, binder)
        logger.debug(
            "Built %s for %s: %d row(s), %d bound value(s) (%s)",
            kind,
            table,
            row_count,
            binder.bound_count,
            self._mode.value,
        )
        return CompiledStatement(sql, binder.params)

    def _empty_params(self) -> Any:
        return {} if self._mode is BindingMode.NAMED else []


def _duplicate_key_update(columns: Sequence[str], unique_field: str) -> str:
    assignments = [
        f"{quote_identifier(column)}=VALUES({quote_identifier(column)})"
        for column in columns
        if column != unique_field
    ]
    unique = quote_identifier(unique_field)
    assignments.append(f"{unique}=LAST_INSERT_ID({unique})")
    return ", ".join(assignments)


def _is_multi(data: Any) -> bool:
    if isinstance(data, MappingABC):
        return False
    if isinstance(data, SequenceABC) and not isinstance(data, (str, bytes)):
        if not data:
            raise EmptyFieldSet("No rows supplied.")
        return isinstance(data[0], MappingABC)
    raise TypeError("Expected a field mapping or a sequence of field mappings.")


def _columns(fields: Any) -> List[str]:
    if not isinstance(fields, MappingABC):
        raise TypeError("Expected a mapping of field names to values.")
    columns = list(fields.keys())
    if not columns:
        raise EmptyFieldSet("No fields supplied for the statement.")
    return columns


def _shape(rows: Any) -> Tuple[List[str], List[FieldValueMap]]:
    """Return the shared column order and the validated rows."""

    if not isinstance(rows, SequenceABC) or isinstance(rows, (str, bytes)):
        raise TypeError("Expected a sequence of field mappings.")
    if not rows:
        raise EmptyFieldSet("No rows supplied.")

    checked = list(rows)
    columns = _columns(checked[0])
    expected = set(columns)
    for index, row in enumerate(checked[1:], start=1):
        if not isinstance(row, MappingABC):
            raise TypeError(f"Row {index} is not a mapping.")
        if set(row.keys()) != expected:
            raise ShapeMismatch(
                f"Row {index} fields {sorted(row.keys())} differ from "
                f"{sorted(expected)}."
            )
    return columns, checked
