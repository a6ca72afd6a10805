"""Identifier and literal quoting for the backtick-quoting SQL dialect."""

from __future__ import annotations

import datetime as dt
import math
from decimal import Decimal
from typing import Any

ALIAS_TOKEN = "%alias%"


def quote_identifier(name: str) -> str:
    """Quote a table or column name with backticks.

    Examples:
        >>> quote_identifier("lang_id")
        '`lang_id`'
        >>> quote_identifier("odd`name")
        '`odd``name`'
    """

    escaped = name.replace("`", "``")
    return f"`{escaped}`"


def table_ref(table: str) -> str:
    """Quote a table name; `schema.table` quotes each part."""

    if not isinstance(table, str) or not table:
        raise TypeError("Table name must be a non-empty string.")
    return ".".join(quote_identifier(part) for part in table.split("."))


def alias_prefix(alias: str | None) -> str:
    """Return the text an alias token resolves to (`` `n`. `` or empty)."""

    if alias is None or alias == "":
        return ""
    return f"{quote_identifier(alias)}."


def field_ref(field: str, db_function: str | None = None) -> str:
    """Render a field reference with an unresolved alias token.

    Fields containing `.` are treated as already qualified and are passed
    through untouched. `db_function` is a template with one `?` that is
    replaced by the field reference, e.g. `DATE_FORMAT(?, '%Y-%m-%d')`.
    """

    if not isinstance(field, str) or not field:
        raise TypeError("Field name must be a non-empty string.")

    rendered = field if "." in field else f"{ALIAS_TOKEN}{quote_identifier(field)}"
    if db_function is None:
        return rendered
    if db_function.count("?") != 1:
        raise ValueError(
            f"db_function must contain exactly one '?' placeholder: {db_function!r}"
        )
    return db_function.replace("?", rendered)


def resolve_alias(sql: str, alias: str | None) -> str:
    """Replace alias tokens in a rendered field reference."""

    return sql.replace(ALIAS_TOKEN, alias_prefix(alias))


def quote_literal(value: Any) -> str:
    """Render a Python value as an inline SQL literal.

    Only used by literal binding. Strings are escaped MySQL-style, which
    protects quoting but is no substitute for bound parameters. Bytes render
    as hex literals; NaN and infinity raise `ValueError`.
    """

    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Cannot inline non-finite decimal: {value}")
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Cannot inline non-finite float: {value!r}")
        return repr(value)
    if isinstance(value, dt.datetime):
        return _quote_text(value.isoformat(sep=" "))
    if isinstance(value, (dt.date, dt.time)):
        return _quote_text(value.isoformat())
    if isinstance(value, (bytes, bytearray)):
        return f"X'{bytes(value).hex()}'"
    if isinstance(value, str):
        return _quote_text(value)
    raise TypeError(f"Unsupported literal value type: {type(value).__name__}")


def _quote_text(text: str) -> str:
    escaped = (
        text.replace("\\", "\\\\")
        .replace("\0", "\\0")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("'", "\\'")
    )
    return f"'{escaped}'"


def count_placeholders(sql: str) -> int:
    """Count `?` placeholders outside quoted strings and identifiers."""

    count = 0
    quote: str | None = None
    i = 0
    length = len(sql)
    while i < length:
        ch = sql[i]
        if quote is not None:
            if ch == "\\" and quote != "`":
                i += 2
                continue
            if ch == quote:
                # Doubled quote characters stay inside the literal.
                if i + 1 < length and sql[i + 1] == quote:
                    i += 2
                    continue
                quote = None
        elif ch in ("'", '"', "`"):
            quote = ch
        elif ch == "?":
            count += 1
        i += 1
    return count
