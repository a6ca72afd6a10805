"""DB-API adapter that executes statements produced by the builders."""

from __future__ import annotations

import contextlib
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from ...core.types import CompiledStatement, MaybeRow, QueryParams, RowMapping, Rows

logger = logging.getLogger(__name__)


class Database:
    """Thin DB-API wrapper that normalizes execution and row mapping.

    The connection can be passed directly or as a zero-argument factory; a
    factory is called on first use.
    """

    def __init__(self, conn: Any | Callable[[], Any]):
        """Create database adapter.

        Args:
            conn: DB-API connection object, or a callable returning one.
        """

        self._closed = False
        self._connect: Optional[Callable[[], Any]] = None
        self.conn: Any | None = None
        if callable(conn) and not hasattr(conn, "cursor"):
            self._connect = conn
        else:
            self.conn = conn
        self._last_cursor: Any = None

    def _require_open_connection(self) -> Any:
        if self._closed:
            raise RuntimeError("connection is closed")
        if self.conn is None:
            if self._connect is None:
                raise RuntimeError("connection is closed")
            logger.debug("Opening database connection lazily")
            self.conn = self._connect()
        return self.conn

    @contextlib.contextmanager
    def transaction(self):
        """Provide commit/rollback transaction scope."""

        conn = self._require_open_connection()
        try:
            yield
            conn.commit()
        except BaseException:
            conn.rollback()
            raise

    def execute(self, sql: str, params: QueryParams = None) -> Any:
        """Execute SQL with optional parameters and return cursor."""

        conn = self._require_open_connection()
        cur = conn.cursor()
        logger.debug("Executing SQL: %s", sql)
        if params is None:
            cur.execute(sql)
        else:
            cur.execute(sql, params)
        self._last_cursor = cur
        return cur

    def run(self, statement: CompiledStatement) -> int:
        """Execute a built statement and return the affected row count."""

        sql, params = statement
        cur = self.execute(sql, params)
        return getattr(cur, "rowcount", -1)

    def last_insert_id(self) -> Optional[Any]:
        """Return the id generated by the most recent insert, if any."""

        return getattr(self._last_cursor, "lastrowid", None)

    def _row_to_mapping(self, cursor: Any, row: Any) -> RowMapping:
        """Normalize row object to mapping.

        Supports mapping rows directly and tuple/list rows via
        `cursor.description`.
        """

        if isinstance(row, Mapping):
            return row

        if isinstance(row, (tuple, list)):
            desc = getattr(cursor, "description", None)
            if not desc:
                raise TypeError(
                    "Cursor has no description; cannot map tuple rows to dict."
                )
            cols = [d[0] for d in desc]
            return dict(zip(cols, row))

        try:
            m = dict(row)
            if m:
                return m
        except (TypeError, ValueError):
            pass

        raise TypeError(f"Unsupported row type: {type(row)}")

    def fetchone(self, sql: str, params: QueryParams = None) -> MaybeRow:
        """Execute query and return one normalized row mapping."""

        cur = self.execute(sql, params)
        row = cur.fetchone()
        if row is None:
            return None
        return self._row_to_mapping(cur, row)

    def fetchall(self, sql: str, params: QueryParams = None) -> Rows:
        """Execute query and return all rows as normalized mappings."""

        cur = self.execute(sql, params)
        rows = cur.fetchall()
        return [self._row_to_mapping(cur, r) for r in rows]

    def fetch_scalar(self, sql: str, params: QueryParams = None) -> Any:
        """Return the first column of the first row, or `None`."""

        row = self.fetchone(sql, params)
        if row is None:
            return None
        return next(iter(row.values()), None)

    def fetch_pairs(self, sql: str, params: QueryParams = None) -> Dict[Any, Any]:
        """Map the first column of each row to its second column.

        Suited to building `<select>` option lists:
        `SELECT id, name FROM rubric` -> `{1: "News", 2: "Sport"}`.
        """

        pairs: Dict[Any, Any] = {}
        for row in self.fetchall(sql, params):
            values = list(row.values())
            if len(values) < 2:
                raise ValueError("fetch_pairs needs at least two selected columns.")
            pairs[values[0]] = values[1]
        return pairs

    def fetch_keyed(self, sql: str, params: QueryParams = None) -> Dict[Any, Dict[str, Any]]:
        """Key rows by their first column; the value holds the other columns."""

        keyed: Dict[Any, Dict[str, Any]] = {}
        for row in self.fetchall(sql, params):
            items = list(row.items())
            if not items:
                continue
            keyed[items[0][1]] = dict(items[1:])
        return keyed

    def close(self) -> None:
        """Close the underlying connection."""

        if self._closed:
            return
        conn = self.conn
        self._closed = True
        self.conn = None
        self._last_cursor = None
        if conn is None:
            return
        close = getattr(conn, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
