"""Port contracts for executing built statements."""

from __future__ import annotations

from typing import Any, Optional, Protocol

from .types import QueryParams


class ExecutorPort(Protocol):
    """Database behavior needed to run statements produced by the builders."""

    def execute(self, sql: str, params: QueryParams = None) -> Any: ...

    def fetch_scalar(self, sql: str, params: QueryParams = None) -> Any: ...

    def last_insert_id(self) -> Optional[Any]: ...
