"""Registry of SQL keywords that are inlined instead of parameter-bound."""

from __future__ import annotations

import logging
import threading
from typing import Any, FrozenSet, Iterable, Iterator

logger = logging.getLogger(__name__)

DEFAULT_SPECIAL_VALUES: FrozenSet[str] = frozenset(
    {"CURRENT_TIMESTAMP", "NOW()", "NULL"}
)


class SpecialValueRegistry:
    """Exact-match set of literal SQL words such as `NOW()`.

    Reads go through an immutable snapshot and need no locking. Writes swap
    the snapshot under a lock, so a registry may be extended while other
    threads are building statements with it.
    """

    def __init__(
        self,
        words: Iterable[str] = DEFAULT_SPECIAL_VALUES,
        *,
        read_only: bool = False,
    ) -> None:
        self._words: FrozenSet[str] = frozenset(_check_word(word) for word in words)
        self._lock = threading.Lock()
        self._read_only = read_only

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def words(self) -> FrozenSet[str]:
        """Return the current snapshot of registered words."""

        return self._words

    def is_special(self, value: Any) -> bool:
        """Return whether `value` is exactly one of the registered words."""

        return isinstance(value, str) and value in self._words

    def register(self, *words: str) -> "SpecialValueRegistry":
        """Add words to the registry."""

        checked = [_check_word(word) for word in words]
        self._ensure_writable()
        with self._lock:
            self._words = self._words.union(checked)
        logger.info("Registered special SQL values: %s", ", ".join(checked))
        return self

    def unregister(self, *words: str) -> "SpecialValueRegistry":
        """Remove words from the registry; unknown words are ignored."""

        self._ensure_writable()
        with self._lock:
            self._words = self._words.difference(words)
        logger.info("Unregistered special SQL values: %s", ", ".join(words))
        return self

    def copy(self, *, read_only: bool = False) -> "SpecialValueRegistry":
        """Return an independent registry seeded with the current words."""

        return SpecialValueRegistry(self._words, read_only=read_only)

    def _ensure_writable(self) -> None:
        if self._read_only:
            raise RuntimeError(
                "SpecialValueRegistry is read-only; use copy() to extend it."
            )

    def __contains__(self, value: object) -> bool:
        return self.is_special(value)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._words))

    def __len__(self) -> int:
        return len(self._words)

    def __repr__(self) -> str:
        return f"SpecialValueRegistry({sorted(self._words)!r}, read_only={self._read_only})"


def _check_word(word: Any) -> str:
    if not isinstance(word, str) or not word:
        raise TypeError("Special SQL values must be non-empty strings.")
    return word


DEFAULT_REGISTRY = SpecialValueRegistry(read_only=True)
