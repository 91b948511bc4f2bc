"""Synthesis of content identifiers and slot keys."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .errors import AllocationExhausted

LOGGER = logging.getLogger("content_mapper.allocator")

DEFAULT_SLOT_PREFIX = "amor-"
DEFAULT_MAX_ATTEMPTS = 1000


class IdentifierAllocator:
    """Hand out content keys that are not in use.

    The counter is seeded above the largest key currently in the table and
    only moves forward. Every candidate is still checked against ``in_use``
    so keys written by other directives between two allocations are skipped.
    """

    def __init__(
        self,
        in_use: Callable[[int], bool],
        max_key: Callable[[], Optional[int]],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._in_use = in_use
        self._max_key = max_key
        self._max_attempts = max(1, max_attempts)
        self._next = 0

    def allocate(self, strategy: Optional[int] = None, record_index: Optional[int] = None) -> int:
        current_max = self._max_key()
        if current_max is not None and self._next <= current_max:
            self._next = current_max + 1
        for _ in range(self._max_attempts):
            candidate = self._next
            self._next += 1
            if not self._in_use(candidate):
                LOGGER.debug("Allocated content key %s", candidate)
                return candidate
        raise AllocationExhausted(
            f"No free content key after {self._max_attempts} attempts",
            strategy=strategy,
            record_index=record_index,
        )


class SlotKeyAllocator:
    """Hand out slot keys of the form ``<prefix><n>`` unused in the mapping table."""

    def __init__(
        self,
        in_use: Callable[[str], bool],
        prefix: str = DEFAULT_SLOT_PREFIX,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._in_use = in_use
        self._prefix = prefix
        self._max_attempts = max(1, max_attempts)
        self._counter = 0

    @property
    def prefix(self) -> str:
        return self._prefix

    def allocate(self, strategy: Optional[int] = None, record_index: Optional[int] = None) -> str:
        for _ in range(self._max_attempts):
            candidate = f"{self._prefix}{self._counter}"
            self._counter += 1
            if not self._in_use(candidate):
                LOGGER.debug("Allocated slot key %s", candidate)
                return candidate
            LOGGER.debug("Slot key %s already mapped, regenerating", candidate)
        raise AllocationExhausted(
            f"No free slot key with prefix {self._prefix!r} after {self._max_attempts} attempts",
            strategy=strategy,
            record_index=record_index,
        )
