"""Exception types raised by the mapping engine and its collaborators."""

from __future__ import annotations

from typing import Any, Optional


class MappingError(Exception):
    """Base exception for directive failures.

    Every instance carries the strategy of the offending directive and, for
    record-level failures, the record index and key involved.
    """

    def __init__(
        self,
        message: str,
        *,
        strategy: Optional[int] = None,
        record_index: Optional[int] = None,
        key: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.strategy = strategy
        self.record_index = record_index
        self.key = key

    def __str__(self) -> str:
        parts = [self.message]
        if self.strategy is not None:
            parts.append(f"strategy={self.strategy}")
        if self.record_index is not None:
            parts.append(f"record={self.record_index}")
        if self.key is not None:
            parts.append(f"key={self.key!r}")
        return " ".join(parts) if len(parts) == 1 else f"{parts[0]} ({', '.join(parts[1:])})"


class InvalidStrategy(MappingError):
    """Raised for a strategy number outside 1..9."""


class InvalidDirective(MappingError):
    """Raised when a directive lacks a path its strategy requires."""


class PathExtractionMismatch(MappingError):
    """Raised when zipped extractions of one directive differ in length."""


class AllocationExhausted(MappingError):
    """Raised when no free identifier or slot key is found within the retry bound."""


class RecordError(MappingError):
    """Base for errors that concern a single record and obey ``fail_fast``."""


class KeyConflict(RecordError):
    """Raised when a write would replace a differing value without overwrite."""


class DanglingReference(RecordError):
    """Raised when a mapping references a content key that does not exist."""


class MalformedRecord(RecordError):
    """Raised when an extracted id, slot or value cannot be coerced."""


class PathSyntaxError(ValueError):
    """Raised for a path expression that cannot be parsed."""


class ContentNotFoundError(KeyError):
    """Raised when a content key is not present in the content table."""


class PlanError(Exception):
    """Raised when a mapping plan file cannot be loaded or validated."""
