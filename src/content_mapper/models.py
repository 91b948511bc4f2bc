from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from .errors import MappingError

DEFAULT_SOURCE_TIMEOUT = 30.0
DEFAULT_SOURCE_MAX_RETRIES = 3
DEFAULT_SOURCE_BACKOFF_FACTOR = 1.0
DEFAULT_SOURCE_BACKOFF_MAX = 30.0
DEFAULT_LOCALE = "en"
MIN_STRATEGY = 1
MAX_STRATEGY = 9

SAMPLE_DATA = {
    "data": [
        {"feed": {"id": 1, "title": "title1", "url": "url1"}},
        {"feed": {"id": 2, "title": "title2", "url": "url2"}},
        {"feed": {"id": 3, "title": "title3", "url": "url3"}},
        {"feed": {"id": 4, "title": "title4", "url": "url4"}},
        {"feed": {"id": 5, "title": "title5", "url": "url5"}},
    ],
}


@dataclass(frozen=True)
class SourceConfig:
    timeout: float = DEFAULT_SOURCE_TIMEOUT
    max_retries: int = DEFAULT_SOURCE_MAX_RETRIES
    backoff_factor: float = DEFAULT_SOURCE_BACKOFF_FACTOR
    backoff_max: float = DEFAULT_SOURCE_BACKOFF_MAX
    api_key: Optional[str] = None


@dataclass
class WritePolicy:
    overwrite_key_values: bool = True
    fail_fast: bool = False


@dataclass(frozen=True)
class MappingDirective:
    """One instruction to populate the tables from ``source``."""

    strategy: int
    id_path: Optional[str] = None
    slot_path: Optional[str] = None
    value_path: Optional[str] = None
    source: Any = None


class WriteStatus(str, Enum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    CONFLICT = "conflict"
    DANGLING_REFERENCE = "dangling_reference"


@dataclass
class DirectiveSummary:
    """Outcome of one directive; inspect ``ok`` rather than relying on no exception."""

    strategy: Optional[int]
    records: int = 0
    applied: int = 0
    skipped: int = 0
    content_writes: int = 0
    mapping_writes: int = 0
    skipped_keys: List[Any] = field(default_factory=list)
    errors: List[MappingError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.skipped == 0

    def record_skip(self, error: MappingError) -> None:
        self.skipped += 1
        self.skipped_keys.append(error.key)
        self.errors.append(error)


class LoadPhase(str, Enum):
    CONFIG_LOADED = "config_loaded"
    LANGUAGES_LOADED = "languages_loaded"
    CONTENT_LOADED = "content_loaded"
    MAPPINGS_LOADED = "mappings_loaded"
    CONTENT_PROCESSED = "content_processed"


@dataclass(frozen=True)
class PhaseResult:
    phase: LoadPhase
    completed: Tuple[LoadPhase, ...]
    detail: Any = None
