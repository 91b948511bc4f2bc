from __future__ import annotations

import re
import threading
from collections.abc import Mapping
from typing import Any, Callable, List, Optional

from .config import Settings
from .engine import MappingEngine
from .logging_utils import get_logger
from .models import (DirectiveSummary, LoadPhase, MappingDirective,
                     PhaseResult, WritePolicy)
from .store import ContentStore, StoreView

logger = get_logger(__name__)

LOCALE_RE = re.compile(r"^[A-Za-z]{2,3}(?:[-_][A-Za-z0-9]{2,8})*$")

PhaseListener = Callable[[PhaseResult], None]


class ModelSession:
    """Own the content store for one session and serialize directives against it.

    A session is explicit: create it, apply directives, hand the read-only
    ``store`` view to the presentation layer, then ``close()`` it (or use it
    as a context manager). Callers on several threads share one session;
    its lock serializes every write.
    """

    def __init__(self, settings: Optional[Settings] = None, store: Optional[ContentStore] = None) -> None:
        self._settings = settings or Settings()
        self._lock = threading.RLock()
        self._store = store if store is not None else ContentStore()
        self._policy = WritePolicy(
            overwrite_key_values=self._settings.overwrite_key_values,
            fail_fast=self._settings.fail_fast,
        )
        self._engine = MappingEngine(
            self._store,
            self._policy,
            slot_prefix=self._settings.slot_prefix,
            max_allocation_attempts=self._settings.max_allocation_attempts,
        )
        self._locale = self._settings.locale
        self._completed: List[LoadPhase] = []
        self._listeners: List[PhaseListener] = []
        self._closed = False

    def __enter__(self) -> "ModelSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> StoreView:
        """Read-only view of the tables; writes go through the apply methods."""
        self._ensure_open()
        return StoreView(self._store)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def overwrite_key_values(self) -> bool:
        return self._policy.overwrite_key_values

    @overwrite_key_values.setter
    def overwrite_key_values(self, value: bool) -> None:
        with self._lock:
            self._policy.overwrite_key_values = bool(value)

    @property
    def fail_fast(self) -> bool:
        return self._policy.fail_fast

    @fail_fast.setter
    def fail_fast(self, value: bool) -> None:
        with self._lock:
            self._policy.fail_fast = bool(value)

    @property
    def completed_phases(self) -> tuple[LoadPhase, ...]:
        return tuple(self._completed)

    def apply_directive(self, directive: MappingDirective) -> DirectiveSummary:
        with self._lock:
            self._ensure_open()
            return self._engine.apply_directive(directive)

    def apply(
        self,
        strategy: int,
        id_path: Optional[str] = None,
        slot_path: Optional[str] = None,
        value_path: Optional[str] = None,
        source: Any = None,
    ) -> DirectiveSummary:
        return self.apply_directive(MappingDirective(strategy, id_path, slot_path, value_path, source))

    def apply_entries(
        self,
        content: Optional[Mapping[Any, Any]] = None,
        mappings: Optional[Mapping[Any, Any]] = None,
    ) -> DirectiveSummary:
        with self._lock:
            self._ensure_open()
            return self._engine.apply_entries(content=content, mappings=mappings)

    def switch_locale(self, tag: str) -> PhaseResult:
        if not isinstance(tag, str) or not LOCALE_RE.match(tag.strip()):
            raise ValueError(f"Invalid locale tag {tag!r}")
        with self._lock:
            self._locale = tag.strip()
        logger.info("Locale switched to %s", self._locale)
        return self.mark_phase(LoadPhase.LANGUAGES_LOADED, self._locale)

    def subscribe(self, listener: PhaseListener) -> Callable[[], None]:
        """Register ``listener`` for phase results; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mark_phase(self, phase: LoadPhase, detail: Any = None) -> PhaseResult:
        with self._lock:
            if phase not in self._completed:
                self._completed.append(phase)
            result = PhaseResult(phase=phase, completed=tuple(self._completed), detail=detail)
        logger.debug("Phase %s completed", phase.value)
        for listener in list(self._listeners):
            listener(result)
        return result

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._store.clear()
            self._listeners.clear()
            self._completed.clear()
            self._closed = True
        logger.debug("Session closed")

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Session is closed")
