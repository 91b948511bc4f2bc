"""Applies mapping directives to a :class:`ContentStore`."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .allocator import (DEFAULT_MAX_ATTEMPTS, DEFAULT_SLOT_PREFIX,
                        IdentifierAllocator, SlotKeyAllocator)
from .errors import (DanglingReference, InvalidDirective, InvalidStrategy,
                     KeyConflict, MalformedRecord, PathExtractionMismatch,
                     PathSyntaxError, RecordError)
from .mappings import common
from .mappings.registry import EXTRACTED, SYNTHESIZED, StrategySpec, lookup
from .models import (DirectiveSummary, MappingDirective, WritePolicy,
                     WriteStatus)
from .paths import extract, is_empty_path
from .store import ContentStore

LOGGER = logging.getLogger("content_mapper.engine")


@dataclass
class _Record:
    index: int
    raw_id: Any = None
    raw_slot: Any = None
    raw_value: Any = None
    ref: Any = None
    slot: Optional[str] = None
    failed: bool = False

    @property
    def raw(self) -> Tuple[Any, Any, Any]:
        return (self.raw_id, self.raw_slot, self.raw_value)


@dataclass
class _Issued:
    raw: Tuple[Any, Any, Any]
    content_key: Optional[int] = None
    slot_key: Optional[str] = None


class MappingEngine:
    """Distributes extracted values into the content and mapping tables.

    Content writes of a directive are committed before its mapping writes,
    so mapping records may reference any content key the same directive
    produced. Every directive runs inside :meth:`ContentStore.atomic`:
    directive-level errors such as :class:`AllocationExhausted` always roll
    it back, record errors only do so with ``fail_fast``.

    Keys and slots synthesized for a record are remembered per directive
    paths and record index. Re-applying a directive to unchanged source
    values reuses them while the store still holds what was written, so
    repeated application leaves the tables as they were.

    The engine holds no lock. Share a store between threads through
    :class:`~content_mapper.session.ModelSession`, which serializes calls.
    """

    def __init__(
        self,
        store: ContentStore,
        policy: Optional[WritePolicy] = None,
        slot_prefix: str = DEFAULT_SLOT_PREFIX,
        max_allocation_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self.store = store
        self.policy = policy or WritePolicy()
        self.ids = IdentifierAllocator(
            lambda key: key in store, store.max_key, max_allocation_attempts
        )
        self.slots = SlotKeyAllocator(store.has_slot, slot_prefix, max_allocation_attempts)
        self._issued: Dict[Tuple[Any, ...], _Issued] = {}

    def apply(
        self,
        strategy: int,
        id_path: Optional[str] = None,
        slot_path: Optional[str] = None,
        value_path: Optional[str] = None,
        source: Any = None,
    ) -> DirectiveSummary:
        return self.apply_directive(
            MappingDirective(strategy, id_path, slot_path, value_path, source)
        )

    def apply_directive(self, directive: MappingDirective) -> DirectiveSummary:
        spec = self._resolve_strategy(directive)
        records = self._extract_records(spec, directive)
        summary = DirectiveSummary(strategy=spec.number, records=len(records))
        LOGGER.debug(
            "Applying strategy %s (%s) to %s records", spec.number, spec.description, len(records)
        )

        signature = (spec.number, directive.id_path, directive.slot_path, directive.value_path)
        issued: Dict[Tuple[Any, ...], _Issued] = {}
        with self.store.atomic():
            self._run(spec, records, summary, signature, issued)
        self._issued.update(issued)

        LOGGER.info(
            "Strategy %s: %s records, %s applied, %s skipped",
            spec.number,
            summary.records,
            summary.applied,
            summary.skipped,
        )
        return summary

    def apply_entries(
        self,
        content: Optional[Mapping[Any, Any]] = None,
        mappings: Optional[Mapping[Any, Any]] = None,
    ) -> DirectiveSummary:
        """Write literal entries under the same policy as directives."""
        content = dict(content or {})
        mappings = dict(mappings or {})
        summary = DirectiveSummary(strategy=None, records=len(content) + len(mappings))

        def run() -> None:
            for index, (raw_key, raw_value) in enumerate(content.items()):
                try:
                    key = self._coerce(common.content_key, raw_key, None, index, "content key")
                    value = self._coerce(common.content_value, raw_value, None, index, "content value")
                    self._write_content(key, value, None, index)
                except RecordError as exc:
                    self._handle(exc, summary)
                    continue
                summary.content_writes += 1
                summary.applied += 1
            offset = len(content)
            for index, (raw_slot, raw_ref) in enumerate(mappings.items(), start=offset):
                try:
                    slot = self._coerce(common.slot_key, raw_slot, None, index, "slot key")
                    ref = self._coerce(common.content_ref, raw_ref, None, index, "content key", key=slot)
                    self._write_mapping(slot, ref, None, index)
                except RecordError as exc:
                    self._handle(exc, summary)
                    continue
                summary.mapping_writes += 1
                summary.applied += 1

        with self.store.atomic():
            run()
        return summary

    def _resolve_strategy(self, directive: MappingDirective) -> StrategySpec:
        spec = lookup(directive.strategy)
        if spec is None:
            raise InvalidStrategy(
                f"Unknown strategy {directive.strategy!r} in directive {directive!r}",
                strategy=directive.strategy if isinstance(directive.strategy, int) else None,
            )
        missing = [name for name in spec.required_paths if is_empty_path(getattr(directive, name))]
        if missing:
            raise InvalidDirective(
                f"Strategy {spec.number} requires {', '.join(missing)}",
                strategy=spec.number,
            )
        return spec

    def _extract_records(self, spec: StrategySpec, directive: MappingDirective) -> List[_Record]:
        try:
            extracted = {
                name: extract(getattr(directive, name), directive.source)
                for name in spec.required_paths
            }
        except PathSyntaxError as exc:
            raise InvalidDirective(str(exc), strategy=spec.number) from exc
        lengths = {name: len(values) for name, values in extracted.items()}
        if len(set(lengths.values())) > 1:
            raise PathExtractionMismatch(
                f"Extracted sequences differ in length: {lengths}", strategy=spec.number
            )
        count = next(iter(lengths.values()), 0)
        ids = extracted.get("id_path", [None] * count)
        slots = extracted.get("slot_path", [None] * count)
        values = extracted.get("value_path", [None] * count)
        return [
            _Record(index, raw_id, raw_slot, raw_value)
            for index, (raw_id, raw_slot, raw_value) in enumerate(zip(ids, slots, values))
        ]

    def _run(
        self,
        spec: StrategySpec,
        records: List[_Record],
        summary: DirectiveSummary,
        signature: Tuple[Any, ...],
        issued: Dict[Tuple[Any, ...], _Issued],
    ) -> None:
        previous = {record.index: self._previous(signature, record) for record in records}
        for record in records:
            try:
                record.ref = self._content_ref(spec, record, previous[record.index])
                if spec.writes_content:
                    value = self._coerce(
                        common.content_value, record.raw_value, spec.number, record.index,
                        "content value", key=record.ref,
                    )
                    self._write_content(record.ref, value, spec.number, record.index)
                    summary.content_writes += 1
            except RecordError as exc:
                record.failed = True
                self._handle(exc, summary)

        for record in records:
            if record.failed:
                continue
            if spec.writes_mapping:
                try:
                    record.slot = self._slot_key(spec, record, previous[record.index])
                    self._write_mapping(record.slot, record.ref, spec.number, record.index)
                    summary.mapping_writes += 1
                except RecordError as exc:
                    record.failed = True
                    self._handle(exc, summary)
                    continue
            summary.applied += 1
            if SYNTHESIZED in (spec.id_source, spec.slot_source):
                issued[signature + (record.index,)] = _Issued(
                    record.raw,
                    content_key=record.ref if spec.id_source == SYNTHESIZED else None,
                    slot_key=record.slot if spec.slot_source == SYNTHESIZED else None,
                )

    def _previous(self, signature: Tuple[Any, ...], record: _Record) -> Optional[_Issued]:
        issued = self._issued.get(signature + (record.index,))
        if issued is None or issued.raw != record.raw:
            return None
        return issued

    def _content_ref(self, spec: StrategySpec, record: _Record, previous: Optional[_Issued]) -> Any:
        if spec.id_source == SYNTHESIZED:
            # Reuse only a key that still holds the value this record wrote.
            if (
                previous is not None
                and previous.content_key is not None
                and spec.writes_content
                and self.store.content.get(previous.content_key) == common.content_value(record.raw_value)
            ):
                return previous.content_key
            return self.ids.allocate(spec.number, record.index)
        convert = common.content_key if spec.writes_content else common.content_ref
        return self._coerce(convert, record.raw_id, spec.number, record.index, "content key")

    def _slot_key(self, spec: StrategySpec, record: _Record, previous: Optional[_Issued]) -> str:
        if spec.slot_source == EXTRACTED:
            return self._coerce(common.slot_key, record.raw_slot, spec.number, record.index, "slot key")
        if (
            previous is not None
            and previous.slot_key is not None
            and self.store.mappings.get(previous.slot_key) == record.ref
        ):
            return previous.slot_key
        return self.slots.allocate(spec.number, record.index)

    @staticmethod
    def _coerce(convert, raw: Any, strategy: Optional[int], index: int, what: str, key: Any = None) -> Any:
        try:
            return convert(raw)
        except ValueError as exc:
            raise MalformedRecord(
                f"Malformed {what}: {exc}",
                strategy=strategy,
                record_index=index,
                key=raw if key is None else key,
            ) from exc

    def _write_content(self, key: int, value: str, strategy: Optional[int], index: int) -> None:
        status = self.store.set_content(key, value, self.policy.overwrite_key_values)
        if status is WriteStatus.CONFLICT:
            raise KeyConflict(
                f"Content key {key} already holds {self.store.get(key)!r}, refusing {value!r}",
                strategy=strategy,
                record_index=index,
                key=key,
            )

    def _write_mapping(self, slot: str, ref: Any, strategy: Optional[int], index: int) -> None:
        status = self.store.set_mapping(slot, ref, self.policy.overwrite_key_values)
        if status is WriteStatus.DANGLING_REFERENCE:
            raise DanglingReference(
                f"Slot {slot!r} references missing content key(s) {ref!r}",
                strategy=strategy,
                record_index=index,
                key=slot,
            )
        if status is WriteStatus.CONFLICT:
            raise KeyConflict(
                f"Slot {slot!r} already maps to {self.store.mappings[slot]!r}, refusing {ref!r}",
                strategy=strategy,
                record_index=index,
                key=slot,
            )

    def _handle(self, exc: RecordError, summary: DirectiveSummary) -> None:
        if self.policy.fail_fast:
            raise exc
        LOGGER.warning("Skipping record: %s", exc)
        summary.record_skip(exc)
