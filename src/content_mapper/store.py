from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Union

from .errors import ContentNotFoundError
from .models import WriteStatus
from .schema import StoreDocument

LOGGER = logging.getLogger("content_mapper.store")

ContentRef = Union[int, List[int]]


def _check_content_key(key: Any) -> int:
    if isinstance(key, bool) or not isinstance(key, int) or key < 0:
        raise ValueError(f"Content keys must be non-negative integers, got {key!r}")
    return key


def _normalize_ref(ref: Any) -> ContentRef:
    if isinstance(ref, Sequence) and not isinstance(ref, (str, bytes)):
        return [_check_content_key(item) for item in ref]
    return _check_content_key(ref)


class ContentStore:
    """The content table (``int -> str``) and the mapping table (``str -> key(s)``).

    Every mapping entry must reference keys present in the content table at
    the moment it is committed. Callers outside the mapping engine only read
    through :attr:`content`, :attr:`mappings`, :meth:`get` and the key
    iterators.
    """

    def __init__(self) -> None:
        self._content: Dict[int, str] = {}
        self._mappings: Dict[str, ContentRef] = {}

    @property
    def content(self) -> Mapping[int, str]:
        return MappingProxyType(self._content)

    @property
    def mappings(self) -> Mapping[str, ContentRef]:
        return MappingProxyType(self._mappings)

    def __len__(self) -> int:
        return len(self._content)

    def __contains__(self, key: object) -> bool:
        return key in self._content

    def get(self, content_key: int) -> str:
        try:
            return self._content[content_key]
        except KeyError:
            raise ContentNotFoundError(content_key) from None

    def has_slot(self, slot_key: str) -> bool:
        return slot_key in self._mappings

    def resolve(self, slot_key: str) -> Union[str, List[str]]:
        """Return the content value(s) a slot points to."""
        ref = self._mappings[slot_key]
        if isinstance(ref, list):
            return [self.get(key) for key in ref]
        return self.get(ref)

    def content_keys(self) -> Iterator[int]:
        return iter(tuple(self._content))

    def slot_keys(self) -> Iterator[str]:
        return iter(tuple(self._mappings))

    def max_key(self) -> Optional[int]:
        return max(self._content) if self._content else None

    def set_content(self, content_key: int, value: str, overwrite: bool = True) -> WriteStatus:
        key = _check_content_key(content_key)
        if not isinstance(value, str):
            raise ValueError(f"Content values must be strings, got {type(value).__name__}")
        existing = self._content.get(key)
        if existing is not None:
            if existing == value:
                return WriteStatus.UNCHANGED
            if not overwrite:
                return WriteStatus.CONFLICT
        self._content[key] = value
        return WriteStatus.APPLIED

    def set_mapping(self, slot_key: str, ref: Any, overwrite: bool = True) -> WriteStatus:
        if not isinstance(slot_key, str):
            raise ValueError(f"Slot keys must be strings, got {type(slot_key).__name__}")
        normalized = _normalize_ref(ref)
        targets = normalized if isinstance(normalized, list) else [normalized]
        if any(key not in self._content for key in targets):
            return WriteStatus.DANGLING_REFERENCE
        if slot_key in self._mappings:
            if self._mappings[slot_key] == normalized:
                return WriteStatus.UNCHANGED
            if not overwrite:
                return WriteStatus.CONFLICT
        self._mappings[slot_key] = normalized
        return WriteStatus.APPLIED

    def clear(self) -> None:
        self._content.clear()
        self._mappings.clear()

    @contextmanager
    def atomic(self) -> Iterator["ContentStore"]:
        """Restore both tables to their current state if the block raises."""
        content = dict(self._content)
        mappings = {
            slot: list(ref) if isinstance(ref, list) else ref
            for slot, ref in self._mappings.items()
        }
        try:
            yield self
        except BaseException:
            LOGGER.debug("Rolling back store to %s content / %s mapping entries", len(content), len(mappings))
            self._content.clear()
            self._content.update(content)
            self._mappings.clear()
            self._mappings.update(mappings)
            raise

    def _as_document(self) -> StoreDocument:
        return StoreDocument(content=dict(self._content), mappings=dict(self._mappings))

    def to_document(self) -> Dict[str, Any]:
        return self._as_document().model_dump()

    def to_json(self, indent: Optional[int] = None) -> str:
        return self._as_document().model_dump_json(indent=indent)

    @classmethod
    def from_document(cls, payload: Mapping[str, Any]) -> "ContentStore":
        """Build a store from ``{"content": ..., "mappings": ...}``; raises ``pydantic.ValidationError``."""
        document = StoreDocument.model_validate(payload)
        store = cls()
        store._content = dict(document.content)
        store._mappings = {
            slot: list(ref) if isinstance(ref, list) else ref
            for slot, ref in document.mappings.items()
        }
        return store


class StoreView:
    """Read-only face of a :class:`ContentStore` for presentation code.

    Only the mapping engine writes to the tables; this view exposes the
    read contract and nothing that mutates.
    """

    __slots__ = ("_store",)

    def __init__(self, store: ContentStore) -> None:
        self._store = store

    @property
    def content(self) -> Mapping[int, str]:
        return self._store.content

    @property
    def mappings(self) -> Mapping[str, ContentRef]:
        return self._store.mappings

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def get(self, content_key: int) -> str:
        return self._store.get(content_key)

    def has_slot(self, slot_key: str) -> bool:
        return self._store.has_slot(slot_key)

    def resolve(self, slot_key: str) -> Union[str, List[str]]:
        return self._store.resolve(slot_key)

    def content_keys(self) -> Iterator[int]:
        return self._store.content_keys()

    def slot_keys(self) -> Iterator[str]:
        return self._store.slot_keys()

    def to_document(self) -> Dict[str, Any]:
        return self._store.to_document()

    def to_json(self, indent: Optional[int] = None) -> str:
        return self._store.to_json(indent=indent)
