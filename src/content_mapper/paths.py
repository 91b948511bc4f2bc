"""Wildcard path extraction over arbitrary JSON documents.

Paths are dot-separated field names. A field may be followed by one or more
bracket suffixes: ``[*]`` fans out over every element of an array, ``[n]``
picks a single element. ``data[*].feed.url`` therefore yields the ``url`` of
every ``feed`` in the ``data`` array, in array order.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Optional, Tuple

from .errors import PathSyntaxError

FIELD_RE = re.compile(r"^([^\[\]]*)((?:\[[^\[\]]*\])*)$")
BRACKET_RE = re.compile(r"\[([^\[\]]*)\]")
WILDCARD = "*"


@dataclass(frozen=True)
class PathToken:
    kind: str  # "field" | "index" | "all"
    value: Any = None


def is_empty_path(path: Optional[str]) -> bool:
    return path is None or not str(path).strip()


def _is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


@lru_cache(maxsize=256)
def parse_path(path: str) -> Tuple[PathToken, ...]:
    """Parse ``path`` into tokens; raises :class:`PathSyntaxError` on bad input."""
    raw = path.strip()
    if raw.startswith("$."):
        raw = raw[2:]
    tokens: List[PathToken] = []
    for position, segment in enumerate(raw.split(".")):
        match = FIELD_RE.match(segment)
        if not segment or match is None:
            raise PathSyntaxError(f"Unsupported path syntax in {path!r} near {segment!r}")
        name, brackets = match.group(1), match.group(2)
        # only the root segment may omit its field name, e.g. "[*].id"
        if not name and not (brackets and position == 0):
            raise PathSyntaxError(f"Empty field name in path {path!r}")
        if name:
            tokens.append(PathToken("field", name))
        for inner in BRACKET_RE.findall(brackets):
            inner = inner.strip()
            if inner == WILDCARD:
                tokens.append(PathToken("all"))
            elif inner.isdigit():
                tokens.append(PathToken("index", int(inner)))
            else:
                raise PathSyntaxError(f"Unsupported array selector [{inner}] in {path!r}")
    return tuple(tokens)


def _step(items: List[Any], token: PathToken) -> List[Any]:
    out: List[Any] = []
    for item in items:
        if token.kind == "field":
            if isinstance(item, Mapping) and token.value in item:
                out.append(item[token.value])
        elif token.kind == "index":
            if _is_array(item) and token.value < len(item):
                out.append(item[token.value])
        elif _is_array(item):
            out.extend(item)
    return out


def extract(path: Optional[str], document: Any) -> List[Any]:
    """Return every value matched by ``path`` in ``document``, in document order.

    A missing field, a non-container value or an out-of-range index simply
    drops that branch. ``None`` or an empty path returns an empty list.
    """
    if is_empty_path(path):
        return []
    current = [document]
    for token in parse_path(path):
        current = _step(current, token)
        if not current:
            break
    return current
