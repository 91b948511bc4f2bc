"""Configuration loading for the content mapper."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

from .allocator import DEFAULT_MAX_ATTEMPTS, DEFAULT_SLOT_PREFIX
from .models import (DEFAULT_LOCALE, DEFAULT_SOURCE_BACKOFF_FACTOR,
                     DEFAULT_SOURCE_BACKOFF_MAX, DEFAULT_SOURCE_MAX_RETRIES,
                     DEFAULT_SOURCE_TIMEOUT, SourceConfig)

TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"0", "false", "no", "off"}


Number = TypeVar("Number", int, float)


def _env_number(
    name: str, parse: Callable[[str], Number], default: Number, minimum: Optional[Number] = None
) -> Number:
    """Read a numeric variable; blank or unparsable values give ``default``."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = parse(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return minimum
    return value


def _env_flag(name: str, default: bool) -> bool:
    lowered = (os.getenv(name) or "").strip().lower()
    if lowered in TRUTHY:
        return True
    if lowered in FALSY:
        return False
    return default


@dataclass(frozen=True)
class Settings:
    overwrite_key_values: bool = True
    fail_fast: bool = False
    slot_prefix: str = DEFAULT_SLOT_PREFIX
    max_allocation_attempts: int = DEFAULT_MAX_ATTEMPTS
    locale: str = DEFAULT_LOCALE
    log_level: str = "INFO"
    source: SourceConfig = field(default_factory=SourceConfig)

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()

        return cls(
            overwrite_key_values=_env_flag("CONTENT_MAPPER_OVERWRITE", True),
            fail_fast=_env_flag("CONTENT_MAPPER_FAIL_FAST", False),
            slot_prefix=os.getenv("CONTENT_MAPPER_SLOT_PREFIX") or DEFAULT_SLOT_PREFIX,
            max_allocation_attempts=_env_number(
                "CONTENT_MAPPER_MAX_ALLOCATION_ATTEMPTS", int, DEFAULT_MAX_ATTEMPTS, minimum=1
            ),
            locale=os.getenv("CONTENT_MAPPER_LOCALE", DEFAULT_LOCALE).strip() or DEFAULT_LOCALE,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            source=SourceConfig(
                timeout=_env_number("SOURCE_TIMEOUT", float, DEFAULT_SOURCE_TIMEOUT, minimum=0.0),
                max_retries=_env_number("SOURCE_MAX_RETRIES", int, DEFAULT_SOURCE_MAX_RETRIES, minimum=0),
                backoff_factor=_env_number("SOURCE_BACKOFF_FACTOR", float, DEFAULT_SOURCE_BACKOFF_FACTOR, minimum=0.0),
                backoff_max=_env_number("SOURCE_BACKOFF_MAX", float, DEFAULT_SOURCE_BACKOFF_MAX, minimum=0.0),
                # Empty strings count as unset so a blank .env entry disables the header.
                api_key=os.getenv("SOURCE_API_KEY") or None,
            ),
        )
