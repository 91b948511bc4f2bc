"""Transformers adapt third-party payloads to the two-table content schema.

A transformer is anything providing the four capabilities of
:class:`Transformer`. :class:`DocumentTransformer` is the stock
implementation: it fetches (or is handed) a source document and feeds it to
the session's mapping engine.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Optional, Protocol

from .logging_utils import get_logger
from .models import (SAMPLE_DATA, DirectiveSummary, LoadPhase,
                     MappingDirective)
from .session import ModelSession
from .source_client import SourceProvider

logger = get_logger(__name__)


class AuthHandler(Protocol):
    def authenticate(self, credentials: Optional[Mapping[str, Any]] = None) -> Mapping[str, str]: ...


class Transformer(Protocol):
    async def get_data(self, source: Any, credentials: Optional[Mapping[str, Any]] = None) -> Any: ...

    def set_mapped_content(self, content: Mapping[Any, Any]) -> DirectiveSummary: ...

    def set_mapped_mappings(self, mappings: Mapping[Any, Any]) -> DirectiveSummary: ...

    def do_authentication(self, credentials: Optional[Mapping[str, Any]] = None) -> Mapping[str, str]: ...


class NoAuthHandler:
    def authenticate(self, credentials: Optional[Mapping[str, Any]] = None) -> Mapping[str, str]:
        return {}


class ApiKeyAuthHandler:
    """Send ``Authorization: ApiKey <key>``; ``credentials["api_key"]`` overrides the default."""

    def __init__(self, api_key: Optional[str] = None) -> None:
        self._api_key = api_key

    def authenticate(self, credentials: Optional[Mapping[str, Any]] = None) -> Mapping[str, str]:
        key = (credentials or {}).get("api_key") or self._api_key
        if not key:
            raise ValueError("No API key available for authentication")
        return {"Authorization": f"ApiKey {key}"}


class DocumentTransformer:
    def __init__(
        self,
        session: ModelSession,
        provider: Optional[SourceProvider] = None,
        auth_handler: Optional[AuthHandler] = None,
    ) -> None:
        self.session = session
        self.provider = provider
        self.auth_handler: AuthHandler = auth_handler or NoAuthHandler()
        self.data: Any = None

    @property
    def locale(self) -> str:
        return self.session.locale

    def set_fail_fast(self, value: bool) -> None:
        self.session.fail_fast = value

    def set_overwrite_key_values(self, value: bool) -> None:
        self.session.overwrite_key_values = value

    def do_authentication(self, credentials: Optional[Mapping[str, Any]] = None) -> Mapping[str, str]:
        return self.auth_handler.authenticate(credentials)

    async def get_data(self, source: Any, credentials: Optional[Mapping[str, Any]] = None) -> Any:
        """Use ``source`` as the document, fetching it first when it is a URL string."""
        if isinstance(source, str):
            if self.provider is None:
                raise RuntimeError(f"No source provider configured to fetch {source}")
            headers: Dict[str, str] = dict(self.do_authentication(credentials))
            self.data = await self.provider.fetch(source, headers=headers)
        else:
            self.data = source
        self.session.mark_phase(LoadPhase.CONTENT_LOADED, source if isinstance(source, str) else None)
        return self.data

    def do_mappings(
        self,
        strategy: int,
        id_path: Optional[str] = None,
        slot_path: Optional[str] = None,
        value_path: Optional[str] = None,
        source: Any = None,
    ) -> DirectiveSummary:
        document = self.data if source is None else source
        summary = self.session.apply_directive(
            MappingDirective(strategy, id_path, slot_path, value_path, document)
        )
        if summary.mapping_writes:
            self.session.mark_phase(LoadPhase.MAPPINGS_LOADED, summary)
        self.session.mark_phase(LoadPhase.CONTENT_PROCESSED, summary)
        return summary

    def set_mapped_content(self, content: Mapping[Any, Any]) -> DirectiveSummary:
        return self.session.apply_entries(content=content)

    def set_mapped_mappings(self, mappings: Mapping[Any, Any]) -> DirectiveSummary:
        summary = self.session.apply_entries(mappings=mappings)
        self.session.mark_phase(LoadPhase.MAPPINGS_LOADED, summary)
        return summary

    async def populate(self) -> DirectiveSummary:
        """Load :data:`~content_mapper.models.SAMPLE_DATA` with strategy 9; override for real sources."""
        await self.get_data(SAMPLE_DATA)
        logger.info("Populating session from sample data")
        return self.do_mappings(9, None, None, "data[*].feed.url")
