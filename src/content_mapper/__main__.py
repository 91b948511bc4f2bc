from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import click
from rich.console import Console
from rich.table import Table

from .config import Settings
from .errors import MappingError, PlanError
from .logging_utils import setup_logging
from .models import SAMPLE_DATA, LoadPhase, SourceConfig
from .plan import load_plan, run_plan
from .session import ModelSession
from .source_client import SourceClient, SourceClientError
from .store import StoreView

console = Console()
LOGGER = logging.getLogger("content_mapper.cli")


def _is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


async def fetch_documents(config: SourceConfig, urls: Iterable[str]) -> Dict[str, Any]:
    documents: Dict[str, Any] = {}
    async with SourceClient(config) as client:
        for url in urls:
            documents[url] = await client.fetch(url)
    return documents


def load_document(source: Optional[str], config: SourceConfig) -> Any:
    if source is None:
        return SAMPLE_DATA
    if _is_url(source):
        return asyncio.run(fetch_documents(config, [source]))[source]
    try:
        return json.loads(Path(source).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise PlanError(f"Cannot read source document {source}: {exc}") from exc


def render_store(store: StoreView) -> Table:
    table = Table(title="Mapped slots")
    table.add_column("Slot")
    table.add_column("Content key(s)", justify="right")
    table.add_column("Value")
    for slot in sorted(store.slot_keys()):
        ref = store.mappings[slot]
        value = store.resolve(slot)
        table.add_row(
            slot,
            ", ".join(map(str, ref)) if isinstance(ref, list) else str(ref),
            " | ".join(value) if isinstance(value, list) else value,
        )
    return table


@click.command()
@click.argument("plan_path", type=click.Path(dir_okay=False))
@click.option("--source", default=None, help="JSON file or URL to map; the sample feed when omitted.")
@click.option("--json", "as_json", is_flag=True, help="Print both tables as JSON.")
def main(plan_path: str, source: Optional[str], as_json: bool) -> None:
    """Apply the mapping plan PLAN_PATH and show the resulting tables."""
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    try:
        plan = load_plan(plan_path)
        document = load_document(source, settings.source)
        documents = asyncio.run(fetch_documents(settings.source, plan.sources)) if plan.sources else {}
    except PlanError as exc:
        LOGGER.error("Configuration error: %s", exc)
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(1)
    except SourceClientError as exc:
        LOGGER.error("Source error: %s", exc)
        print(f"Source error: {exc}", file=sys.stderr)
        sys.exit(2)

    with ModelSession(settings) as session:
        session.mark_phase(LoadPhase.CONFIG_LOADED, plan_path)
        try:
            summaries = run_plan(session, plan, document, documents)
        except (MappingError, PlanError) as exc:
            LOGGER.error("Mapping failed: %s", exc)
            print(f"Mapping failed: {exc}", file=sys.stderr)
            sys.exit(3)

        for summary in summaries:
            for error in summary.errors:
                LOGGER.warning("Skipped: %s", error)

        if as_json:
            click.echo(session.store.to_json(indent=2))
        else:
            console.print(render_store(session.store))
            skipped = sum(summary.skipped for summary in summaries)
            console.print(
                f"{len(session.store)} content entries, "
                f"{len(session.store.mappings)} mappings, {skipped} skipped records"
            )


if __name__ == "__main__":
    main()
