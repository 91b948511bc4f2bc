"""Mapping plans: YAML files listing directives to apply in order."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, StrictInt, ValidationError

from .errors import PlanError
from .models import DirectiveSummary, MappingDirective
from .session import ModelSession


class DirectiveEntry(BaseModel):
    # Strict so "6" and booleans are rejected here as they are by the engine.
    strategy: StrictInt
    id_path: Optional[str] = None
    slot_path: Optional[str] = None
    value_path: Optional[str] = None
    source: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    def to_directive(self, document: Any) -> MappingDirective:
        return MappingDirective(
            strategy=self.strategy,
            id_path=self.id_path,
            slot_path=self.slot_path,
            value_path=self.value_path,
            source=document,
        )


class MappingPlan(BaseModel):
    overwrite_key_values: Optional[bool] = None
    fail_fast: Optional[bool] = None
    directives: List[DirectiveEntry]

    model_config = ConfigDict(extra="forbid")

    @property
    def sources(self) -> List[str]:
        seen: List[str] = []
        for entry in self.directives:
            if entry.source and entry.source not in seen:
                seen.append(entry.source)
        return seen


def parse_plan(payload: Any) -> MappingPlan:
    try:
        return MappingPlan.model_validate(payload)
    except ValidationError as exc:
        raise PlanError(f"Invalid mapping plan: {exc}") from exc


def load_plan(path: Union[str, Path]) -> MappingPlan:
    try:
        with Path(path).open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh)
    except OSError as exc:
        raise PlanError(f"Cannot read mapping plan {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise PlanError(f"Mapping plan {path} is not valid YAML: {exc}") from exc
    return parse_plan(payload)


def run_plan(
    session: ModelSession,
    plan: MappingPlan,
    document: Any = None,
    documents: Optional[Mapping[str, Any]] = None,
) -> List[DirectiveSummary]:
    """Apply every directive of ``plan``.

    Directives naming a ``source`` read it from ``documents``; the others
    use ``document``. Plan-level policy overrides are applied to the session
    first and stay in effect afterwards.
    """
    if plan.overwrite_key_values is not None:
        session.overwrite_key_values = plan.overwrite_key_values
    if plan.fail_fast is not None:
        session.fail_fast = plan.fail_fast

    fetched = documents or {}
    summaries = []
    for entry in plan.directives:
        if entry.source:
            if entry.source not in fetched:
                raise PlanError(f"No document loaded for source {entry.source}")
            source_doc = fetched[entry.source]
        else:
            source_doc = document
        summaries.append(session.apply_directive(entry.to_directive(source_doc)))
    return summaries
