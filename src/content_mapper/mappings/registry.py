"""Registry of the nine population strategies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

EXTRACTED = "extracted"
SYNTHESIZED = "synthesized"


@dataclass(frozen=True)
class StrategySpec:
    number: int
    writes_content: bool
    writes_mapping: bool
    id_source: str
    slot_source: Optional[str]
    description: str

    @property
    def required_paths(self) -> Tuple[str, ...]:
        paths = []
        # strategy 4 extracts ids only to count its records
        if self.id_source == EXTRACTED or self.number == 4:
            paths.append("id_path")
        if self.slot_source == EXTRACTED:
            paths.append("slot_path")
        if self.writes_content:
            paths.append("value_path")
        return tuple(paths)


STRATEGIES: Dict[int, StrategySpec] = {
    spec.number: spec
    for spec in (
        StrategySpec(1, True, False, EXTRACTED, None, "content: extracted id and value"),
        StrategySpec(2, True, False, SYNTHESIZED, None, "content: counter id, extracted value"),
        StrategySpec(3, False, True, EXTRACTED, EXTRACTED, "mappings: extracted slot and id"),
        StrategySpec(4, False, True, SYNTHESIZED, SYNTHESIZED, "mappings: synthesized slot and counter id"),
        StrategySpec(5, False, True, EXTRACTED, SYNTHESIZED, "mappings: synthesized slot, extracted id"),
        StrategySpec(6, True, True, EXTRACTED, EXTRACTED, "both: extracted id, slot and value"),
        StrategySpec(7, True, True, SYNTHESIZED, EXTRACTED, "both: counter id, extracted slot and value"),
        StrategySpec(8, True, True, EXTRACTED, SYNTHESIZED, "both: extracted id and value, synthesized slot"),
        StrategySpec(9, True, True, SYNTHESIZED, SYNTHESIZED, "both: extracted value, counter id, synthesized slot"),
    )
}


def lookup(strategy: object) -> Optional[StrategySpec]:
    if isinstance(strategy, bool) or not isinstance(strategy, int):
        return None
    return STRATEGIES.get(strategy)
