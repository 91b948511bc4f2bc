"""Pydantic model of the exported two-table document."""

from __future__ import annotations

from typing import Dict, List, Union

from pydantic import BaseModel, ConfigDict, NonNegativeInt, model_validator


class StoreDocument(BaseModel):
    """``{"content": {key: value}, "mappings": {slot: key | [keys]}}``.

    JSON object keys are strings; content keys are parsed back to integers.
    """

    content: Dict[NonNegativeInt, str] = {}
    mappings: Dict[str, Union[NonNegativeInt, List[NonNegativeInt]]] = {}

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def _check_references(self) -> "StoreDocument":
        for slot, ref in self.mappings.items():
            targets = ref if isinstance(ref, list) else [ref]
            missing = [key for key in targets if key not in self.content]
            if missing:
                raise ValueError(f"Slot {slot!r} references missing content keys {missing}")
        return self
