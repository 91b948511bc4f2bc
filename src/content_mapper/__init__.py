"""Path-based mapping of third-party JSON payloads into a two-table content schema."""

from .config import Settings
from .engine import MappingEngine
from .errors import (AllocationExhausted, ContentNotFoundError,
                     DanglingReference, InvalidDirective, InvalidStrategy,
                     KeyConflict, MalformedRecord, MappingError,
                     PathExtractionMismatch, PathSyntaxError, PlanError)
from .models import (SAMPLE_DATA, DirectiveSummary, LoadPhase,
                     MappingDirective, PhaseResult, WritePolicy, WriteStatus)
from .paths import extract
from .session import ModelSession
from .store import ContentStore, StoreView

__all__ = [
    "AllocationExhausted",
    "ContentNotFoundError",
    "ContentStore",
    "DanglingReference",
    "DirectiveSummary",
    "InvalidDirective",
    "InvalidStrategy",
    "KeyConflict",
    "LoadPhase",
    "MalformedRecord",
    "MappingDirective",
    "MappingEngine",
    "MappingError",
    "ModelSession",
    "PathExtractionMismatch",
    "PathSyntaxError",
    "PhaseResult",
    "PlanError",
    "SAMPLE_DATA",
    "Settings",
    "StoreView",
    "WritePolicy",
    "WriteStatus",
    "extract",
]
