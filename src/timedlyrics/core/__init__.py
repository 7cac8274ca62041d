"""Core timing reconciliation modules."""

from .models import (
    CandidateTiming,
    LineTiming,
    ParsedPayload,
    RawLine,
    RawTimedToken,
    ReconciliationContext,
    ReconciliationResult,
    RepairResult,
    TimingScore,
)
from .pipeline import TimingReconciler, reconcile_timings

__all__ = [
    "CandidateTiming",
    "LineTiming",
    "ParsedPayload",
    "RawLine",
    "RawTimedToken",
    "ReconciliationContext",
    "ReconciliationResult",
    "RepairResult",
    "TimingScore",
    "TimingReconciler",
    "reconcile_timings",
]
