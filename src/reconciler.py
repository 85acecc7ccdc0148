"""Reconciler — folds delivered record ids into presence and line counts."""

from dataclasses import dataclass
from typing import Iterable

from src.extractor import ExtractedRecord
from src.universe import RecordUniverse


@dataclass
class ReconciliationState:
    universe: RecordUniverse
    total_lines_seen: int = 0
    sealed: bool = False

    def seal(self) -> None:
        """End the streaming phase; the state is read-only from here on."""
        self.sealed = True


def observe(state: ReconciliationState, record_id: str) -> None:
    """Count one delivered line and flag its id if it was expected.

    Seeing a known id again only bumps the line count, which is how
    duplicates show up in the report.
    """
    if state.sealed:
        raise RuntimeError("Cannot observe records after the state has been sealed")
    state.total_lines_seen += 1
    state.universe.mark(record_id)


def reconcile(state: ReconciliationState, records: Iterable[ExtractedRecord]) -> ReconciliationState:
    """Consume the whole record stream. Never stops early, even at full coverage."""
    for record in records:
        observe(state, record.record_id)
    return state
