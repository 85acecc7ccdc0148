"""Validation run — streams a destination through the extractor into the reconciler."""

import logging

from src.extractor import extract
from src.readers import DestinationReader
from src.reconciler import ReconciliationState, reconcile
from src.universe import RecordUniverse

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10000
MISSING_SAMPLE_SIZE = 10


def run_validation(reader: DestinationReader, universe: RecordUniverse) -> ReconciliationState:
    """Read every line from ``reader`` and return the sealed reconciliation state."""
    state = ReconciliationState(universe=universe)
    records = (extract(line, enveloped=reader.enveloped) for line in _with_progress(reader.lines()))
    reconcile(state, records)
    state.seal()
    logger.info(
        "Reconciled %d delivered lines against %d expected records",
        state.total_lines_seen, len(universe),
    )
    missing = universe.missing_ids()
    if missing:
        logger.debug(
            "%d records never arrived, first ids: %s",
            len(missing), ", ".join(missing[:MISSING_SAMPLE_SIZE]),
        )
    return state


def _with_progress(lines):
    count = 0
    for line in lines:
        count += 1
        if count % PROGRESS_EVERY == 0:
            logger.debug("Processed %d lines", count)
        yield line
