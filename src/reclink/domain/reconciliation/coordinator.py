"""Batch import: parse once, then reconcile each top-level record in order."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any

from reclink.domain.outcomes import ReconciliationOutcome, capture_outcome, collect_report

from .reconciler import Reconciler

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from reclink.domain.outcomes import ImportReport
    from reclink.domain.ports.parsing import InputFormat, RecordParser
    from reclink.domain.ports.store import StoreGateway
    from reclink.domain.records import Actor

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImportOptions:
    collection: str
    format: InputFormat
    actor: Actor


@dataclass(slots=True)
class BatchCoordinator:
    """Reconcile top-level records one at a time, isolating failures per record.

    Records are processed sequentially so unrelated rows never interleave writes
    to shared relation targets. A failing record becomes a report entry carrying
    the row exactly as it was submitted; the remaining rows still run.
    """

    reconciler: Reconciler

    async def run(self, collection: str, records: Iterable[Mapping[str, Any]]) -> ImportReport:
        reconcile = partial(self.reconciler.reconcile, collection)
        outcomes: list[ReconciliationOutcome] = []
        for index, record in enumerate(records):
            outcome = await capture_outcome(reconcile, record)
            if not outcome.ok:
                log.warning("Import of %s row %s failed: %s", collection, index, outcome.error)
            outcomes.append(outcome)
        return collect_report(outcomes)


async def import_batch(
    raw_rows: object,
    *,
    options: ImportOptions,
    store: StoreGateway,
    parser: RecordParser,
    strip_stale_id: bool = False,
) -> ImportReport:
    """Parse ``raw_rows`` and reconcile every record into ``options.collection``.

    The collection's relation names are looked up first so the parser knows which
    columns may hold nested data. A ``ParseError`` aborts the whole call before
    any record is written.
    """

    relations = await store.describe_relations(options.collection)
    records = parser(
        options.format,
        raw_rows,
        collection=options.collection,
        relations=frozenset(relation.name for relation in relations),
    )
    log.info(
        "Starting import: collection=%s, format=%s, records=%s",
        options.collection,
        options.format,
        len(records),
    )

    coordinator = BatchCoordinator(
        Reconciler(store=store, actor=options.actor, strip_stale_id=strip_stale_id)
    )
    report = await coordinator.run(options.collection, records)

    log.info(
        "Finished import: collection=%s, imported=%s, failed=%s",
        options.collection,
        len(records) - len(report.failures),
        len(report.failures),
    )
    return report
