import logging
from dataclasses import dataclass
from typing import Iterable

from django.db import DatabaseError
from django.utils import timezone

from .event_source import EventSource
from .events import NormalizedEvent
from .exceptions import ProvenanceError
from .models import SyncState
from .reconciler import Reconciler

logger = logging.getLogger(__name__)

DEFAULT_INDEXER = "custody-registry"


@dataclass
class IngestStats:
    applied: int = 0
    failed: int = 0


class Ingestor:
    """
    Drives ledger events into the reconciler: one backfill pass, then the live
    subscription. Each event is fully applied before the next one is taken.
    """

    def __init__(self, source: EventSource, reconciler: Reconciler, name: str = DEFAULT_INDEXER):
        self.source = source
        self.reconciler = reconciler
        self.name = name
        self.stats = IngestStats()

    def handle(self, event: NormalizedEvent) -> bool:
        try:
            self.reconciler.apply(event)
        except (DatabaseError, ProvenanceError, ValueError, OverflowError) as e:
            # recoverable by a later backfill re-run
            self.stats.failed += 1
            logger.exception(
                "[ingest] persist failed kind=%s batch_id=%s block=%s: %s",
                event.kind, event.batch_id, event.block_number, e,
            )
            return False
        self.stats.applied += 1
        return True

    def apply_all(self, events: Iterable[NormalizedEvent]) -> IngestStats:
        for event in events:
            self.handle(event)
        return self.stats

    def backfill(self, start_block: int) -> int:
        """Ledger errors propagate: an incomplete backfill must stop startup."""
        SyncState.objects.update_or_create(
            name=self.name,
            defaults={"start_block": start_block, "backfilled_through": None},
        )
        events = self.source.backfill(start_block, "latest")
        self.apply_all(events)
        through = self.source.last_backfilled_block
        SyncState.objects.filter(name=self.name).update(
            backfilled_through=through, last_block=through, updated_at=timezone.now()
        )
        logger.info(
            "[ingest] backfill done through=%s applied=%d failed=%d",
            through, self.stats.applied, self.stats.failed,
        )
        return through

    def _mark_block(self, block: int):
        try:
            SyncState.objects.filter(name=self.name).update(last_block=block, updated_at=timezone.now())
        except DatabaseError:
            logger.warning("[ingest] could not record last_block=%s", block, exc_info=True)

    def follow(self):
        for event in self.source.subscribe(on_block=self._mark_block):
            self.handle(event)

    def run(self, start_block: int):
        self.backfill(start_block)
        self.follow()
