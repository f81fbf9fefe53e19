import logging

from django.core.management.base import BaseCommand, CommandError

from provenance import ledger_runtime
from provenance.event_source import DEFAULT_BLOCK_CHUNK, EventSource
from provenance.exceptions import ProvenanceError
from provenance.ingestion import DEFAULT_INDEXER, Ingestor
from provenance.reconciler import Reconciler

logger = logging.getLogger("provenance.indexer")


class Command(BaseCommand):
    help = "Backfill CustodyRegistry events, then follow new blocks until stopped."

    def add_arguments(self, parser):
        conf = ledger_runtime.ledger_config()
        parser.add_argument("--start-block", type=int, default=conf.get("START_BLOCK", 0))
        parser.add_argument("--poll-interval", type=float, default=conf.get("POLL_INTERVAL", 2.0))
        parser.add_argument("--block-chunk", type=int, default=DEFAULT_BLOCK_CHUNK)
        parser.add_argument("--name", default=DEFAULT_INDEXER)
        parser.add_argument("--backfill-only", action="store_true",
                            help="exit after the historical pass")

    def handle(self, *args, **opts):
        try:
            w3, contract = ledger_runtime.get_handles()
        except ProvenanceError as e:
            raise CommandError(f"indexer start error: {e}") from e

        source = EventSource(w3, contract, poll_interval=opts["poll_interval"],
                             block_chunk=opts["block_chunk"])
        ingestor = Ingestor(source, Reconciler(), name=opts["name"])

        logger.info("Indexing past events from block %s", opts["start_block"])
        try:
            through = ingestor.backfill(opts["start_block"])
        except ProvenanceError as e:
            raise CommandError(f"backfill failed, not serving incomplete data: {e}") from e
        self.stdout.write(self.style.SUCCESS(
            f"Past events indexed through block {through} "
            f"(applied={ingestor.stats.applied} failed={ingestor.stats.failed})"
        ))

        if opts["backfill_only"]:
            return

        self.stdout.write("Subscribing to live events...")
        try:
            ingestor.follow()
        except KeyboardInterrupt:
            logger.info("indexer stopped at block %s", source.last_seen_block)
