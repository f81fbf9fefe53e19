from django.core.management.base import BaseCommand, CommandError

from provenance import ledger_runtime
from provenance.event_source import EventSource
from provenance.events import EVENT_NAMES
from provenance.exceptions import ProvenanceError


class Command(BaseCommand):
    help = "Check contract code exists and count registry events since START_BLOCK."

    def add_arguments(self, parser):
        parser.add_argument("--start-block", type=int,
                            default=ledger_runtime.ledger_config().get("START_BLOCK", 0))

    def handle(self, *args, **opts):
        try:
            w3, contract = ledger_runtime.get_handles()
            if not ledger_runtime.has_contract_code(w3, contract.address):
                raise CommandError(f"No contract code at {contract.address}")
            self.stdout.write(f"Contract code present at {contract.address}")

            source = EventSource(w3, contract)
            events = source.backfill(opts["start_block"], "latest")
        except ProvenanceError as e:
            raise CommandError(str(e)) from e

        by_kind = {name: [e for e in events if e.kind == name] for name in EVENT_NAMES}
        self.stdout.write(" ".join(f"{name}: {len(evs)}" for name, evs in by_kind.items()))
        if source.skipped:
            self.stdout.write(self.style.WARNING(f"undecodable logs skipped: {source.skipped}"))

        self.stdout.write("Sample events (first of each):")
        for name, evs in by_kind.items():
            if evs:
                self.stdout.write(f" {name}[0] = {evs[0]}")
