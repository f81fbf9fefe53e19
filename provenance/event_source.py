import logging
import time
from typing import Any, Callable, Iterator, List, Optional, Union

from .events import EVENT_NAMES, NormalizedEvent, normalize_log
from .exceptions import EventDecodeError, LedgerUnavailable

logger = logging.getLogger(__name__)

BlockRef = Union[int, str]

# eth_getLogs range per request; most providers cap this
DEFAULT_BLOCK_CHUNK = 5000


class EventSource:
    """
    Reads CustodyRegistry logs through web3.

    ``backfill`` returns every event in a closed block range in ledger order.
    ``subscribe`` polls for new blocks forever and yields their events; it
    starts at the tail of the backfilled range, so the last backfilled block is
    seen twice. Writes downstream are idempotent, that overlap is harmless.
    """

    def __init__(self, w3, contract, poll_interval: float = 2.0,
                 block_chunk: int = DEFAULT_BLOCK_CHUNK,
                 sleep: Callable[[float], None] = time.sleep):
        self.w3 = w3
        self.contract = contract
        self.poll_interval = poll_interval
        self.block_chunk = max(1, int(block_chunk))
        self._sleep = sleep
        self.last_backfilled_block: Optional[int] = None
        self.last_seen_block: Optional[int] = None
        self.skipped = 0

    def head(self) -> int:
        try:
            return int(self.w3.eth.block_number)
        except Exception as e:
            raise LedgerUnavailable(f"block_number failed: {type(e).__name__}: {e}") from e

    def _get_logs(self, name: str, from_block: int, to_block: int) -> List[Any]:
        event = getattr(self.contract.events, name)
        try:
            return list(event.get_logs(from_block=from_block, to_block=to_block))
        except Exception as e:
            raise LedgerUnavailable(
                f"{name} logs [{from_block}, {to_block}] failed: {type(e).__name__}: {e}"
            ) from e

    def fetch(self, from_block: int, to_block: int) -> List[NormalizedEvent]:
        """All three event kinds over [from_block, to_block], sorted by (block, logIndex)."""
        out: List[NormalizedEvent] = []
        start = from_block
        while start <= to_block:
            end = min(to_block, start + self.block_chunk - 1)
            for name in EVENT_NAMES:
                for log in self._get_logs(name, start, end):
                    try:
                        out.append(normalize_log(name, log))
                    except EventDecodeError as e:
                        self.skipped += 1
                        logger.warning(
                            "[events] skip %s block=%s tx=%s: %s",
                            name, log.get("blockNumber"), log.get("transactionHash"), e,
                        )
            start = end + 1
        out.sort(key=lambda ev: (ev.block_number, ev.log_index))
        return out

    def backfill(self, from_block: int, to_block: BlockRef = "latest") -> List[NormalizedEvent]:
        resolved = self.head() if to_block == "latest" else int(to_block)
        logger.info("[backfill] fetching blocks %s..%s", from_block, resolved)
        events = self.fetch(int(from_block), resolved) if resolved >= int(from_block) else []
        self.last_backfilled_block = resolved
        self.last_seen_block = resolved
        logger.info("[backfill] %d events (skipped=%d)", len(events), self.skipped)
        return events

    def subscribe(self, from_block: Optional[int] = None,
                  on_block: Optional[Callable[[int], None]] = None) -> Iterator[NormalizedEvent]:
        """Unbounded. Runs until the consumer stops iterating or the process exits."""
        if from_block is not None:
            cursor = int(from_block)
        elif self.last_backfilled_block is not None:
            cursor = self.last_backfilled_block
        else:
            cursor = self.head()
        logger.info("[subscribe] polling from block %s every %.1fs", cursor, self.poll_interval)

        while True:
            batch: List[NormalizedEvent] = []
            head = None
            try:
                head = self.head()
                if head >= cursor:
                    batch = self.fetch(cursor, head)
            except LedgerUnavailable as e:
                # cursor unchanged; same range is retried next poll
                logger.warning("[subscribe] poll failed, will retry: %s", e)
                head = None

            for event in batch:
                yield event

            if head is not None and head >= cursor:
                self.last_seen_block = head
                cursor = head + 1
                if on_block is not None:
                    on_block(head)
            self._sleep(self.poll_interval)
