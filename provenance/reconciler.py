"""
Reconciler: the only writer of batches / handoffs / sensors.

Two channels feed the sensors table without any ordering between them:
anchor events from the ledger (signer + authoritative time) and off-chain
payload uploads (raw content + derived fields). Both merge into the same row
keyed by reading_hash; whichever arrives first creates a placeholder.

No in-process locking. The unique constraints on the tables are the
serialization point: an insert that loses a race raises IntegrityError and the
operation falls back to its update path.
"""
import logging
from typing import Any, Optional

from django.db import IntegrityError, transaction

from .events import (
    BatchRegistered,
    CustodyTransferred,
    NormalizedEvent,
    SensorAnchored,
    id_to_str,
)
from .models import Batch, Handoff, SensorReading
from .utils import ParsedPayload, parse_payload, payload_to_text

logger = logging.getLogger(__name__)

# insert race retries per merge call
MAX_MERGE_ATTEMPTS = 3

_DERIVED_FIELDS = ("temp_c", "payload_ts", "nonce")


def _fill(current, new):
    """keep existing non-null value unless the new value is non-null"""
    return new if new is not None else current


class Reconciler:

    def upsert_batch(self, record: BatchRegistered) -> bool:
        """Insert if absent. Returns True when a row was created."""
        _, created = Batch.objects.get_or_create(
            batch_id=record.batch_id,
            defaults={
                "content_ref": record.content_ref,
                "manufacturer": record.manufacturer,
                "created_at": record.time,
            },
        )
        if created:
            logger.info("[reconcile] batch registered batch_id=%s", record.batch_id)
        return created

    def upsert_handoff(self, record: CustodyTransferred) -> bool:
        _, created = Handoff.objects.get_or_create(
            batch_id=record.batch_id,
            from_addr=record.from_addr,
            to_addr=record.to_addr,
            time=record.time,
        )
        if created:
            logger.info(
                "[reconcile] handoff batch_id=%s %s -> %s time=%s",
                record.batch_id, record.from_addr, record.to_addr, record.time,
            )
        return created

    def merge_sensor_anchor(self, batch_id: str, reading_hash: str, signer: str, time: int) -> SensorReading:
        reading_hash = id_to_str(reading_hash)

        def update(row: SensorReading) -> SensorReading:
            if row.signer == signer and row.time == time:
                return row
            row.signer = signer
            row.time = time
            row.save(update_fields=["signer", "time"])
            return row

        def create() -> SensorReading:
            return SensorReading.objects.create(
                batch_id=batch_id,
                reading_hash=reading_hash,
                signer=signer,
                time=time,
                raw_payload=None,
            )

        return self._merge(reading_hash, update, create, channel="anchor")

    def merge_sensor_payload(self, batch_id: str, reading_hash: str, raw_payload: Any) -> SensorReading:
        reading_hash = id_to_str(reading_hash)
        raw_text = payload_to_text(raw_payload)
        parsed: ParsedPayload = parse_payload(raw_text)

        def update(row: SensorReading) -> SensorReading:
            changed = []
            merged_raw = _fill(row.raw_payload, raw_text)
            if merged_raw != row.raw_payload:
                row.raw_payload = merged_raw
                changed.append("raw_payload")
            for name in _DERIVED_FIELDS:
                merged = _fill(getattr(row, name), getattr(parsed, name))
                if merged != getattr(row, name):
                    setattr(row, name, merged)
                    changed.append(name)
            if changed:
                row.save(update_fields=changed)
            return row

        def create() -> SensorReading:
            return SensorReading.objects.create(
                batch_id=batch_id,
                reading_hash=reading_hash,
                signer=None,
                time=None,
                raw_payload=raw_text,
                temp_c=parsed.temp_c,
                payload_ts=parsed.payload_ts,
                nonce=parsed.nonce,
            )

        return self._merge(reading_hash, update, create, channel="payload")

    def _merge(self, reading_hash: str, update, create, channel: str) -> SensorReading:
        last_error: Optional[IntegrityError] = None
        for attempt in range(1, MAX_MERGE_ATTEMPTS + 1):
            try:
                with transaction.atomic():
                    row = (
                        SensorReading.objects.select_for_update()
                        .filter(reading_hash=reading_hash)
                        .first()
                    )
                    if row is not None:
                        return update(row)
                    row = create()
                    logger.info(
                        "[reconcile] sensor placeholder via %s reading_hash=%s", channel, reading_hash
                    )
                    return row
            except IntegrityError as e:
                # another writer inserted the same reading_hash first; retry as update
                logger.info(
                    "[reconcile] %s insert lost race reading_hash=%s attempt=%d",
                    channel, reading_hash, attempt,
                )
                last_error = e
        raise last_error

    def apply(self, event: NormalizedEvent):
        if isinstance(event, BatchRegistered):
            return self.upsert_batch(event)
        if isinstance(event, CustodyTransferred):
            return self.upsert_handoff(event)
        if isinstance(event, SensorAnchored):
            return self.merge_sensor_anchor(event.batch_id, event.reading_hash, event.signer, event.time)
        raise TypeError(f"not a ledger event: {event!r}")
