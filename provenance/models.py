from django.db import models


class Batch(models.Model):
    batch_id     = models.CharField(max_length=128, primary_key=True)
    content_ref  = models.CharField(max_length=256, null=True, blank=True)  # e.g. IPFS CID
    manufacturer = models.CharField(max_length=64, null=True, blank=True)
    created_at   = models.BigIntegerField(null=True, blank=True)  # unix seconds (ledger time)

    class Meta:
        db_table = "batches"

    def __str__(self):
        return f"batch {self.batch_id}"


class Handoff(models.Model):
    batch_id  = models.CharField(max_length=128, db_index=True)
    from_addr = models.CharField(max_length=64)
    to_addr   = models.CharField(max_length=64)
    time      = models.BigIntegerField()

    class Meta:
        db_table = "handoffs"
        constraints = [
            models.UniqueConstraint(
                fields=["batch_id", "from_addr", "to_addr", "time"],
                name="uniq_handoff_event",
            ),
        ]

    def __str__(self):
        return f"{self.batch_id}: {self.from_addr} -> {self.to_addr} @ {self.time}"


class SensorReading(models.Model):
    batch_id     = models.CharField(max_length=128, db_index=True)
    reading_hash = models.CharField(max_length=130, unique=True)
    signer       = models.CharField(max_length=64, null=True, blank=True)   # anchor channel
    time         = models.BigIntegerField(null=True, blank=True)            # anchor channel
    raw_payload  = models.TextField(null=True, blank=True)                  # payload channel
    temp_c       = models.FloatField(null=True, blank=True, db_column="tempC")
    payload_ts   = models.BigIntegerField(null=True, blank=True)            # ms
    nonce        = models.CharField(max_length=128, null=True, blank=True)

    class Meta:
        db_table = "sensors"

    @property
    def is_complete(self) -> bool:
        return self.signer is not None and self.raw_payload is not None

    def __str__(self):
        return f"{self.reading_hash} ({self.batch_id})"


class SyncState(models.Model):
    """Indexer progress; informational only, never consulted before a write."""
    name               = models.CharField(max_length=64, unique=True)
    start_block        = models.BigIntegerField(default=0)
    backfilled_through = models.BigIntegerField(null=True, blank=True)
    last_block         = models.BigIntegerField(null=True, blank=True)
    updated_at         = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "sync_state"

    @property
    def ready(self) -> bool:
        return self.backfilled_through is not None

    def __str__(self):
        return f"{self.name} backfilled={self.backfilled_through} last={self.last_block}"
