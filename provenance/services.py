import logging
import time
from typing import Any, Callable, Dict, List, Optional

from django.db import DatabaseError
from django.db.models import F

from actors.lookup import ActorNameLookup

from .events import id_to_str
from .models import Batch, Handoff, SensorReading
from .reconciler import Reconciler
from .risk import RiskPolicy, score
from .utils import NameLookup, serialize_batch, serialize_handoff, serialize_sensor

logger = logging.getLogger(__name__)


class InvalidRequest(ValueError):
    """Client-side input problem; nothing has been written."""

    def __init__(self, errors: Dict[str, List[str]]):
        super().__init__(", ".join(sorted(errors)))
        self.errors = errors


class QueryService:
    """
    Read path (verify) and payload write path.

    The read path never mutates rows; it only adds display names and short
    forms. All writes go through the reconciler.
    """

    def __init__(self, reconciler: Optional[Reconciler] = None,
                 lookup_factory: Callable[[], NameLookup] = ActorNameLookup,
                 policy: Optional[RiskPolicy] = None,
                 clock: Callable[[], float] = time.time):
        self.reconciler = reconciler or Reconciler()
        self.lookup_factory = lookup_factory
        self.policy = policy or RiskPolicy.from_settings()
        self.clock = clock

    def _rows(self, what: str, batch_id: str, fetch) -> list:
        try:
            return list(fetch())
        except DatabaseError:
            logger.exception("[verify] %s query failed batch_id=%s; returning empty list", what, batch_id)
            return []

    def verify(self, batch_id: str) -> Dict[str, Any]:
        batch_id = id_to_str(batch_id)
        batch = Batch.objects.filter(batch_id=batch_id).first()

        handoffs = self._rows(
            "handoffs", batch_id,
            lambda: Handoff.objects.filter(batch_id=batch_id).order_by("time", "id"),
        )
        sensors = self._rows(
            "sensors", batch_id,
            lambda: SensorReading.objects.filter(batch_id=batch_id)
            .order_by(F("time").asc(nulls_first=True), "id"),
        )

        risk = score(batch, handoffs, sensors, now=int(self.clock()), policy=self.policy)

        names = self.lookup_factory()
        return {
            "batch": serialize_batch(batch, names),
            "handoffs": [serialize_handoff(h, names) for h in handoffs],
            "sensors": [serialize_sensor(s, names) for s in sensors],
            "risk": risk.as_dict(),
        }

    def store_payload(self, batch_id: Optional[str], reading_hash: Optional[str], raw_payload: Any) -> Dict[str, bool]:
        errors: Dict[str, List[str]] = {}
        if not batch_id or not str(batch_id).strip():
            errors["batchId"] = ["This field is required."]
        if not reading_hash or not str(reading_hash).strip():
            errors["readingHash"] = ["This field is required."]
        if errors:
            raise InvalidRequest(errors)

        self.reconciler.merge_sensor_payload(
            id_to_str(str(batch_id).strip()), str(reading_hash).strip(), raw_payload
        )
        return {"ok": True}
