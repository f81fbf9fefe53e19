import json
from unittest import mock

import pytest
from django.db import DatabaseError

from actors.lookup import ActorNameLookup
from actors.models import Actor
from provenance.events import BatchRegistered, CustodyTransferred
from provenance.models import SensorReading
from provenance.risk import RiskPolicy
from provenance.services import InvalidRequest, QueryService

pytestmark = pytest.mark.django_db

NOW = 1_700_000_000
HASH_A = "0x" + "aa" * 32
HASH_B = "0x" + "bb" * 32


@pytest.fixture
def service(reconciler):
    return QueryService(reconciler, policy=RiskPolicy(), clock=lambda: NOW)


@pytest.fixture
def populated(reconciler):
    Actor.objects.create(address="0xMaker", name="Acme Pharma")
    Actor.objects.create(address="0xcarrier", name="Cold Chain Co")
    reconciler.upsert_batch(BatchRegistered("1", "bafy-cid", "0xMaker", NOW - 5000))
    reconciler.upsert_handoff(CustodyTransferred("1", "0xCarrier", "0xShop", NOW - 1000))
    reconciler.upsert_handoff(CustodyTransferred("1", "0xMaker", "0xCarrier", NOW - 3000))
    reconciler.merge_sensor_anchor("1", HASH_B, "0xMaker", NOW - 10)
    reconciler.merge_sensor_anchor("1", HASH_A, "0xUnknown", NOW - 2000)
    reconciler.merge_sensor_payload("1", HASH_A, json.dumps({"tempC": 4.0, "nonce": 1}))


def test_verify_composes_ordered_enriched_timeline(service, populated):
    body = service.verify("1")

    assert body["batch"]["content_ref"] == "bafy-cid"
    assert body["batch"]["manufacturer_name"] == "Acme Pharma"

    handoffs = body["handoffs"]
    assert [h["time"] for h in handoffs] == [NOW - 3000, NOW - 1000]
    assert handoffs[0]["from_name"] == "Acme Pharma"
    assert handoffs[0]["to_name"] == "Cold Chain Co"  # case-insensitive match
    assert handoffs[1]["to_name"] is None

    sensors = body["sensors"]
    assert [s["reading_hash"] for s in sensors] == [HASH_A, HASH_B]
    assert sensors[0]["signer_name"] is None
    assert sensors[0]["tempC"] == 4.0
    assert sensors[0]["complete"] is True
    assert sensors[1]["complete"] is False
    assert sensors[0]["short_hash"] == HASH_A[:12] + "…" + HASH_A[-6:]

    assert body["risk"] == {"score": 0, "reasons": [], "label": "Authentic"}


def test_verify_unknown_batch_is_not_an_error(service):
    body = service.verify("404")
    assert body["batch"] is None
    assert body["handoffs"] == [] and body["sensors"] == []
    assert body["risk"]["score"] == 90
    assert body["risk"]["label"] == "Suspicious"


def test_verify_does_not_mutate_rows(service, populated):
    before = list(SensorReading.objects.order_by("id").values())
    service.verify("1")
    assert list(SensorReading.objects.order_by("id").values()) == before


def test_unanchored_payload_sorts_first(service, reconciler):
    reconciler.merge_sensor_anchor("2", HASH_A, "0xS", NOW)
    reconciler.merge_sensor_payload("2", HASH_B, "{}")
    sensors = service.verify("2")["sensors"]
    assert [s["time"] for s in sensors] == [None, NOW]


def test_failing_subquery_degrades_to_empty_list(service, populated):
    real_rows = service._rows

    def broken():
        raise DatabaseError("no such table: handoffs")

    def only_handoffs_fail(what, batch_id, fetch):
        return real_rows(what, batch_id, broken if what == "handoffs" else fetch)

    with mock.patch.object(service, "_rows", side_effect=only_handoffs_fail):
        body = service.verify("1")

    assert body["handoffs"] == []
    assert len(body["sensors"]) == 2
    assert "No custody transfers recorded" in body["risk"]["reasons"]


def test_lookup_failure_degrades_to_null_name(populated):
    lookup = ActorNameLookup()
    with mock.patch("actors.lookup.Actor.objects.filter", side_effect=DatabaseError("locked")):
        assert lookup("0xMaker") is None


def test_store_payload_requires_ids(service):
    with pytest.raises(InvalidRequest) as exc:
        service.store_payload("", None, "{}")
    assert set(exc.value.errors) == {"batchId", "readingHash"}
    assert SensorReading.objects.count() == 0


def test_store_payload_twice_is_a_noop(service):
    raw = json.dumps({"tempC": 6.5, "ts": NOW, "nonce": "n"})
    assert service.store_payload("1", HASH_A, raw) == {"ok": True}
    first = list(SensorReading.objects.values())
    assert service.store_payload("1", HASH_A, raw) == {"ok": True}
    assert list(SensorReading.objects.values()) == first
