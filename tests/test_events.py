import pytest

from provenance.events import (
    BatchRegistered,
    CustodyTransferred,
    SensorAnchored,
    id_to_str,
    normalize_log,
)
from provenance.exceptions import EventDecodeError


def _log(args, block=7, index=2):
    return {"args": args, "blockNumber": block, "logIndex": index}


def test_batch_registered_normalized():
    ev = normalize_log("BatchRegistered", _log(
        {"batchId": 42, "ipfsCid": "bafy123", "manufacturer": "0xAbC", "time": 1700000000}))
    assert ev == BatchRegistered("42", "bafy123", "0xAbC", 1700000000, block_number=7, log_index=2)
    assert ev.kind == "BatchRegistered"


def test_custody_transferred_normalized():
    ev = normalize_log("CustodyTransferred", _log(
        {"batchId": 1, "from": "0xA", "to": "0xB", "time": "1700000100"}))
    assert isinstance(ev, CustodyTransferred)
    assert (ev.batch_id, ev.from_addr, ev.to_addr, ev.time) == ("1", "0xA", "0xB", 1700000100)


def test_sensor_anchored_bytes_hash_is_hex():
    ev = normalize_log("SensorAnchored", _log(
        {"batchId": 3, "readingHash": bytes.fromhex("ab" * 32), "signer": "0xS", "time": 5}))
    assert isinstance(ev, SensorAnchored)
    assert ev.reading_hash == "0x" + "ab" * 32


@pytest.mark.parametrize("value, expected", [
    (10, "10"),
    (b"\x01\x02", "0x0102"),
    ("0xABCD", "0xabcd"),
    (" batch-7 ", "batch-7"),
])
def test_id_to_str(value, expected):
    assert id_to_str(value) == expected


@pytest.mark.parametrize("value", [None, "", True])
def test_id_to_str_rejects_unusable(value):
    with pytest.raises(EventDecodeError):
        id_to_str(value)


def test_missing_arg_is_decode_error():
    with pytest.raises(EventDecodeError):
        normalize_log("CustodyTransferred", _log({"batchId": 1, "from": "0xA", "time": 3}))


def test_bad_time_is_decode_error():
    with pytest.raises(EventDecodeError):
        normalize_log("BatchRegistered", _log(
            {"batchId": 1, "ipfsCid": "c", "manufacturer": "0xM", "time": "soon"}))


@pytest.mark.parametrize("time", [-1, 2 ** 63, 2 ** 70])
def test_out_of_range_time_is_decode_error(time):
    with pytest.raises(EventDecodeError):
        normalize_log("SensorAnchored", _log(
            {"batchId": 1, "readingHash": b"\x01" * 32, "signer": "0xS", "time": time}))


def test_unknown_kind():
    with pytest.raises(EventDecodeError):
        normalize_log("Paused", _log({}))
