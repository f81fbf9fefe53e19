import json

from provenance.utils import EMPTY_PAYLOAD, parse_payload, payload_to_text, short_hex


def test_parse_payload_fields():
    p = parse_payload(json.dumps({"tempC": "5.25", "ts": 1700000000123, "nonce": "abc"}))
    assert p.temp_c == 5.25
    assert p.payload_ts == 1700000000123
    assert p.nonce == "abc"


def test_seconds_ts_scaled_to_ms():
    assert parse_payload({"ts": 1700000000}).payload_ts == 1700000000000


def test_iso_ts_parsed_as_utc():
    assert parse_payload({"ts": "2023-11-14T22:13:20Z"}).payload_ts == 1700000000000
    assert parse_payload({"ts": "2023-11-14T22:13:20"}).payload_ts == 1700000000000


def test_bad_fields_become_none():
    p = parse_payload({"tempC": "warm", "ts": "yesterday-ish", "nonce": {"x": 1}})
    assert p == EMPTY_PAYLOAD


def test_non_object_payloads_yield_empty():
    for raw in (None, "", "not json", "[1, 2]", "42", b"{oops"):
        assert parse_payload(raw) == EMPTY_PAYLOAD


def test_nan_temperature_dropped():
    assert parse_payload('{"tempC": NaN}').temp_c is None


def test_out_of_range_ts_dropped():
    p = parse_payload({"tempC": 4, "ts": 1e20})
    assert p.payload_ts is None and p.temp_c == 4.0
    assert parse_payload({"ts": -1e20}).payload_ts is None
    assert parse_payload({"ts": str(10 ** 30)}).payload_ts is None


def test_payload_to_text():
    assert payload_to_text(None) is None
    assert payload_to_text('{"a": 1}') == '{"a": 1}'
    assert payload_to_text({"a": 1, "b": [1, 2]}) == '{"a":1,"b":[1,2]}'


def test_short_hex():
    h = "0x" + "ab" * 32
    assert short_hex(h, 12, 6) == h[:12] + "…" + h[-6:]
    assert short_hex("0x1234", 12, 6) == "0x1234"
    assert short_hex(None) == ""
